"""Shared synthetic reference data for the test suite.

Universe: 200 genes GENE000..GENE199. The first 20 are the DEGs.
Every matrix has one "signal" column where DEGs sit near 0.5 and all
other genes near 0.1; the remaining columns are noise around 0.1.
"""

from pathlib import Path

import numpy as np
import pytest

from degembed.genes import GeneUniverse
from degembed.similarity import (
    EmbeddingTable,
    InMemoryReferenceData,
    SimilarityMatrix,
)

N_GENES = 200
N_DEGS = 20
EMBEDDING_DIM = 16

GOBP_TERMS = ["GOBP_SIGNAL", "GOBP_NOISE_A", "GOBP_NOISE_B", "GOBP_NOISE_C"]
CP_TERMS = [
    "KEGG_SIGNAL",
    "KEGG_NOISE",
    "REACTOME_NOISE",
    "WP_NOISE",
    "BIOCARTA_NOISE",
    "PID_NOISE",
]
MOA_TERMS = ["MOA_SIGNAL", "MOA_NOISE"]


def gene_symbols(n: int = N_GENES) -> list[str]:
    return [f"GENE{i:03d}" for i in range(n)]


def build_matrix(terms: list[str], seed: int) -> SimilarityMatrix:
    rng = np.random.default_rng(seed)
    values = rng.normal(0.1, 0.02, size=(N_GENES, len(terms)))
    for j, term in enumerate(terms):
        if term.endswith("SIGNAL"):
            values[:N_DEGS, j] = rng.normal(0.5, 0.02, size=N_DEGS)
    return SimilarityMatrix(
        row_labels=tuple(gene_symbols()),
        column_labels=tuple(terms),
        values=values,
    )


def build_gene_embeddings(seed: int = 7) -> EmbeddingTable:
    rng = np.random.default_rng(seed)
    return EmbeddingTable.from_vectors(
        gene_symbols(),
        rng.normal(0.0, 1.0, size=(N_GENES, EMBEDDING_DIM)),
    )


@pytest.fixture
def universe() -> GeneUniverse:
    return GeneUniverse(gene_symbols())


@pytest.fixture
def degs() -> list[str]:
    return gene_symbols()[:N_DEGS]


@pytest.fixture
def reference_data(universe) -> InMemoryReferenceData:
    """In-memory provider with GOBP, CP and MOA matrices and gene embeddings."""
    return InMemoryReferenceData(
        universe=universe,
        matrices={
            "GOBP": build_matrix(GOBP_TERMS, seed=1),
            "CP": build_matrix(CP_TERMS, seed=2),
            "MOA": build_matrix(MOA_TERMS, seed=3),
        },
        gene_embedding_table=build_gene_embeddings(),
    )


@pytest.fixture
def function_embeddings() -> EmbeddingTable:
    rng = np.random.default_rng(11)
    return EmbeddingTable.from_vectors(
        ["STING Pathway in Cancer Immunotherapy"],
        rng.normal(0.0, 1.0, size=(1, EMBEDDING_DIM)),
    )


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Reference datasets written to disk in the default file layout."""
    directory = tmp_path / "data"
    directory.mkdir()

    build_matrix(GOBP_TERMS, seed=1).to_frame("gene").write_parquet(
        directory / "gobp_similarity.parquet"
    )
    build_matrix(CP_TERMS, seed=2).to_frame("gene").write_parquet(
        directory / "c2cp_similarity.parquet"
    )
    build_matrix(MOA_TERMS, seed=3).to_frame("gene").write_parquet(
        directory / "moa_similarity.parquet"
    )
    build_gene_embeddings().to_frame("gene").write_parquet(
        directory / "gene_embedding.parquet"
    )
    (directory / "gene_list.txt").write_text("\n".join(gene_symbols()) + "\n")

    return directory


@pytest.fixture
def config_file(tmp_path, data_dir) -> Path:
    """Config YAML pointing at the on-disk reference datasets."""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text(f"""
data_dir: {data_dir}
output_dir: {tmp_path / "results"}
analysis:
  min_degs: 15
  max_degs: 500
  top_n: 10
  workers: 2
openai:
  max_retries: 1
  timeout_seconds: 5
""")
    return config_path
