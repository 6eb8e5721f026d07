"""Tests for categories, labeled matrices and reference data providers."""

import numpy as np
import polars as pl
import pytest

from degembed.config.schema import DataFilesConfig
from degembed.errors import InvalidInputError, MissingInputError, UnknownCategoryError
from degembed.similarity import (
    Category,
    EmbeddingTable,
    FileReferenceData,
    InMemoryReferenceData,
    SimilarityMatrix,
    cosine_similarity,
    load_embedding_table,
    read_gene_list,
    select_similarity_matrix,
)

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
N_GENES = 200


@pytest.mark.parametrize("raw,expected", [
    ("GOBP", Category.GOBP),
    ("gobp", Category.GOBP),
    ("C2CP_all", Category.C2CP_ALL),
    ("c2cp_all", Category.C2CP_ALL),
    (" kegg ", Category.KEGG),
    ("Customized", Category.CUSTOMIZED),
    ("MOA", Category.MOA),
])
def test_category_parse(raw, expected):
    assert Category.parse(raw) is expected


def test_category_parse_unknown():
    with pytest.raises(UnknownCategoryError, match="FOOBAR"):
        Category.parse("FOOBAR")


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_category_parse_missing(raw):
    with pytest.raises(InvalidInputError, match="Category is required"):
        Category.parse(raw)


def test_unknown_category_is_invalid_input():
    """Test that an unknown category can be caught as InvalidInputError."""
    with pytest.raises(InvalidInputError):
        Category.parse("PANTHER")


def test_category_matrix_selectors():
    assert Category.GOBP.source_matrix == "GOBP"
    assert Category.MOA.source_matrix == "MOA"
    assert Category.C2CP_ALL.source_matrix == "CP"
    assert Category.REACTOME.source_matrix == "CP"
    assert Category.CUSTOMIZED.source_matrix is None
    assert Category.REACTOME.column_prefix == "REACTOME"
    assert Category.C2CP_ALL.column_prefix is None


def test_matrix_shape_mismatch():
    with pytest.raises(InvalidInputError):
        SimilarityMatrix(
            row_labels=("A", "B"),
            column_labels=("F1",),
            values=np.zeros((3, 1)),
        )


def test_matrix_from_frame_uses_first_column_as_labels():
    df = pl.DataFrame({
        "gene": ["A", "B", "C"],
        "KEGG_X": [0.1, 0.2, 0.3],
        "WP_Y": [0.4, 0.5, 0.6],
    })

    matrix = SimilarityMatrix.from_frame(df)

    assert matrix.genes == ("A", "B", "C")
    assert matrix.functions == ("KEGG_X", "WP_Y")
    assert matrix.values[1, 1] == pytest.approx(0.5)


def test_matrix_from_frame_rejects_text_values():
    df = pl.DataFrame({"gene": ["A", "B"], "F": ["high", "low"]})

    with pytest.raises(InvalidInputError, match="non-numeric"):
        SimilarityMatrix.from_frame(df)


@pytest.mark.parametrize("bad_value", [None, float("nan"), float("inf")])
def test_matrix_from_frame_rejects_missing_values(bad_value):
    """Test that null, NaN and infinite similarities are refused at load."""
    df = pl.DataFrame({
        "gene": ["A", "B", "C"],
        "KEGG_X": [0.1, 0.2, 0.3],
        "WP_Y": [bad_value, 0.2, 0.3],
    }, schema={"gene": pl.Utf8, "KEGG_X": pl.Float64, "WP_Y": pl.Float64})

    with pytest.raises(InvalidInputError, match="WP_Y"):
        SimilarityMatrix.from_frame(df)


def test_columns_with_prefix_matches_whole_source_tag():
    """Test that KEGG does not match a KEGGLIKE_ column."""
    matrix = SimilarityMatrix(
        row_labels=("A",),
        column_labels=("KEGG_APOPTOSIS", "KEGGLIKE_X", "WP_Y", "KEGG_MAPK"),
        values=np.array([[0.1, 0.2, 0.3, 0.4]]),
    )

    sliced = matrix.columns_with_prefix("KEGG")

    assert sliced.functions == ("KEGG_APOPTOSIS", "KEGG_MAPK")
    np.testing.assert_allclose(sliced.values, [[0.1, 0.4]])


def test_cosine_similarity_known_value():
    genes = EmbeddingTable.from_vectors(["G1", "G2"], [[1.0, 0.0], [0.0, 3.0]])
    functions = EmbeddingTable.from_vectors(["F"], [[1.0, 1.0]])

    matrix = cosine_similarity(genes, functions)

    assert matrix.genes == ("G1", "G2")
    assert matrix.functions == ("F",)
    np.testing.assert_allclose(matrix.values[:, 0], [0.70710678, 0.70710678])


def test_cosine_similarity_is_bounded():
    rng = np.random.default_rng(3)
    genes = EmbeddingTable.from_vectors(
        [f"G{i}" for i in range(50)], rng.normal(size=(50, 12))
    )
    functions = EmbeddingTable.from_vectors(
        ["F1", "F2", "F3"], rng.normal(size=(3, 12))
    )
    parallel = EmbeddingTable.from_vectors(["SELF"], genes.values[:1] * 5.0)

    matrix = cosine_similarity(genes, functions)
    self_similarity = cosine_similarity(genes, parallel)

    assert np.all(matrix.values >= -1.0)
    assert np.all(matrix.values <= 1.0)
    assert self_similarity.values[0, 0] == pytest.approx(1.0)


def test_cosine_similarity_zero_norm_row():
    genes = EmbeddingTable.from_vectors(["G1", "ZERO"], [[1.0, 2.0], [0.0, 0.0]])
    functions = EmbeddingTable.from_vectors(["F"], [[1.0, 1.0]])

    with pytest.raises(InvalidInputError, match="zero or non-finite norm"):
        cosine_similarity(genes, functions)


def test_cosine_similarity_width_mismatch():
    genes = EmbeddingTable.from_vectors(["G1"], [[1.0, 2.0, 3.0]])
    functions = EmbeddingTable.from_vectors(["F"], [[1.0, 1.0]])

    with pytest.raises(InvalidInputError, match="widths differ"):
        cosine_similarity(genes, functions)


def test_select_full_gobp(reference_data):
    matrix = select_similarity_matrix("GOBP", reference_data)

    assert matrix.functions == tuple(GOBP_TERMS)
    assert matrix.shape == (N_GENES, len(GOBP_TERMS))


def test_select_c2cp_all_keeps_every_pathway(reference_data):
    matrix = select_similarity_matrix(Category.C2CP_ALL, reference_data)

    assert matrix.functions == tuple(CP_TERMS)


def test_select_pathway_source_slice(reference_data):
    matrix = select_similarity_matrix("kegg", reference_data)

    assert matrix.functions == ("KEGG_SIGNAL", "KEGG_NOISE")


def test_select_moa(reference_data):
    matrix = select_similarity_matrix("MOA", reference_data)

    assert matrix.functions == tuple(MOA_TERMS)


def test_select_empty_slice(universe):
    cp = SimilarityMatrix(
        row_labels=universe.genes,
        column_labels=("KEGG_ONLY",),
        values=np.zeros((len(universe), 1)),
    )
    provider = InMemoryReferenceData(universe, matrices={"CP": cp})

    with pytest.raises(InvalidInputError, match="No functions found"):
        select_similarity_matrix("PID", provider)


def test_select_customized(reference_data, function_embeddings):
    matrix = select_similarity_matrix(
        "Customized", reference_data, function_embeddings=function_embeddings
    )

    assert matrix.functions == ("STING Pathway in Cancer Immunotherapy",)
    assert matrix.shape == (N_GENES, 1)


def test_select_customized_without_embeddings(reference_data):
    with pytest.raises(MissingInputError, match="Missing embedding input"):
        select_similarity_matrix("Customized", reference_data)


def test_select_customized_without_gene_embeddings(universe, function_embeddings):
    provider = InMemoryReferenceData(universe)

    with pytest.raises(MissingInputError, match="gene embeddings"):
        select_similarity_matrix(
            "Customized", provider, function_embeddings=function_embeddings
        )


def test_file_reference_data_loads_lazily(data_dir):
    provider = FileReferenceData(data_dir)

    universe = provider.gene_universe()
    gobp = provider.similarity_matrix("GOBP")

    assert len(universe) == N_GENES
    assert gobp.functions == tuple(GOBP_TERMS)
    assert provider.similarity_matrix("GOBP") is gobp
    assert provider.gene_embeddings().shape == (N_GENES, 16)


def test_file_reference_data_missing_file(tmp_path):
    provider = FileReferenceData(tmp_path, DataFilesConfig(moa_similarity="absent.parquet"))

    with pytest.raises(MissingInputError, match="absent.parquet"):
        provider.similarity_matrix("MOA")


def test_file_reference_data_unknown_matrix(data_dir):
    with pytest.raises(InvalidInputError):
        FileReferenceData(data_dir).similarity_matrix("HALLMARK")


def test_read_gene_list_text_and_table(tmp_path):
    txt = tmp_path / "degs.txt"
    txt.write_text("TP53\n\nBRCA1\n  EGFR  \n")
    tsv = tmp_path / "degs.tsv"
    tsv.write_text("symbol\tlog2fc\nTP53\t1.5\nMYC\t-2.0\n")

    assert read_gene_list(txt) == ["TP53", "BRCA1", "EGFR"]
    assert read_gene_list(tsv) == ["TP53", "MYC"]


def test_read_gene_list_missing(tmp_path):
    with pytest.raises(MissingInputError):
        read_gene_list(tmp_path / "none.txt")


def test_embedding_table_parquet_round_trip(tmp_path, function_embeddings):
    path = function_embeddings.write_parquet(tmp_path / "emb" / "functions.parquet")

    loaded = load_embedding_table(path)

    assert pl.read_parquet(path).columns[0] == "name"
    assert loaded.labels == function_embeddings.labels
    np.testing.assert_allclose(loaded.values, function_embeddings.values)
