"""Reference data providers and similarity matrix selection.

A provider is passed explicitly into the analysis; there is no global
registry, so tests can substitute small fixture matrices.
"""

from pathlib import Path
from typing import Protocol

import polars as pl
import structlog

from degembed.config.schema import DataFilesConfig, DEGEmbedConfig
from degembed.errors import InvalidInputError, MissingInputError
from degembed.genes.universe import GeneUniverse, validate_gene_universe
from degembed.similarity.categories import Category
from degembed.similarity.matrix import (
    EmbeddingTable,
    SimilarityMatrix,
    cosine_similarity,
)

logger = structlog.get_logger(__name__)

MATRIX_NAMES = ("GOBP", "CP", "MOA")


class ReferenceDataProvider(Protocol):
    """Read-only access to the bundled reference datasets."""

    def gene_universe(self) -> GeneUniverse:
        ...

    def similarity_matrix(self, name: str) -> SimilarityMatrix:
        """Precomputed matrix by name: 'GOBP', 'CP' or 'MOA'."""
        ...

    def gene_embeddings(self) -> EmbeddingTable | None:
        ...


def read_table(path: Path) -> pl.DataFrame:
    """Read a Parquet, TSV or CSV table with polars.

    Raises:
        MissingInputError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise MissingInputError(f"Reference data file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return pl.read_parquet(path)
    if suffix in (".tsv", ".txt", ".tab"):
        return pl.read_csv(path, separator="\t")
    return pl.read_csv(path)


def read_gene_list(path: Path) -> list[str]:
    """Read gene symbols: one per line for .txt, first column for tables."""
    path = Path(path)
    if not path.exists():
        raise MissingInputError(f"Gene list file not found: {path}")
    if path.suffix.lower() == ".txt":
        with open(path) as f:
            return [line.strip() for line in f if line.strip()]
    df = read_table(path)
    return [g for g in df[df.columns[0]].cast(pl.Utf8).to_list() if g]


class InMemoryReferenceData:
    """Provider over objects that are already loaded."""

    def __init__(
        self,
        universe: GeneUniverse,
        matrices: dict[str, SimilarityMatrix] | None = None,
        gene_embedding_table: EmbeddingTable | None = None,
    ):
        self._universe = universe
        self._matrices = dict(matrices or {})
        self._gene_embeddings = gene_embedding_table

    def gene_universe(self) -> GeneUniverse:
        return self._universe

    def similarity_matrix(self, name: str) -> SimilarityMatrix:
        if name not in self._matrices:
            raise MissingInputError(f"No '{name}' similarity matrix available")
        return self._matrices[name]

    def gene_embeddings(self) -> EmbeddingTable | None:
        return self._gene_embeddings


class FileReferenceData:
    """Provider that loads reference datasets from a data directory.

    Each dataset is read lazily on first access and kept for the
    lifetime of the provider.
    """

    def __init__(self, data_dir: Path, files: DataFilesConfig | None = None):
        self.data_dir = Path(data_dir)
        self.files = files or DataFilesConfig()
        self._universe: GeneUniverse | None = None
        self._matrices: dict[str, SimilarityMatrix] = {}
        self._gene_embeddings: EmbeddingTable | None = None

    @classmethod
    def from_config(cls, config: DEGEmbedConfig) -> "FileReferenceData":
        return cls(data_dir=config.data_dir, files=config.files)

    def _path(self, file_name: str) -> Path:
        return self.data_dir / file_name

    def gene_universe(self) -> GeneUniverse:
        if self._universe is None:
            path = self._path(self.files.gene_list)
            genes = read_gene_list(path)
            validation = validate_gene_universe(genes)
            if not validation.passed:
                logger.warning(
                    "gene_universe_validation_failed",
                    path=str(path),
                    messages=validation.messages,
                )
            self._universe = GeneUniverse(genes)
            logger.info("gene_universe_loaded", path=str(path), genes=len(self._universe))
        return self._universe

    def similarity_matrix(self, name: str) -> SimilarityMatrix:
        if name not in MATRIX_NAMES:
            raise InvalidInputError(
                f"Unknown similarity matrix '{name}'. Must be one of {MATRIX_NAMES}"
            )
        if name not in self._matrices:
            file_name = {
                "GOBP": self.files.gobp_similarity,
                "CP": self.files.cp_similarity,
                "MOA": self.files.moa_similarity,
            }[name]
            path = self._path(file_name)
            matrix = SimilarityMatrix.from_frame(read_table(path))
            logger.info(
                "similarity_matrix_loaded",
                name=name,
                path=str(path),
                genes=matrix.shape[0],
                functions=matrix.shape[1],
            )
            self._matrices[name] = matrix
        return self._matrices[name]

    def gene_embeddings(self) -> EmbeddingTable | None:
        if self._gene_embeddings is None:
            path = self._path(self.files.gene_embedding)
            self._gene_embeddings = EmbeddingTable.from_frame(read_table(path))
            logger.info(
                "gene_embeddings_loaded",
                path=str(path),
                genes=self._gene_embeddings.shape[0],
                dimensions=self._gene_embeddings.dimensions,
            )
        return self._gene_embeddings


def load_embedding_table(path: Path) -> EmbeddingTable:
    """Load a function embedding table saved as Parquet/TSV/CSV."""
    return EmbeddingTable.from_frame(read_table(path))


def select_similarity_matrix(
    category: Category | str,
    provider: ReferenceDataProvider,
    function_embeddings: EmbeddingTable | None = None,
) -> SimilarityMatrix:
    """Resolve a category to the genes x functions matrix it analyzes.

    Args:
        category: Category or case-insensitive category string
        provider: Reference data provider
        function_embeddings: Function embedding table, required for CUSTOMIZED

    Returns:
        Full precomputed matrix, a pathway-source column slice of it, or
        cosine similarities computed from gene and function embeddings

    Raises:
        InvalidInputError: Missing category, or a slice with no columns
        UnknownCategoryError: Unrecognized category
        MissingInputError: CUSTOMIZED without both embedding tables
    """
    category = Category.parse(category)

    if category is Category.CUSTOMIZED:
        if function_embeddings is None:
            raise MissingInputError(
                "Missing embedding input: the Customized category requires function embeddings"
            )
        gene_embeddings = provider.gene_embeddings()
        if gene_embeddings is None:
            raise MissingInputError(
                "Missing gene embeddings: the Customized category requires a gene embedding table"
            )
        matrix = cosine_similarity(gene_embeddings, function_embeddings)
        logger.info(
            "custom_similarity_computed",
            genes=matrix.shape[0],
            functions=matrix.shape[1],
        )
        return matrix

    matrix = provider.similarity_matrix(category.source_matrix)
    prefix = category.column_prefix
    if prefix is not None:
        matrix = matrix.columns_with_prefix(prefix)
        if matrix.shape[1] == 0:
            raise InvalidInputError(f"No functions found for category {category.value}")
    logger.info(
        "similarity_matrix_selected",
        category=category.value,
        functions=matrix.shape[1],
    )
    return matrix
