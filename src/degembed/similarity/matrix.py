"""Labeled numeric matrices: similarity matrices and embedding tables.

Values are stored as float64 numpy arrays; labels are kept alongside so
rows and columns can be addressed by gene or function name. Tables on
disk are polars frames whose first column holds the row labels.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import polars as pl

from degembed.errors import InvalidInputError
from degembed.similarity.categories import PATHWAY_PREFIX_DELIMITER


@dataclass(frozen=True, eq=False)
class LabeledMatrix:
    """2-D float matrix with row and column labels."""

    row_labels: tuple[str, ...]
    column_labels: tuple[str, ...]
    values: np.ndarray

    def __post_init__(self):
        values = np.asarray(self.values, dtype=np.float64)
        if values.ndim != 2:
            raise InvalidInputError(f"Expected a 2-D matrix, got {values.ndim} dimensions")
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "row_labels", tuple(str(r) for r in self.row_labels))
        object.__setattr__(self, "column_labels", tuple(str(c) for c in self.column_labels))
        if values.shape != (len(self.row_labels), len(self.column_labels)):
            raise InvalidInputError(
                f"Matrix shape {values.shape} does not match "
                f"{len(self.row_labels)} row labels x {len(self.column_labels)} column labels"
            )

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape

    @classmethod
    def from_frame(cls, df: pl.DataFrame, label_column: str | None = None):
        """Build from a polars frame whose label column holds row labels.

        Args:
            df: Frame with one label column and numeric value columns
            label_column: Name of the label column (default: first column)

        Raises:
            InvalidInputError: On non-numeric, null or non-finite values
        """
        if df.width < 2:
            raise InvalidInputError(
                "Table needs a label column and at least one value column"
            )
        label_column = label_column or df.columns[0]
        value_columns = [c for c in df.columns if c != label_column]
        try:
            values = df.select(value_columns).cast(pl.Float64).to_numpy()
        except (pl.exceptions.InvalidOperationError, pl.exceptions.ComputeError) as e:
            raise InvalidInputError(f"Table has non-numeric value columns: {e}") from e
        bad = ~np.isfinite(values).all(axis=0)
        if bad.any():
            names = [value_columns[j] for j in np.flatnonzero(bad)]
            raise InvalidInputError(
                f"{len(names)} columns have null or non-finite values "
                f"(first: {', '.join(names[:5])})"
            )
        return cls(
            row_labels=tuple(df[label_column].cast(pl.Utf8).to_list()),
            column_labels=tuple(value_columns),
            values=values,
        )

    def to_frame(self, label_column: str = "label") -> pl.DataFrame:
        """Convert to a polars frame with a leading label column."""
        data = {label_column: list(self.row_labels)}
        for j, name in enumerate(self.column_labels):
            data[name] = self.values[:, j]
        return pl.DataFrame(data)

    def row_positions(self) -> dict[str, int]:
        """Map each row label to its first row index."""
        positions: dict[str, int] = {}
        for i, label in enumerate(self.row_labels):
            positions.setdefault(label, i)
        return positions


class SimilarityMatrix(LabeledMatrix):
    """Genes (rows) x functions (columns) cosine similarities in [-1, 1]."""

    @property
    def genes(self) -> tuple[str, ...]:
        return self.row_labels

    @property
    def functions(self) -> tuple[str, ...]:
        return self.column_labels

    def select_columns(self, indices: Sequence[int]) -> "SimilarityMatrix":
        """Return a new matrix restricted to the given column indices."""
        indices = list(indices)
        return SimilarityMatrix(
            row_labels=self.row_labels,
            column_labels=tuple(self.column_labels[j] for j in indices),
            values=self.values[:, indices],
        )

    def columns_with_prefix(
        self,
        prefix: str,
        delimiter: str = PATHWAY_PREFIX_DELIMITER,
    ) -> "SimilarityMatrix":
        """Keep columns whose name up to the first delimiter equals prefix."""
        indices = [
            j for j, name in enumerate(self.column_labels)
            if name.split(delimiter, 1)[0] == prefix
        ]
        return self.select_columns(indices)


class EmbeddingTable(LabeledMatrix):
    """Text embeddings: one row per gene or function, one column per dimension."""

    @property
    def labels(self) -> tuple[str, ...]:
        return self.row_labels

    @property
    def dimensions(self) -> int:
        return self.values.shape[1]

    @classmethod
    def from_vectors(
        cls,
        labels: Sequence[str],
        vectors: Sequence[Sequence[float]] | np.ndarray,
    ) -> "EmbeddingTable":
        values = np.asarray(vectors, dtype=np.float64)
        if values.ndim == 1:
            values = values.reshape(1, -1)
        return cls(
            row_labels=tuple(labels),
            column_labels=tuple(f"dim_{k}" for k in range(values.shape[1])),
            values=values,
        )

    def write_parquet(self, path: Path) -> Path:
        """Save as Parquet with a leading 'name' column."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame(label_column="name").write_parquet(path)
        return path


def l2_normalize_rows(table: LabeledMatrix) -> np.ndarray:
    """Divide every row by its Euclidean norm.

    Raises:
        InvalidInputError: If any row has zero or non-finite norm, since its
            cosine similarity would be undefined
    """
    norms = np.linalg.norm(table.values, axis=1)
    bad = ~np.isfinite(norms) | (norms == 0.0)
    if bad.any():
        labels = [table.row_labels[i] for i in np.flatnonzero(bad)]
        raise InvalidInputError(
            f"{len(labels)} embedding rows have zero or non-finite norm "
            f"(first: {labels[:5]}); cosine similarity is undefined for them"
        )
    return table.values / norms[:, np.newaxis]


def cosine_similarity(
    gene_embeddings: EmbeddingTable,
    function_embeddings: EmbeddingTable,
) -> SimilarityMatrix:
    """Cosine similarity between every gene and every function embedding.

    Both tables are L2-normalized by row and multiplied
    (genes_norm @ functions_norm.T). Column labels are the function labels.

    Raises:
        InvalidInputError: On mismatched widths or degenerate rows
    """
    if gene_embeddings.dimensions != function_embeddings.dimensions:
        raise InvalidInputError(
            f"Embedding widths differ: genes have {gene_embeddings.dimensions} "
            f"dimensions, functions have {function_embeddings.dimensions}"
        )
    genes_norm = l2_normalize_rows(gene_embeddings)
    functions_norm = l2_normalize_rows(function_embeddings)
    similarity = np.clip(genes_norm @ functions_norm.T, -1.0, 1.0)
    return SimilarityMatrix(
        row_labels=gene_embeddings.row_labels,
        column_labels=function_embeddings.row_labels,
        values=similarity,
    )
