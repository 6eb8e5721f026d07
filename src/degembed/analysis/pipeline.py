"""End-to-end DEG vs. function analysis."""

import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np
import polars as pl
import structlog

from degembed.analysis.aggregate import P_VALUE_COLUMN, aggregate
from degembed.config.schema import AnalysisSettings
from degembed.errors import DegenerateGroupError, MissingInputError
from degembed.genes.resolver import GeneGroups, resolve_groups
from degembed.similarity.categories import Category
from degembed.similarity.matrix import EmbeddingTable, SimilarityMatrix
from degembed.similarity.provider import ReferenceDataProvider, select_similarity_matrix
from degembed.stats.comparator import ComparisonResult, compare_function

logger = structlog.get_logger(__name__)

MAX_DEFAULT_WORKERS = 8


@dataclass(frozen=True)
class AnalysisResult:
    """Ranked result table plus the inputs that produced it."""

    table: pl.DataFrame
    groups: GeneGroups
    category: Category
    n_functions: int

    def significant(self, alpha: float = 0.05) -> pl.DataFrame:
        """Rows with raw p-value below alpha (no multiple-testing correction)."""
        return self.table.filter(pl.col(P_VALUE_COLUMN) < alpha)


@dataclass(frozen=True)
class RowIndex:
    """Matrix row positions of the DEG and background groups."""

    deg_index: np.ndarray
    deg_labels: tuple[str, ...]
    bkg_index: np.ndarray


def default_workers() -> int:
    return min(MAX_DEFAULT_WORKERS, os.cpu_count() or 1)


def index_groups(matrix: SimilarityMatrix, groups: GeneGroups) -> RowIndex:
    """Locate DEG and background genes among the matrix rows.

    Background rows are those in the resolved background group that are
    not DEGs. DEGs without a matrix row are skipped with a warning.
    """
    positions = matrix.row_positions()

    deg_labels = tuple(g for g in groups.degs if g in positions)
    missing = [g for g in groups.degs if g not in positions]
    if missing:
        logger.warning(
            "degs_missing_from_matrix",
            missing_count=len(missing),
            examples=missing[:5],
        )

    deg_set = groups.deg_set
    bkg_set = groups.background_set
    bkg_index = [
        i for gene, i in positions.items()
        if gene in bkg_set and gene not in deg_set
    ]

    return RowIndex(
        deg_index=np.array([positions[g] for g in deg_labels], dtype=np.intp),
        deg_labels=deg_labels,
        bkg_index=np.array(bkg_index, dtype=np.intp),
    )


def compare_all(
    matrix: SimilarityMatrix,
    rows: RowIndex,
    settings: AnalysisSettings,
) -> list[ComparisonResult]:
    """Compare every function column, in column order.

    Columns are independent, so they are mapped over a bounded thread pool;
    results come back in submission order.
    """
    if rows.deg_index.size < 2 or rows.bkg_index.size < 2:
        raise DegenerateGroupError(
            f"Too few genes in the similarity matrix: {rows.deg_index.size} DEGs and "
            f"{rows.bkg_index.size} background genes (at least 2 each required)"
        )

    values = matrix.values
    functions = matrix.functions

    def compare_column(j: int) -> ComparisonResult:
        return compare_function(
            functions[j],
            values[:, j],
            rows.deg_index,
            rows.bkg_index,
            rows.deg_labels,
            top_n=settings.top_n,
            conf_level=settings.conf_level,
            ci_method=settings.ci_method,
        )

    n_functions = len(functions)
    workers = settings.workers or default_workers()
    logger.info(
        "comparison_start",
        functions=n_functions,
        degs=int(rows.deg_index.size),
        background=int(rows.bkg_index.size),
        workers=workers,
    )

    if workers == 1 or n_functions <= 1:
        return [compare_column(j) for j in range(n_functions)]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(compare_column, range(n_functions)))


def run_deg_embed(
    degs: Sequence[str],
    provider: ReferenceDataProvider,
    category: Category | str,
    bkgs: Sequence[str] | None = None,
    function_embeddings: EmbeddingTable | None = None,
    settings: AnalysisSettings | None = None,
) -> AnalysisResult:
    """Compare DEG vs. background cosine similarities across functions.

    For each function in the selected category, runs a one-tailed
    rank-sum test (DEGs > background), computes median similarities,
    their difference, Cliff's delta with a confidence interval, and the
    DEGs most similar to the function. Rows are ranked by ascending raw
    p-value.

    Args:
        degs: Differentially expressed gene symbols
        provider: Reference data provider (universe, matrices, gene embeddings)
        category: GOBP, C2CP_ALL, BIOCARTA, KEGG, PID, REACTOME, WP, MOA or
            CUSTOMIZED (case-insensitive)
        bkgs: Background gene symbols; None uses the whole gene universe
        function_embeddings: Function embedding table for CUSTOMIZED
        settings: Analysis settings (defaults if None)

    Returns:
        AnalysisResult with the ranked table

    Raises:
        InvalidInputError: DEG count outside bounds, missing category,
            degenerate embeddings
        UnknownCategoryError: Unrecognized category
        MissingInputError: CUSTOMIZED without embeddings
        DegenerateGroupError: Fewer than 2 genes in a group
    """
    settings = settings or AnalysisSettings()
    category = Category.parse(category)
    if category is Category.CUSTOMIZED and function_embeddings is None:
        raise MissingInputError(
            "Missing embedding input: the Customized category requires function embeddings"
        )

    groups = resolve_groups(
        degs,
        bkgs,
        provider.gene_universe(),
        min_degs=settings.min_degs,
        max_degs=settings.max_degs,
    )
    matrix = select_similarity_matrix(category, provider, function_embeddings)
    rows = index_groups(matrix, groups)

    results = compare_all(matrix, rows, settings)
    table = aggregate(results)

    logger.info(
        "comparison_complete",
        category=category.value,
        functions=table.height,
        significant=table.filter(pl.col(P_VALUE_COLUMN) < settings.significance_level).height,
    )

    return AnalysisResult(
        table=table,
        groups=groups,
        category=category,
        n_functions=table.height,
    )
