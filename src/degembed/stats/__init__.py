"""Rank-sum testing, Cliff's delta and the per-function comparator."""

from degembed.stats.comparator import (
    TOP_N_DEGS,
    ComparisonResult,
    compare_function,
    format_top_genes,
)
from degembed.stats.effect_size import (
    MAGNITUDE_THRESHOLDS,
    CliffsDelta,
    cliffs_delta,
    magnitude_label,
)
from degembed.stats.rank_sum import (
    EXACT_SAMPLE_LIMIT,
    RankSumResult,
    rank_sum_greater,
)

__all__ = [
    "ComparisonResult",
    "compare_function",
    "format_top_genes",
    "TOP_N_DEGS",
    "CliffsDelta",
    "cliffs_delta",
    "magnitude_label",
    "MAGNITUDE_THRESHOLDS",
    "RankSumResult",
    "rank_sum_greater",
    "EXACT_SAMPLE_LIMIT",
]
