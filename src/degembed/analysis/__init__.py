"""Result aggregation and the end-to-end analysis run."""

from degembed.analysis.aggregate import (
    P_VALUE_COLUMN,
    RESULT_SCHEMA,
    aggregate,
    rank_results,
    results_to_frame,
)
from degembed.analysis.pipeline import (
    AnalysisResult,
    RowIndex,
    compare_all,
    index_groups,
    run_deg_embed,
)

__all__ = [
    "aggregate",
    "rank_results",
    "results_to_frame",
    "RESULT_SCHEMA",
    "P_VALUE_COLUMN",
    "AnalysisResult",
    "RowIndex",
    "compare_all",
    "index_groups",
    "run_deg_embed",
]
