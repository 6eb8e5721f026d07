"""Collect per-function results into the ranked result table."""

import math
from collections.abc import Iterable

import polars as pl

from degembed.stats.comparator import ComparisonResult

RESULT_SCHEMA = {
    "name": pl.Utf8,
    "p_value_MWN_one_tailed": pl.Float64,
    "median_cosine_similarity_degs": pl.Float64,
    "median_cosine_similarity_bkgs": pl.Float64,
    "diff_cosine_similarity": pl.Float64,
    "cliffs_delta": pl.Float64,
    "cliffs_delta_ci_95": pl.Utf8,
    "cliffs_delta_magnitude": pl.Utf8,
    "top10_degs_with_highest_cosine_similarity": pl.Utf8,
    "cliffs_delta_ci_lower": pl.Float64,
    "cliffs_delta_ci_upper": pl.Float64,
    "n_degs": pl.Int64,
    "n_bkgs": pl.Int64,
    "rank_sum_statistic": pl.Float64,
    "rank_sum_method": pl.Utf8,
}

P_VALUE_COLUMN = "p_value_MWN_one_tailed"


def _p_value_key(row: ComparisonResult) -> tuple[bool, float]:
    # NaN p-values sort last
    is_nan = math.isnan(row.p_value)
    return (is_nan, 0.0 if is_nan else row.p_value)


def rank_results(rows: Iterable[ComparisonResult]) -> list[ComparisonResult]:
    """Order rows by ascending p-value; equal p-values keep encounter order."""
    return sorted(rows, key=_p_value_key)


def results_to_frame(rows: Iterable[ComparisonResult]) -> pl.DataFrame:
    """Build the result table from rows, preserving their order."""
    rows = list(rows)
    data = {
        "name": [r.name for r in rows],
        "p_value_MWN_one_tailed": [r.p_value for r in rows],
        "median_cosine_similarity_degs": [r.median_deg for r in rows],
        "median_cosine_similarity_bkgs": [r.median_bkg for r in rows],
        "diff_cosine_similarity": [r.diff for r in rows],
        "cliffs_delta": [r.cliffs_delta for r in rows],
        "cliffs_delta_ci_95": [r.ci_label for r in rows],
        "cliffs_delta_magnitude": [r.magnitude for r in rows],
        "top10_degs_with_highest_cosine_similarity": [r.top_degs for r in rows],
        "cliffs_delta_ci_lower": [r.ci_lower for r in rows],
        "cliffs_delta_ci_upper": [r.ci_upper for r in rows],
        "n_degs": [r.n_deg for r in rows],
        "n_bkgs": [r.n_bkg for r in rows],
        "rank_sum_statistic": [r.rank_sum_statistic for r in rows],
        "rank_sum_method": [r.rank_sum_method for r in rows],
    }
    return pl.DataFrame(data, schema=RESULT_SCHEMA)


def aggregate(rows: Iterable[ComparisonResult]) -> pl.DataFrame:
    """Rank rows by p-value and return the final result table."""
    return results_to_frame(rank_results(rows))
