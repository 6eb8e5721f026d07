"""One-tailed Wilcoxon rank-sum (Mann-Whitney U) test."""

from dataclasses import dataclass

import numpy as np
from scipy.stats import mannwhitneyu

from degembed.errors import DegenerateGroupError

# Both samples must be smaller than this (and tie-free) for the exact null
# distribution; otherwise the tie-corrected normal approximation is used.
EXACT_SAMPLE_LIMIT = 50

MIN_OBSERVATIONS = 2


@dataclass(frozen=True)
class RankSumResult:
    """Outcome of a one-tailed rank-sum test.

    Attributes:
        statistic: U statistic of the first sample (equals R's W)
        p_value: P(U >= observed) under the null
        method: "exact" or "asymptotic"
    """
    statistic: float
    p_value: float
    method: str


def has_ties(x: np.ndarray, y: np.ndarray) -> bool:
    """True if any value occurs more than once in the pooled sample."""
    pooled = np.concatenate([x, y])
    return np.unique(pooled).size < pooled.size


def choose_method(x: np.ndarray, y: np.ndarray) -> str:
    if x.size < EXACT_SAMPLE_LIMIT and y.size < EXACT_SAMPLE_LIMIT and not has_ties(x, y):
        return "exact"
    return "asymptotic"


def rank_sum_greater(x, y) -> RankSumResult:
    """Test whether x is stochastically greater than y.

    Ties get mid-ranks. The asymptotic method applies the tie-corrected
    variance and a 0.5 continuity correction, matching R's
    wilcox.test(x, y, alternative = "greater").

    Args:
        x: First sample (DEG similarities)
        y: Second sample (background similarities)

    Returns:
        RankSumResult with U statistic, one-tailed p-value and method used

    Raises:
        DegenerateGroupError: If either sample has fewer than 2 observations
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.size < MIN_OBSERVATIONS or y.size < MIN_OBSERVATIONS:
        raise DegenerateGroupError(
            f"Rank-sum test needs at least {MIN_OBSERVATIONS} observations per group "
            f"(got {x.size} and {y.size})"
        )

    method = choose_method(x, y)
    result = mannwhitneyu(
        x,
        y,
        alternative="greater",
        method=method,
        use_continuity=True,
    )
    return RankSumResult(
        statistic=float(result.statistic),
        p_value=float(result.pvalue),
        method=method,
    )
