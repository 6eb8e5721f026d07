"""Cliff's delta effect size with confidence interval.

The estimate is d = P(X > Y) - P(X < Y) over all pairs. Its variance is
Cliff's (1993) unbiased estimator, floored at (1 - d^2) / (n*m - 1), and
the interval is the asymmetric Feng & Cliff form

    (d - d^3 +/- z*s*sqrt((1 - d^2)^2 + z^2*s^2)) / (1 - d^2 + z^2*s^2)

which keeps the bounds inside [-1, 1]. z comes from Student's t with
n + m - 2 degrees of freedom, or the standard normal with
ci_method="normal". These are the defaults of R's effsize::cliff.delta.

Pair counts come from binary searches on the sorted samples, so the
n x m dominance matrix is never materialized.
"""

from dataclasses import dataclass

import numpy as np
from scipy import stats

from degembed.errors import DegenerateGroupError

# Romano et al. (2006) thresholds on |delta|
MAGNITUDE_THRESHOLDS = (
    (0.147, "negligible"),
    (0.33, "small"),
    (0.474, "medium"),
)


@dataclass(frozen=True)
class CliffsDelta:
    estimate: float
    ci_lower: float
    ci_upper: float
    magnitude: str
    variance: float
    conf_level: float = 0.95


def magnitude_label(delta: float) -> str:
    """Classify |delta| as negligible, small, medium or large."""
    size = abs(delta)
    for threshold, label in MAGNITUDE_THRESHOLDS:
        if size < threshold:
            return label
    return "large"


def dominance_sums(x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray, int]:
    """Row and column sums of sign(x_i - y_j), and the number of tied pairs."""
    sorted_x = np.sort(x)
    sorted_y = np.sort(y)

    y_below = np.searchsorted(sorted_y, x, side="left")
    y_not_above = np.searchsorted(sorted_y, x, side="right")
    row_sums = y_below - (y.size - y_not_above)

    x_below = np.searchsorted(sorted_x, y, side="left")
    x_not_above = np.searchsorted(sorted_x, y, side="right")
    col_sums = (x.size - x_not_above) - x_below

    ties = int(np.sum(y_not_above - y_below))
    return row_sums.astype(np.float64), col_sums.astype(np.float64), ties


def cliffs_delta(
    x,
    y,
    conf_level: float = 0.95,
    ci_method: str = "t",
) -> CliffsDelta:
    """Cliff's delta of x relative to y with a confidence interval.

    Args:
        x: First sample (DEG similarities)
        y: Second sample (background similarities)
        conf_level: Confidence level of the interval
        ci_method: "t" (Student's t, df = n + m - 2) or "normal"

    Returns:
        CliffsDelta with estimate, interval bounds and magnitude label

    Raises:
        DegenerateGroupError: If either sample has fewer than 2 observations
        ValueError: On an unknown ci_method
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n, m = x.size, y.size
    if n < 2 or m < 2:
        raise DegenerateGroupError(
            f"Cliff's delta interval needs at least 2 observations per group "
            f"(got {n} and {m})"
        )

    row_sums, col_sums, ties = dominance_sums(x, y)
    pairs = n * m
    d = float(row_sums.sum() / pairs)

    d_i = row_sums / m
    d_j = col_sums / n
    # sum over all pairs of (sign - d)^2; sign^2 is 1 except for ties
    pair_ss = (pairs - ties) - pairs * d * d
    variance = (
        m * m * np.sum((d_i - d) ** 2)
        + n * n * np.sum((d_j - d) ** 2)
        - pair_ss
    ) / (pairs * (n - 1) * (m - 1))
    variance = float(max(variance, (1.0 - d * d) / (pairs - 1)))

    if ci_method == "t":
        z = float(stats.t.ppf((1.0 + conf_level) / 2.0, n + m - 2))
    elif ci_method == "normal":
        z = float(stats.norm.ppf((1.0 + conf_level) / 2.0))
    else:
        raise ValueError(f"Unknown ci_method '{ci_method}'. Must be 't' or 'normal'")

    denominator = 1.0 - d * d + z * z * variance
    if denominator <= 0.0:
        # |d| == 1 with zero variance: complete separation
        lower = upper = d
    else:
        half_width = z * np.sqrt(variance) * np.sqrt((1.0 - d * d) ** 2 + z * z * variance)
        lower = float((d - d ** 3 - half_width) / denominator)
        upper = float((d - d ** 3 + half_width) / denominator)
        lower = max(-1.0, min(lower, d))
        upper = min(1.0, max(upper, d))

    return CliffsDelta(
        estimate=d,
        ci_lower=lower,
        ci_upper=upper,
        magnitude=magnitude_label(d),
        variance=variance,
        conf_level=conf_level,
    )
