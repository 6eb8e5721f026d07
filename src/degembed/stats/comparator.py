"""Per-function comparison of DEG vs. background similarities."""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from degembed.stats.effect_size import cliffs_delta
from degembed.stats.rank_sum import rank_sum_greater

TOP_N_DEGS = 10
TOP_GENES_SEPARATOR = ", "


@dataclass(frozen=True)
class ComparisonResult:
    """Statistics for one function (one similarity matrix column).

    Attributes:
        name: Function/term name
        p_value: One-tailed rank-sum p-value (DEGs > background)
        rank_sum_statistic: U statistic of the DEG sample
        rank_sum_method: "exact" or "asymptotic"
        median_deg: Median DEG cosine similarity
        median_bkg: Median background cosine similarity
        diff: median_deg - median_bkg
        n_deg: Number of DEG observations
        n_bkg: Number of background observations
        cliffs_delta: Cliff's delta of DEGs relative to background
        ci_lower: Lower confidence bound of Cliff's delta
        ci_upper: Upper confidence bound of Cliff's delta
        magnitude: negligible / small / medium / large
        top_degs: Most similar DEGs, formatted "GENE(0.1234), ..."
    """
    name: str
    p_value: float
    rank_sum_statistic: float
    rank_sum_method: str
    median_deg: float
    median_bkg: float
    diff: float
    n_deg: int
    n_bkg: int
    cliffs_delta: float
    ci_lower: float
    ci_upper: float
    magnitude: str
    top_degs: str

    @property
    def ci_label(self) -> str:
        """Confidence interval as "[lo,hi]" rounded to 2 decimals."""
        # + 0.0 turns -0.0 into 0.0
        return f"[{round(self.ci_lower, 2) + 0.0},{round(self.ci_upper, 2) + 0.0}]"


def format_top_genes(
    values: np.ndarray,
    labels: Sequence[str],
    top_n: int = TOP_N_DEGS,
    separator: str = TOP_GENES_SEPARATOR,
) -> str:
    """Format the top_n labels by descending value as "GENE(0.1234)".

    Equal values keep their order in labels.
    """
    order = np.argsort(-np.asarray(values), kind="stable")[:top_n]
    return separator.join(f"{labels[i]}({values[i]:.4f})" for i in order)


def compare_function(
    name: str,
    column: np.ndarray,
    deg_index: np.ndarray,
    bkg_index: np.ndarray,
    deg_labels: Sequence[str],
    top_n: int = TOP_N_DEGS,
    conf_level: float = 0.95,
    ci_method: str = "t",
) -> ComparisonResult:
    """Compare DEG and background similarities for a single function.

    Args:
        name: Function name (matrix column label)
        column: Similarities of every matrix row to this function
        deg_index: Row positions of the DEGs, in DEG order
        bkg_index: Row positions of the background genes (DEGs excluded)
        deg_labels: Gene symbols matching deg_index
        top_n: Number of DEGs listed in top_degs
        conf_level: Confidence level of the Cliff's delta interval
        ci_method: "t" or "normal" quantile for the interval

    Returns:
        ComparisonResult for the function

    Raises:
        DegenerateGroupError: If either group has fewer than 2 observations
    """
    sim_deg = column[deg_index]
    sim_bkg = column[bkg_index]

    test = rank_sum_greater(sim_deg, sim_bkg)
    effect = cliffs_delta(sim_deg, sim_bkg, conf_level=conf_level, ci_method=ci_method)

    median_deg = float(np.median(sim_deg))
    median_bkg = float(np.median(sim_bkg))

    return ComparisonResult(
        name=name,
        p_value=test.p_value,
        rank_sum_statistic=test.statistic,
        rank_sum_method=test.method,
        median_deg=median_deg,
        median_bkg=median_bkg,
        diff=median_deg - median_bkg,
        n_deg=int(sim_deg.size),
        n_bkg=int(sim_bkg.size),
        cliffs_delta=effect.estimate,
        ci_lower=effect.ci_lower,
        ci_upper=effect.ci_upper,
        magnitude=effect.magnitude,
        top_degs=format_top_genes(sim_deg, deg_labels, top_n=top_n),
    )
