"""Partition a caller's gene list into DEG and background groups."""

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from degembed.errors import InvalidInputError
from degembed.genes.universe import GeneUniverse

logger = structlog.get_logger(__name__)

MIN_DEGS = 15
MAX_DEGS = 500


@dataclass(frozen=True)
class GeneGroups:
    """DEG and background groups resolved against the gene universe.

    Attributes:
        degs: DEGs present in the universe, caller order, deduplicated
        background: Background genes present in the universe. When no
            background was supplied this is the whole universe, DEGs included.
        background_is_default: True if the universe was used as background
        dropped_degs: Input DEGs absent from the universe
    """
    degs: tuple[str, ...]
    background: tuple[str, ...]
    background_is_default: bool = False
    dropped_degs: tuple[str, ...] = field(default=())

    @property
    def deg_set(self) -> frozenset[str]:
        return frozenset(self.degs)

    @property
    def background_set(self) -> frozenset[str]:
        return frozenset(self.background)


def _ordered_unique(genes: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(genes))


def resolve_groups(
    degs: Sequence[str],
    bkgs: Sequence[str] | None,
    universe: GeneUniverse,
    min_degs: int = MIN_DEGS,
    max_degs: int = MAX_DEGS,
) -> GeneGroups:
    """Validate and partition genes into DEG and background groups.

    DEGs are intersected with the universe. A supplied background has the
    DEGs removed before the intersection; an omitted background defaults
    to the entire universe. Genes missing from the universe are dropped
    silently as long as the DEG count stays within bounds.

    Args:
        degs: Differentially expressed gene symbols
        bkgs: Background gene symbols, or None for the whole universe
        universe: Gene universe of the reference data
        min_degs: Minimum matched DEG count (inclusive)
        max_degs: Maximum matched DEG count (inclusive)

    Returns:
        GeneGroups with both groups in caller order

    Raises:
        InvalidInputError: If the matched DEG count is outside [min_degs, max_degs]
    """
    unique_degs = _ordered_unique(degs)
    matched_degs = tuple(g for g in unique_degs if g in universe)
    dropped = tuple(g for g in unique_degs if g not in universe)

    if bkgs is None:
        background = universe.genes
        logger.info(
            "background_defaulted_to_universe",
            background_count=len(background),
        )
    else:
        deg_input = set(unique_degs)
        background = tuple(
            g for g in _ordered_unique(bkgs)
            if g not in deg_input and g in universe
        )
        logger.info(
            "background_matched",
            input_count=len(bkgs),
            background_count=len(background),
        )

    if not min_degs <= len(matched_degs) <= max_degs:
        raise InvalidInputError(
            f"Insufficient or excessive DEGs: {len(matched_degs)} of {len(unique_degs)} "
            f"input genes match the gene universe; between {min_degs} and {max_degs} "
            "are required"
        )

    logger.info(
        "degs_matched",
        input_count=len(unique_degs),
        matched_count=len(matched_degs),
        dropped_count=len(dropped),
    )

    return GeneGroups(
        degs=matched_degs,
        background=background,
        background_is_default=bkgs is None,
        dropped_degs=dropped,
    )
