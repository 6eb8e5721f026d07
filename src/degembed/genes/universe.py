"""Gene universe definition and validation.

The universe is the fixed, ordered catalog of gene symbols the reference
datasets cover (~18,000 human protein-coding genes). Only genes in the
universe can be analyzed.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Expected range for the bundled human protein-coding universe
MIN_EXPECTED_GENES = 15000
MAX_EXPECTED_GENES = 23000


class GeneUniverse:
    """Immutable ordered set of known gene symbols.

    Symbols are case-sensitive. Duplicates in the source list are dropped,
    keeping the first occurrence.
    """

    def __init__(self, genes: Iterable[str]):
        ordered = dict.fromkeys(g for g in genes)
        self._genes: tuple[str, ...] = tuple(ordered)
        self._members: frozenset[str] = frozenset(self._genes)

    def __contains__(self, gene: object) -> bool:
        return gene in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._genes)

    def __len__(self) -> int:
        return len(self._genes)

    def __repr__(self) -> str:
        return f"GeneUniverse(size={len(self)})"

    @property
    def genes(self) -> tuple[str, ...]:
        """Genes in source order."""
        return self._genes

    @property
    def members(self) -> frozenset[str]:
        """Set view for fast intersections."""
        return self._members


@dataclass
class UniverseValidation:
    """Result of a gene universe quality check.

    Attributes:
        passed: Whether validation passed
        messages: Validation messages (warnings, errors)
        gene_count: Number of genes checked
    """
    passed: bool
    messages: list[str] = field(default_factory=list)
    gene_count: int = 0


def validate_gene_universe(
    genes: list[str],
    min_genes: int = MIN_EXPECTED_GENES,
    max_genes: int = MAX_EXPECTED_GENES,
) -> UniverseValidation:
    """Validate gene universe data quality.

    Checks:
    - List is non-empty and has no blank symbols
    - No duplicate symbols
    - Gene count is in the expected range (warning only)

    Args:
        genes: Raw gene symbols as loaded from the reference data
        min_genes: Lower bound of the expected gene count
        max_genes: Upper bound of the expected gene count

    Returns:
        UniverseValidation with status and messages
    """
    messages: list[str] = []
    passed = True
    gene_count = len(genes)

    if gene_count == 0:
        messages.append("FAILED: Gene universe is empty")
        return UniverseValidation(passed=False, messages=messages, gene_count=0)

    blank = [i for i, g in enumerate(genes) if not g or not g.strip()]
    if blank:
        messages.append(
            f"FAILED: Found {len(blank)} blank gene symbols (first rows: {blank[:5]})"
        )
        passed = False

    duplicates = gene_count - len(set(genes))
    if duplicates:
        messages.append(f"FAILED: Found {duplicates} duplicate gene symbols")
        passed = False
    else:
        messages.append("No duplicate gene symbols found")

    if gene_count < min_genes or gene_count > max_genes:
        messages.append(
            f"WARNING: Gene count {gene_count} is outside the expected range "
            f"({min_genes}-{max_genes})"
        )
    else:
        messages.append(
            f"Gene count {gene_count} is within expected range ({min_genes}-{max_genes})"
        )

    logger.info(
        f"Gene universe validation: {'PASSED' if passed else 'FAILED'} "
        f"({gene_count} genes)"
    )

    return UniverseValidation(passed=passed, messages=messages, gene_count=gene_count)
