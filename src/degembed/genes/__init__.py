"""Gene universe and DEG/background group resolution."""

from degembed.genes.resolver import (
    MAX_DEGS,
    MIN_DEGS,
    GeneGroups,
    resolve_groups,
)
from degembed.genes.universe import (
    GeneUniverse,
    UniverseValidation,
    validate_gene_universe,
)

__all__ = [
    "GeneUniverse",
    "UniverseValidation",
    "validate_gene_universe",
    "GeneGroups",
    "resolve_groups",
    "MIN_DEGS",
    "MAX_DEGS",
]
