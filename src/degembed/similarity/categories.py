"""Closed set of functional categories and their matrix selectors."""

from enum import Enum

from degembed.errors import InvalidInputError, UnknownCategoryError

# Column names of the pathway matrix start with their source, e.g. KEGG_APOPTOSIS
PATHWAY_PREFIX_DELIMITER = "_"


class Category(str, Enum):
    """Functional collection (or customized mode) analyzed in a run."""

    GOBP = "GOBP"
    C2CP_ALL = "C2CP_ALL"
    BIOCARTA = "BIOCARTA"
    KEGG = "KEGG"
    PID = "PID"
    REACTOME = "REACTOME"
    WP = "WP"
    MOA = "MOA"
    CUSTOMIZED = "CUSTOMIZED"

    @classmethod
    def parse(cls, value: "str | Category | None") -> "Category":
        """Parse a category selector case-insensitively.

        Raises:
            InvalidInputError: If value is None or blank
            UnknownCategoryError: If value is not a recognized category
        """
        if isinstance(value, Category):
            return value
        if value is None or not str(value).strip():
            raise InvalidInputError("Category is required")
        key = str(value).strip().upper()
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise UnknownCategoryError(
                f"Unknown category '{value}'. Must be one of: {valid}"
            ) from None

    @property
    def source_matrix(self) -> str | None:
        """Name of the precomputed matrix this category reads, None if customized."""
        if self is Category.GOBP:
            return "GOBP"
        if self is Category.MOA:
            return "MOA"
        if self is Category.CUSTOMIZED:
            return None
        return "CP"

    @property
    def column_prefix(self) -> str | None:
        """Pathway source tag used to slice the pathway matrix, if any."""
        if self in PATHWAY_SOURCES:
            return self.value
        return None


PATHWAY_SOURCES = (
    Category.BIOCARTA,
    Category.KEGG,
    Category.PID,
    Category.REACTOME,
    Category.WP,
)
