"""Error types raised by the analysis pipeline.

Every error is fatal to a run: no partial result table is returned.
"""


class DEGEmbedError(Exception):
    """Base class for all degembed errors."""


class InvalidInputError(DEGEmbedError, ValueError):
    """Input violates a precondition (DEG count, category, embeddings)."""


class UnknownCategoryError(InvalidInputError):
    """Category string is not one of the recognized selectors."""


class MissingInputError(DEGEmbedError, ValueError):
    """A required input (embedding table, API key, data file) was not supplied."""


class DegenerateGroupError(DEGEmbedError, ValueError):
    """A comparison group has too few observations for the rank-sum test."""


class APIError(DEGEmbedError):
    """Remote endpoint returned an error payload or no usable content."""
