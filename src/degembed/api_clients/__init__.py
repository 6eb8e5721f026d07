"""Remote description and embedding generators."""

from degembed.api_clients.base import OpenAIClient
from degembed.api_clients.descriptions import (
    generate_function_description,
    generate_function_descriptions,
)
from degembed.api_clients.embeddings import (
    DEFAULT_EMBEDDING_MODEL,
    EMBEDDING_DIMENSIONS,
    generate_text_embeddings,
)

__all__ = [
    "OpenAIClient",
    "generate_function_description",
    "generate_function_descriptions",
    "generate_text_embeddings",
    "DEFAULT_EMBEDDING_MODEL",
    "EMBEDDING_DIMENSIONS",
]
