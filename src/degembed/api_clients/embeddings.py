"""Convert text to embedding vectors with the embeddings endpoint."""

from collections.abc import Mapping

import structlog

from degembed.api_clients.base import OpenAIClient
from degembed.errors import APIError, InvalidInputError
from degembed.similarity.matrix import EmbeddingTable

logger = structlog.get_logger(__name__)

# Must match the model used to embed the bundled gene descriptions
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-large"
EMBEDDING_DIMENSIONS = 3072


def generate_text_embeddings(
    client: OpenAIClient,
    texts: Mapping[str, str],
    model: str = DEFAULT_EMBEDDING_MODEL,
) -> EmbeddingTable:
    """Embed named texts, one table row per name.

    Args:
        client: Authenticated OpenAIClient
        texts: Mapping of row label (e.g. pathway name) to text to embed
        model: Embedding model name

    Returns:
        EmbeddingTable with rows in the order of texts

    Raises:
        InvalidInputError: If texts is empty or contains blank text
        APIError: If the response does not contain one embedding per text
    """
    if not texts:
        raise InvalidInputError("No text provided for embedding")
    labels = list(texts.keys())
    inputs = [texts[label] for label in labels]
    blank = [label for label, text in zip(labels, inputs) if not text or not text.strip()]
    if blank:
        raise InvalidInputError(f"Blank text for: {blank[:5]}")

    logger.info("embedding_request", texts=len(inputs), model=model)
    response = client.post_json("/embeddings", {"model": model, "input": inputs})

    data = response.get("data") or []
    if len(data) != len(inputs):
        raise APIError(
            f"Expected {len(inputs)} embeddings from API, got {len(data)}"
        )
    data = sorted(data, key=lambda item: item.get("index", 0))
    vectors = [item["embedding"] for item in data]

    table = EmbeddingTable.from_vectors(labels, vectors)
    logger.info("embedding_complete", rows=table.shape[0], dimensions=table.dimensions)
    return table
