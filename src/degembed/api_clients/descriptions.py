"""Generate free-text function descriptions with a chat completion model."""

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

import structlog

from degembed.api_clients.base import OpenAIClient
from degembed.errors import APIError, InvalidInputError

logger = structlog.get_logger(__name__)

DEFAULT_CHAT_MODEL = "gpt-4o-2024-08-06"
SYSTEM_PROMPT = "You are a biomedical knowledge expert"
PROMPT_TEMPLATE = "Write a paragraph to describe what is known about the function of '{name}'."


def build_messages(function_name: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": PROMPT_TEMPLATE.format(name=function_name)},
    ]


def save_description(function_name: str, description: str, output_dir: Path) -> Path:
    """Write the description to description_<timestamp>.txt in output_dir."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
    path = output_dir / f"description_{timestamp}.txt"
    path.write_text(f"{function_name}\n\n{description}\n", encoding="utf-8")
    return path


def generate_function_description(
    client: OpenAIClient,
    function_name: str,
    model: str = DEFAULT_CHAT_MODEL,
    temperature: float = 1.0,
    output_dir: Path | None = None,
) -> str:
    """Ask the chat model for a paragraph describing a function or pathway.

    Args:
        client: Authenticated OpenAIClient
        function_name: Pathway, MOA or function name
        model: Chat model name
        temperature: Sampling temperature
        output_dir: If given, also save the description as a timestamped file

    Returns:
        Description text, stripped of surrounding whitespace

    Raises:
        InvalidInputError: If function_name is blank
        APIError: If the API returns an error or no content
    """
    if not function_name or not function_name.strip():
        raise InvalidInputError("Please provide a function name")

    logger.info("description_request", function=function_name, model=model)
    response = client.post_json(
        "/chat/completions",
        {
            "model": model,
            "messages": build_messages(function_name),
            "temperature": temperature,
        },
    )

    try:
        content = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if not content or not content.strip():
        raise APIError(f"No content returned from API for '{function_name}'")

    description = content.strip()
    if output_dir is not None:
        path = save_description(function_name, description, output_dir)
        logger.info("description_saved", function=function_name, path=str(path))
    return description


def generate_function_descriptions(
    client: OpenAIClient,
    function_names: Sequence[str],
    model: str = DEFAULT_CHAT_MODEL,
    temperature: float = 1.0,
) -> dict[str, str]:
    """Generate one description per name, keyed by name in input order."""
    return {
        name: generate_function_description(
            client, name, model=model, temperature=temperature
        )
        for name in function_names
    }
