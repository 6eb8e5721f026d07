"""HTTP client for the OpenAI-compatible chat and embedding endpoints."""

import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from degembed.config.schema import DEGEmbedConfig
from degembed.errors import APIError, MissingInputError

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


def _is_retryable(exc: BaseException) -> bool:
    """Retry on rate limiting, server errors, timeouts and connection failures."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRY_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.TimeoutException))


def _error_message(response: httpx.Response) -> str:
    """Extract the API's error message, falling back to the HTTP status."""
    try:
        message = response.json().get("error", {}).get("message")
    except (ValueError, AttributeError):
        message = None
    if not message:
        message = f"HTTP {response.status_code} {response.reason_phrase}"
    return message


class OpenAIClient:
    """
    JSON-over-HTTP client with bearer authentication and retry logic.

    Features:
    - Automatic retry on 429/5xx/network errors with exponential backoff
    - API error messages surfaced as APIError
    - Optional custom transport for testing
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: int = 60,
        max_retries: int = 5,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: OpenAI API key
            base_url: API base URL
            timeout: Request timeout in seconds
            max_retries: Maximum attempts on retryable failures
            transport: httpx transport override (e.g. httpx.MockTransport)

        Raises:
            MissingInputError: If api_key is empty
        """
        if not api_key:
            raise MissingInputError("Missing API key")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def _create_retry_decorator(self):
        """Create retry decorator with exponential backoff."""
        return retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=2, max=60),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )

    def post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        POST a JSON payload and return the parsed JSON response.

        Args:
            path: Endpoint path relative to base_url (e.g. "/embeddings")
            payload: Request body

        Returns:
            Parsed JSON response

        Raises:
            APIError: On an HTTP error response after retries are exhausted
            httpx.TimeoutException: On timeout after retries exhausted
            httpx.ConnectError: On connection error after retries exhausted
        """
        @self._create_retry_decorator()
        def _post_with_retry() -> httpx.Response:
            response = self._client.post(path, json=payload)
            if response.status_code == 429:
                logger.warning(
                    f"Rate limited by API (429). URL: {path}. Will retry with backoff."
                )
            response.raise_for_status()
            return response

        try:
            response = _post_with_retry()
        except httpx.HTTPStatusError as e:
            raise APIError(f"API error: {_error_message(e.response)}") from e

        return response.json()

    @classmethod
    def from_config(
        cls,
        config: DEGEmbedConfig,
        api_key: str,
        transport: httpx.BaseTransport | None = None,
    ) -> "OpenAIClient":
        """
        Create client from degembed configuration.

        Args:
            config: DEGEmbedConfig instance
            api_key: OpenAI API key (never read from config)
            transport: Optional httpx transport override

        Returns:
            Configured OpenAIClient instance
        """
        return cls(
            api_key=api_key,
            base_url=config.openai.base_url,
            timeout=config.openai.timeout_seconds,
            max_retries=config.openai.max_retries,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OpenAIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
