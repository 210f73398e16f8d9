"""Gemini generateContent API client."""

from typing import Any, Dict, List, Optional

import httpx

from .base import BaseProvider
from ..utils.logger import get_logger
from ..utils.errors import (
    AuthenticationError,
    ConfigurationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
)

logger = get_logger(__name__)

PROVIDER_NAME = "gemini"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiClient(BaseProvider):
    """Client for the Gemini text and image generation models.

    Requests use snake_case inline data (``inline_data``/``mime_type``)
    while responses come back camelCase (``inlineData``/``mimeType``).
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key
            base_url: API root, e.g. https://generativelanguage.googleapis.com/v1beta
            timeout: Request timeout in seconds (None for no timeout)
            transport: Optional custom httpx transport

        Raises:
            ConfigurationError: If the API key is missing
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError("GEMINI_API_KEY is required but not set")

        super().__init__(
            api_key=api_key.strip(),
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    def _get_default_headers(self) -> dict:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def endpoint(self, model: str) -> str:
        return f"{self.base_url}/models/{model}:generateContent"

    async def generate_content(self, model: str, parts: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Send one generateContent request.

        Args:
            model: Model name, e.g. gemini-2.5-flash
            parts: Request parts ({"text": ...} or {"inline_data": {...}})

        Returns:
            Decoded JSON response body

        Raises:
            httpx.RequestError: On network failure
            ProviderError: On non-2xx responses
            MalformedResponseError: If the body is not a JSON object
        """
        logger.info(
            f"Calling Gemini model {model}",
            extra={"model": model, "part_count": len(parts)}
        )

        return await self._post_json(self.endpoint(model), {"contents": [{"parts": parts}]})

    def _handle_response_errors(self, response: httpx.Response):
        """Handle HTTP response errors."""
        if response.is_success:
            return

        if response.status_code in (401, 403):
            raise AuthenticationError(PROVIDER_NAME, response.status_code)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                PROVIDER_NAME,
                int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        try:
            error_data = response.json()
            error_message = error_data.get("error", {}).get("message") or response.text
        except (ValueError, AttributeError):
            error_message = response.text

        logger.error(
            f"Gemini API error ({response.status_code})",
            extra={"status": response.status_code, "response": response.text[:500]}
        )

        raise ProviderError(
            PROVIDER_NAME,
            f"API error ({response.status_code}): {error_message}",
            response.status_code
        )


def first_candidate_parts(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Return the content parts of the first candidate.

    Raises:
        MalformedResponseError: If there are no candidates or the first one has no parts
    """
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise MalformedResponseError("No candidates in API response")

    candidate = candidates[0]
    content = candidate.get("content") if isinstance(candidate, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise MalformedResponseError("Invalid candidate structure in API response")

    return [part for part in parts if isinstance(part, dict)]


def first_text(parts: List[Dict[str, Any]]) -> str:
    """
    Return the trimmed text of the first part carrying text.

    Raises:
        MalformedResponseError: If no part carries non-empty text
    """
    for part in parts:
        text = part.get("text")
        if isinstance(text, str) and text.strip():
            return text.strip()
    raise MalformedResponseError("No text response in API result")


def first_inline_data(parts: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Return the first ``inlineData`` blob whose data is a non-empty string.

    Raises:
        MalformedResponseError: If no part carries inline image data
    """
    for part in parts:
        blob = part.get("inlineData")
        if isinstance(blob, dict) and isinstance(blob.get("data"), str) and blob["data"]:
            return blob
    raise MalformedResponseError("No image data in API response")
