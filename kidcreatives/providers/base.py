"""Shared async HTTP plumbing for generation service clients."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..utils.logger import get_logger
from ..utils.errors import MalformedResponseError

logger = get_logger(__name__)


class BaseProvider(ABC):
    """
    Owns one ``httpx.AsyncClient`` for a JSON-over-HTTPS service.

    Subclasses supply auth headers and map error statuses to exceptions;
    ``_post_json`` does the rest of a round trip.
    """

    name = "provider"

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize provider.

        Args:
            api_key: API key for authentication
            base_url: API root; a trailing slash is dropped
            timeout: Request timeout in seconds (None waits indefinitely)
            transport: Optional custom httpx transport
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def is_initialized(self) -> bool:
        return self.client is not None

    async def initialize(self):
        """Open the HTTP client. Calling it twice is harmless."""
        if self.client is not None:
            return

        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._get_default_headers(),
            transport=self.transport,
        )
        logger.info(f"{self.name} client ready", extra={"provider": self.name})

    async def close(self):
        if self.client is None:
            return

        await self.client.aclose()
        self.client = None
        logger.info(f"{self.name} client closed", extra={"provider": self.name})

    @abstractmethod
    def _get_default_headers(self) -> dict:
        """Headers sent with every request, auth included."""

    @abstractmethod
    def _handle_response_errors(self, response: httpx.Response):
        """Raise the matching APIError for a non-2xx response."""

    async def _post_json(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST ``payload`` and return the decoded JSON object.

        Raises:
            RuntimeError: If the client was never initialized
            httpx.RequestError: On network failure
            APIError: From ``_handle_response_errors`` for non-2xx responses
            MalformedResponseError: If the body is not a JSON object
        """
        if self.client is None:
            raise RuntimeError(
                f"{self.__class__.__name__} not initialized. "
                "Call initialize() or use as async context manager."
            )

        response = await self.client.post(url, json=payload)
        self._handle_response_errors(response)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("Response body is not valid JSON") from e

        if not isinstance(data, dict):
            raise MalformedResponseError("Response body is not a JSON object")

        return data
