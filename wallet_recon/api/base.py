"""Base async HTTP client and the client-side error taxonomy."""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Raised when the API call cannot produce a usable response."""
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(APIError):
    """Raised on network-level failure (timeout, DNS, connection reset)."""
    pass


class RequestRejected(APIError):
    """Raised when the endpoint answers with a non-success status."""

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


class BaseAPIClient:
    """Base class for async API clients.

    Errors are never retried here: a rejected or failed request is
    surfaced to the caller immediately.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._get_default_headers(),
                transport=self._transport,
            )
        return self._client

    def _get_default_headers(self) -> dict[str, str]:
        """Override in subclass to add default headers."""
        return {
            "Accept": "application/json",
            "User-Agent": "WalletRecon/0.1.0",
        }

    def _handle_response(self, response: httpx.Response) -> Any:
        """Process response and turn error statuses into exceptions."""
        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = None
            if isinstance(error_data, dict):
                message = error_data.get("message", error_data.get("error", str(error_data)))
            else:
                message = response.text or f"HTTP {response.status_code}"
            logger.warning("Response: %s %s", response.status_code, message)
            raise RequestRejected(str(message), response.status_code)

        logger.info("Response: %s OK", response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                f"Response body is not JSON: {response.text[:200]!r}",
                response.status_code,
            ) from e

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_data: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make a single HTTP request."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.info("API %s: %s", method, url)

        try:
            response = await self.client.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out after {self.timeout}s: {url}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}") from e

        return self._handle_response(response)

    async def get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make GET request."""
        return await self._request("GET", endpoint, params=params, headers=headers)

    async def post(
        self,
        endpoint: str,
        json_data: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make POST request."""
        return await self._request("POST", endpoint, params=params, json_data=json_data, headers=headers)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
