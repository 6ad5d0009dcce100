"""Abstract async base API client with structured logging and error mapping.

Catalog API clients inherit from this class to get consistent HTTP
handling.

Features:
- Persistent connection pooling via httpx.AsyncClient
- Structured logging for every request/response
- Custom exception mapping (timeout, 429, 4xx/5xx, invalid JSON)

A request is attempted exactly once. Retrying is left to the caller.
"""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx
import structlog

from movie_catalog.utils.exceptions import (
    APIClientError,
    APIRateLimitError,
    APITimeoutError,
)

logger = structlog.get_logger(__name__)


def parse_retry_after(value: str | None) -> float | None:
    """Seconds to wait from a Retry-After header.

    The header is either delay-seconds or an HTTP date. Unreadable values
    give None; a date in the past gives 0.
    """
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)


class BaseAPIClient(ABC):
    """Abstract base class for remote catalog API clients.

    Args:
        base_url: The API's base URL (no trailing slash).
        timeout: HTTP request timeout in seconds.
        headers: Additional default headers to send with every request.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client_name = self.__class__.__name__

        default_headers = {
            "Accept": "application/json",
            "User-Agent": "MovieCatalogClient/1.0",
        }
        if headers:
            default_headers.update(headers)

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=10),
            headers=default_headers,
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client and release connections."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    # ── Public API ────────────────────────────────────────────────────

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request.

        Args:
            endpoint: API endpoint path (e.g., "/discover/movie").
            params: Query parameters. ``None`` values are dropped.

        Returns:
            Parsed JSON response.

        Raises:
            APIClientError: On HTTP errors or unreadable responses.
            APIRateLimitError: On 429.
            APITimeoutError: On request timeout.
        """
        return await self._request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a POST request with a JSON body. Same errors as `get`."""
        return await self._request("POST", endpoint, params=params, json=json)

    # ── Internal Methods ──────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Execute one HTTP request and map failures to APIClientError.

        Args:
            method: HTTP method ("GET" or "POST").
            endpoint: API endpoint path.
            params: Query parameters.
            json: JSON request body.

        Returns:
            Parsed JSON response.
        """
        params = {k: v for k, v in (params or {}).items() if v is not None}

        logger.info(
            "api_request",
            client=self._client_name,
            method=method,
            endpoint=endpoint,
        )

        start = time.monotonic()
        try:
            response = await self._client.request(method, endpoint, params=params, json=json)
        except httpx.TimeoutException as e:
            logger.warning("api_timeout", client=self._client_name, endpoint=endpoint)
            raise APITimeoutError(
                client_name=self._client_name,
                timeout=self._client.timeout.read or 30,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("api_transport_error", client=self._client_name, endpoint=endpoint, error=str(e))
            raise APIClientError(
                message=f"{self._client_name}: network error for {endpoint}: {e}",
                client_name=self._client_name,
            ) from e
        duration_ms = round((time.monotonic() - start) * 1000)

        logger.info(
            "api_response",
            client=self._client_name,
            endpoint=endpoint,
            status=response.status_code,
            duration_ms=duration_ms,
        )

        if response.status_code == 429:
            raise APIRateLimitError(
                client_name=self._client_name,
                retry_after=parse_retry_after(response.headers.get("Retry-After")),
            )

        if response.status_code >= 400:
            raise APIClientError(
                message=self._error_message(response, endpoint),
                client_name=self._client_name,
                upstream_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise APIClientError(
                message=f"{self._client_name}: invalid JSON from {endpoint}",
                client_name=self._client_name,
                upstream_status=response.status_code,
            ) from e

    def _error_message(self, response: httpx.Response, endpoint: str) -> str:
        """Build the human-readable message for a failed response.

        Subclasses override this to surface the API's own error text.
        """
        return f"{self._client_name}: HTTP {response.status_code} for {endpoint}"

    @abstractmethod
    async def health_check(self) -> bool:
        """Verify the API is reachable.

        Returns:
            True if API is healthy, False otherwise.
        """
        ...
