"""Custom exception hierarchy for the movie catalog client.

All application-specific exceptions inherit from CatalogError so callers
can tell expected runtime failures from contract violations.

Hierarchy:
    CatalogError (base)
    ├── APIClientError          — Network / HTTP failures from the catalog API
    │   ├── APIRateLimitError   — 429 Too Many Requests
    │   ├── APITimeoutError     — Request timeout
    │   └── APIRejectedError    — 2xx response carrying success: false
    └── InvalidInputError       — Caller bug (unknown category, bad page, bad size)

The store converts every APIClientError into an error string on its state.
InvalidInputError is never caught by the store.
"""
from __future__ import annotations


class CatalogError(Exception):
    """Base exception for the movie catalog client."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


# ── API Client Errors ─────────────────────────────────────────────────

class APIClientError(CatalogError):
    """Raised when a call to the remote catalog API fails."""

    def __init__(
        self,
        message: str,
        client_name: str = "unknown",
        upstream_status: int | None = None,
    ) -> None:
        self.client_name = client_name
        self.upstream_status = upstream_status
        super().__init__(message)


class APIRateLimitError(APIClientError):
    """Raised when the catalog API returns 429 Too Many Requests."""

    def __init__(self, client_name: str, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(
            message=f"{client_name} API rate limit exceeded. Try again shortly.",
            client_name=client_name,
            upstream_status=429,
        )


class APITimeoutError(APIClientError):
    """Raised when a catalog API request times out."""

    def __init__(self, client_name: str, timeout: float) -> None:
        super().__init__(
            message=f"{client_name} API request timed out after {timeout}s.",
            client_name=client_name,
        )


class APIRejectedError(APIClientError):
    """Raised when the API answers 2xx but reports the operation as failed."""

    def __init__(self, client_name: str, message: str, upstream_status: int | None = None) -> None:
        super().__init__(
            message=f"{client_name}: {message}",
            client_name=client_name,
            upstream_status=upstream_status,
        )


# ── Input Errors ──────────────────────────────────────────────────────

class InvalidInputError(CatalogError):
    """Raised when a store method is called with arguments outside its contract."""
