"""TMDB API client for movie catalog data.

The Movie Database v3 API provides movie listings, search, details and
per-account watchlists.
Base URL: https://api.themoviedb.org/3
Auth: Bearer read access token on every request

Implements the endpoints the catalog store uses:
- discover_movies, search_movies, get_movie_details
- get_watchlist, update_watchlist, get_account
"""
from __future__ import annotations

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from movie_catalog.api_clients.base_client import BaseAPIClient
from movie_catalog.models.api_schemas import (
    MovieDetail,
    MoviePage,
    UserProfile,
    WatchlistUpdateResult,
)
from movie_catalog.utils.exceptions import APIClientError, APIRejectedError

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class TMDBClient(BaseAPIClient):
    """Client for the TMDB v3 API."""

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.themoviedb.org/3",
        timeout: int = 30,
    ) -> None:
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
        )

    # ── Movie Endpoints ───────────────────────────────────────────────

    async def discover_movies(self, params: dict[str, Any]) -> MoviePage:
        """Run a discovery query.

        Args:
            params: Discovery filters (`sort_by`, `release_date.gte`, ...).

        Returns:
            One page of results.
        """
        data = await self.get("/discover/movie", params=params)
        return self._parse(MoviePage, data, "/discover/movie")

    async def search_movies(self, query: str) -> MoviePage:
        """Search movies by title. Only the first results page is requested."""
        data = await self.get("/search/movie", params={"query": query})
        return self._parse(MoviePage, data, "/search/movie")

    async def get_movie_details(self, movie_id: int) -> MovieDetail:
        """Get a movie with its credits embedded in the same response.

        Args:
            movie_id: TMDB movie id.

        Returns:
            MovieDetail; `credits` is None when the API omits it.
        """
        endpoint = f"/movie/{movie_id}"
        data = await self.get(endpoint, params={"append_to_response": "credits"})
        return self._parse(MovieDetail, data, endpoint)

    # ── Account Endpoints ─────────────────────────────────────────────

    async def get_watchlist(
        self,
        account_id: str,
        sort_by: str = "created_at.asc",
        page: int = 1,
    ) -> MoviePage:
        """Get one page of the account's movie watchlist."""
        endpoint = f"/account/{account_id}/watchlist/movies"
        data = await self.get(endpoint, params={"sort_by": sort_by, "page": page})
        return self._parse(MoviePage, data, endpoint)

    async def update_watchlist(
        self,
        account_id: str,
        media_id: int,
        watchlist: bool,
    ) -> WatchlistUpdateResult:
        """Add a movie to, or remove it from, the account's watchlist.

        Args:
            account_id: TMDB account id.
            media_id: Movie id.
            watchlist: True to add, False to remove.

        Returns:
            The parsed response; `success` is always True here.

        Raises:
            APIRejectedError: When the response does not report success.
        """
        endpoint = f"/account/{account_id}/watchlist"
        data = await self.post(
            endpoint,
            json={"media_type": "movie", "media_id": media_id, "watchlist": watchlist},
        )
        result = self._parse(WatchlistUpdateResult, data, endpoint)
        if not result.success:
            raise APIRejectedError(
                client_name=self._client_name,
                message=result.status_message or f"watchlist update for movie {media_id} was not applied",
                upstream_status=result.status_code,
            )
        return result

    async def get_account(self, account_id: str) -> UserProfile:
        """Get account details (name, username, avatar)."""
        endpoint = f"/account/{account_id}"
        data = await self.get(endpoint)
        return self._parse(UserProfile, data, endpoint)

    # ── Health Check ──────────────────────────────────────────────────

    async def health_check(self) -> bool:
        """Verify the API is reachable and the token is accepted."""
        try:
            await self.get("/authentication")
            return True
        except Exception:
            return False

    # ── Private Helpers ───────────────────────────────────────────────

    def _parse(self, model: type[ModelT], data: Any, endpoint: str) -> ModelT:
        """Validate a JSON body against a model, as an APIClientError on failure."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "malformed_response",
                client=self._client_name,
                endpoint=endpoint,
                errors=e.error_count(),
            )
            raise APIClientError(
                message=f"{self._client_name}: malformed response from {endpoint}",
                client_name=self._client_name,
            ) from e

    def _error_message(self, response: httpx.Response, endpoint: str) -> str:
        """Prefer TMDB's `status_message` over the bare status code."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("status_message"):
            return f"{self._client_name}: {body['status_message']} (HTTP {response.status_code})"
        return super()._error_message(response, endpoint)
