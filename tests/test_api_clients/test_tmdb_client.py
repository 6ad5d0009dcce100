"""Unit tests for the TMDB API client."""
import json
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import pytest_asyncio

from movie_catalog.api_clients.base_client import parse_retry_after
from movie_catalog.api_clients.tmdb_client import TMDBClient
from movie_catalog.models.api_schemas import MovieDetail, MoviePage, UserProfile
from movie_catalog.utils.exceptions import (
    APIClientError,
    APIRateLimitError,
    APIRejectedError,
    APITimeoutError,
)


@pytest_asyncio.fixture
async def tmdb():
    """Create a TMDBClient with a dummy token."""
    client = TMDBClient(access_token="test-token", base_url="https://api.test/3")
    yield client
    await client.aclose()


def _mock_httpx_response(data, status_code=200, headers=None):
    """Create a mock httpx.Response."""
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    if isinstance(data, Exception):
        resp.json.side_effect = data
        resp.text = ""
    else:
        resp.json.return_value = data
        resp.text = json.dumps(data)
    resp.headers = headers or {}
    return resp


PAGE = {
    "page": 2,
    "results": [
        {
            "id": 1771,
            "title": "Captain America: The First Avenger",
            "original_title": "Captain America: The First Avenger",
            "poster_path": "/vSNxAJTlD0r02V9sPYpOjqDZXUK.jpg",
            "backdrop_path": None,
            "vote_average": 7.0,
            "release_date": "2011-07-22",
            "overview": "During World War II...",
            "genre_ids": [28, 12, 878],
            "popularity": 80.5,
        }
    ],
    "total_pages": 9,
    "total_results": 170,
}


class TestClientSetup:

    @pytest.mark.asyncio
    async def test_bearer_token_header(self, tmdb):
        assert tmdb._client.headers["Authorization"] == "Bearer test-token"
        assert tmdb._client.headers["Accept"] == "application/json"


class TestDiscoverMovies:
    """Tests for TMDBClient.discover_movies."""

    @pytest.mark.asyncio
    async def test_returns_parsed_page(self, tmdb):
        request = AsyncMock(return_value=_mock_httpx_response(PAGE))
        with patch.object(tmdb._client, "request", new=request):
            page = await tmdb.discover_movies({"sort_by": "popularity.desc", "page": 2})

        assert isinstance(page, MoviePage)
        assert page.page == 2
        assert page.total_pages == 9
        assert page.results[0].id == 1771
        assert page.results[0].genre_ids == [28, 12, 878]
        request.assert_awaited_once_with(
            "GET",
            "/discover/movie",
            params={"sort_by": "popularity.desc", "page": 2},
            json=None,
        )

    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self, tmdb):
        request = AsyncMock(return_value=_mock_httpx_response(PAGE))
        with patch.object(tmdb._client, "request", new=request):
            await tmdb.discover_movies({"page": 1, "with_release_type": None})

        assert request.await_args.kwargs["params"] == {"page": 1}

    @pytest.mark.asyncio
    async def test_malformed_body_raises(self, tmdb):
        bad = {"page": 1, "results": [{"title": "No id"}]}
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=_mock_httpx_response(bad))):
            with pytest.raises(APIClientError, match="malformed"):
                await tmdb.discover_movies({})


class TestSearchMovies:

    @pytest.mark.asyncio
    async def test_sends_query(self, tmdb):
        request = AsyncMock(return_value=_mock_httpx_response({"page": 1, "results": []}))
        with patch.object(tmdb._client, "request", new=request):
            page = await tmdb.search_movies("captain america")

        assert page.results == []
        assert request.await_args.args == ("GET", "/search/movie")
        assert request.await_args.kwargs["params"] == {"query": "captain america"}


class TestGetMovieDetails:

    @pytest.mark.asyncio
    async def test_details_with_credits(self, tmdb):
        data = {
            "id": 603,
            "title": "The Matrix",
            "release_date": "1999-03-31",
            "runtime": 136,
            "status": "Released",
            "tagline": "Welcome to the Real World.",
            "original_language": "en",
            "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
            "production_companies": [{"id": 79, "name": "Village Roadshow Pictures"}],
            "credits": {
                "cast": [{"id": 6384, "name": "Keanu Reeves", "character": "Neo", "profile_path": "/k.jpg"}],
                "crew": [{"id": 9339, "name": "Lana Wachowski", "job": "Director", "department": "Directing"}],
            },
        }
        request = AsyncMock(return_value=_mock_httpx_response(data))
        with patch.object(tmdb._client, "request", new=request):
            detail = await tmdb.get_movie_details(603)

        assert isinstance(detail, MovieDetail)
        assert detail.runtime == 136
        assert detail.genre_ids == [28, 878]
        assert detail.credits.cast[0].character == "Neo"
        assert detail.credits.crew[0].job == "Director"
        assert request.await_args.args == ("GET", "/movie/603")
        assert request.await_args.kwargs["params"] == {"append_to_response": "credits"}

    @pytest.mark.asyncio
    async def test_missing_credits_is_none(self, tmdb):
        data = {"id": 603, "title": "The Matrix"}
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=_mock_httpx_response(data))):
            detail = await tmdb.get_movie_details(603)

        assert detail.credits is None
        assert detail.genres == []


class TestWatchlistEndpoints:

    @pytest.mark.asyncio
    async def test_get_watchlist(self, tmdb):
        request = AsyncMock(return_value=_mock_httpx_response(PAGE))
        with patch.object(tmdb._client, "request", new=request):
            page = await tmdb.get_watchlist("42", sort_by="created_at.desc", page=2)

        assert len(page.results) == 1
        assert request.await_args.args == ("GET", "/account/42/watchlist/movies")
        assert request.await_args.kwargs["params"] == {"sort_by": "created_at.desc", "page": 2}

    @pytest.mark.asyncio
    async def test_update_watchlist_posts_body(self, tmdb):
        body = {"success": True, "status_code": 1, "status_message": "Success."}
        request = AsyncMock(return_value=_mock_httpx_response(body, status_code=201))
        with patch.object(tmdb._client, "request", new=request):
            result = await tmdb.update_watchlist("42", 550, watchlist=True)

        assert result.success is True
        assert request.await_args.args == ("POST", "/account/42/watchlist")
        assert request.await_args.kwargs["json"] == {
            "media_type": "movie",
            "media_id": 550,
            "watchlist": True,
        }

    @pytest.mark.asyncio
    async def test_update_watchlist_success_false_raises(self, tmdb):
        body = {"success": False, "status_code": 34, "status_message": "The resource could not be found."}
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=_mock_httpx_response(body))):
            with pytest.raises(APIRejectedError, match="could not be found") as exc_info:
                await tmdb.update_watchlist("42", 550, watchlist=False)

        assert exc_info.value.upstream_status == 34

    @pytest.mark.asyncio
    async def test_update_watchlist_missing_success_raises(self, tmdb):
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=_mock_httpx_response({}))):
            with pytest.raises(APIRejectedError):
                await tmdb.update_watchlist("42", 550, watchlist=True)


class TestGetAccount:

    @pytest.mark.asyncio
    async def test_account_with_avatar(self, tmdb):
        data = {
            "id": 548,
            "name": "Jane Doe",
            "username": "janed",
            "avatar": {"gravatar": {"hash": "abc123"}, "tmdb": {"avatar_path": None}},
            "iso_639_1": "en",
            "iso_3166_1": "US",
            "include_adult": False,
        }
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=_mock_httpx_response(data))):
            profile = await tmdb.get_account("548")

        assert isinstance(profile, UserProfile)
        assert profile.avatar.gravatar.hash == "abc123"
        assert profile.avatar.tmdb.avatar_path is None


class TestErrorMapping:
    """HTTP and transport failures map onto the exception hierarchy."""

    @pytest.mark.asyncio
    async def test_status_message_used_for_4xx(self, tmdb):
        body = {"success": False, "status_code": 7, "status_message": "Invalid API key: You must be granted a valid key."}
        resp = _mock_httpx_response(body, status_code=401)
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=resp)):
            with pytest.raises(APIClientError, match="Invalid API key") as exc_info:
                await tmdb.search_movies("x")

        assert exc_info.value.upstream_status == 401
        assert "HTTP 401" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_plain_status_for_non_json_error(self, tmdb):
        resp = _mock_httpx_response(ValueError("no json"), status_code=503)
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=resp)):
            with pytest.raises(APIClientError, match="HTTP 503 for /movie/1"):
                await tmdb.get_movie_details(1)

    @pytest.mark.asyncio
    async def test_rate_limit_raises_without_retry(self, tmdb):
        resp = _mock_httpx_response({}, status_code=429, headers={"Retry-After": "3"})
        request = AsyncMock(return_value=resp)
        with patch.object(tmdb._client, "request", new=request):
            with pytest.raises(APIRateLimitError) as exc_info:
                await tmdb.discover_movies({})

        assert exc_info.value.retry_after == 3.0
        assert request.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Wed, 21 Oct 2015 07:28:00 GMT", 0.0),
            ("soon", None),
            ("", None),
        ],
    )
    async def test_rate_limit_with_http_date_or_garbage_retry_after(self, tmdb, header, expected):
        resp = _mock_httpx_response({}, status_code=429, headers={"Retry-After": header})
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=resp)):
            with pytest.raises(APIRateLimitError) as exc_info:
                await tmdb.discover_movies({})

        assert exc_info.value.retry_after == expected

    def test_retry_after_future_http_date(self):
        when = datetime.now(timezone.utc) + timedelta(minutes=2)

        seconds = parse_retry_after(format_datetime(when, usegmt=True))

        assert 60 < seconds <= 120

    @pytest.mark.asyncio
    async def test_timeout_raises(self, tmdb):
        request = AsyncMock(side_effect=httpx.TimeoutException("timeout"))
        with patch.object(tmdb._client, "request", new=request):
            with pytest.raises(APITimeoutError, match="timed out"):
                await tmdb.discover_movies({})

        assert request.await_count == 1

    @pytest.mark.asyncio
    async def test_connection_error_raises(self, tmdb):
        with patch.object(tmdb._client, "request", new=AsyncMock(side_effect=httpx.ConnectError("refused"))):
            with pytest.raises(APIClientError, match="network error"):
                await tmdb.get_account("42")

    @pytest.mark.asyncio
    async def test_invalid_json_on_success_raises(self, tmdb):
        resp = _mock_httpx_response(ValueError("bad json"))
        with patch.object(tmdb._client, "request", new=AsyncMock(return_value=resp)):
            with pytest.raises(APIClientError, match="invalid JSON"):
                await tmdb.discover_movies({})


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_health_check_success(self, tmdb):
        with patch.object(tmdb, "get", new=AsyncMock(return_value={"success": True})):
            assert await tmdb.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure(self, tmdb):
        with patch.object(tmdb, "get", new=AsyncMock(side_effect=APIClientError("down"))):
            assert await tmdb.health_check() is False
