"""Unit tests for Settings and the store factory."""
import pytest
import structlog
from pydantic import ValidationError

from movie_catalog import create_store
from movie_catalog.config import Settings
from movie_catalog.services.catalog_store import CatalogStore


def _settings(**overrides):
    values = {"TMDB_ACCESS_TOKEN": "token-123", "TMDB_ACCOUNT_ID": "42"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:

    def test_defaults(self):
        settings = _settings()

        assert settings.TMDB_BASE_URL == "https://api.themoviedb.org/3"
        assert settings.TMDB_IMAGE_BASE_URL == "https://media.themoviedb.org/t/p"
        assert settings.TMDB_LANGUAGE == "en-US"
        assert settings.LOG_LEVEL == "INFO"

    @pytest.mark.parametrize("token", ["", "   ", "your-access-token-here"])
    def test_rejects_placeholder_token(self, token):
        with pytest.raises(ValidationError, match="TMDB_ACCESS_TOKEN"):
            _settings(TMDB_ACCESS_TOKEN=token)

    def test_rejects_blank_account(self):
        with pytest.raises(ValidationError):
            _settings(TMDB_ACCOUNT_ID=" ")

    def test_strips_trailing_slashes(self):
        settings = _settings(TMDB_BASE_URL="https://api.test/3/", TMDB_IMAGE_BASE_URL="https://img.test/t/p/")

        assert settings.TMDB_BASE_URL == "https://api.test/3"
        assert settings.TMDB_IMAGE_BASE_URL == "https://img.test/t/p"

    def test_normalizes_log_settings(self):
        settings = _settings(LOG_LEVEL="debug", LOG_FORMAT="Console")

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.LOG_FORMAT == "console"

    @pytest.mark.parametrize("field, value", [("LOG_LEVEL", "LOUD"), ("LOG_FORMAT", "xml"), ("HTTP_TIMEOUT", 0)])
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            _settings(**{field: value})


class TestCreateStore:

    @pytest.mark.asyncio
    async def test_wires_store_from_settings(self, settings):
        store = create_store(settings)
        try:
            assert isinstance(store, CatalogStore)
            assert store.get_poster_url("/p.jpg", "small") == "https://media.themoviedb.org/t/p/w185/p.jpg"
            assert store._client._client.headers["Authorization"] == "Bearer test-access-token"
        finally:
            await store.aclose()

    @pytest.mark.asyncio
    async def test_binds_session_id_for_logging(self, settings):
        structlog.contextvars.clear_contextvars()

        store = create_store(settings)
        try:
            assert "session_id" in structlog.contextvars.get_contextvars()
        finally:
            await store.aclose()
