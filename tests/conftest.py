"""Shared pytest fixtures for the catalog client test suite.

Provides reusable fixtures for:
- Test settings (no .env lookup)
- A TMDB client mock whose coroutine methods are AsyncMocks
- An image URL builder
- A CatalogStore with a fixed clock
"""
from datetime import date
from unittest.mock import MagicMock

import pytest

from movie_catalog.api_clients.tmdb_client import TMDBClient
from movie_catalog.config import Settings
from movie_catalog.services.catalog_store import CatalogStore
from movie_catalog.utils.images import ImageUrlBuilder

FIXED_TODAY = date(2025, 3, 15)


@pytest.fixture
def settings():
    """Create test settings."""
    return Settings(
        _env_file=None,
        TMDB_ACCESS_TOKEN="test-access-token",
        TMDB_ACCOUNT_ID="42",
        LOG_FORMAT="console",
    )


@pytest.fixture
def mock_client():
    """Create a mock TMDBClient (async methods become AsyncMocks)."""
    return MagicMock(spec=TMDBClient)


@pytest.fixture
def images():
    return ImageUrlBuilder(
        image_base="https://img.test/t/p",
        poster_placeholder="https://img.test/no-poster.png",
        avatar_placeholder="https://img.test/no-avatar.png",
        gravatar_base="https://gravatar.test/avatar",
    )


@pytest.fixture
def store(mock_client, images):
    """Create a CatalogStore pinned to FIXED_TODAY."""
    return CatalogStore(mock_client, account_id="42", images=images, today=lambda: FIXED_TODAY)
