"""Movie Catalog Client — data layer for a movie browsing app.

The `create_store()` factory wires configuration, logging, the TMDB API
client and the catalog store together. The presentation layer holds the
returned store for the lifetime of the app session.
"""
from __future__ import annotations

from datetime import date
from typing import Callable

import structlog

from movie_catalog.api_clients.tmdb_client import TMDBClient
from movie_catalog.config import Settings, get_settings
from movie_catalog.services.catalog_store import CatalogStore
from movie_catalog.utils.images import ImageUrlBuilder
from movie_catalog.utils.logger import bind_session, setup_logging


def create_store(
    settings: Settings | None = None,
    today: Callable[[], date] | None = None,
) -> CatalogStore:
    """Store factory.

    Creates and configures:
    - Structured logging (structlog), with a session id bound for the store
    - The TMDB API client
    - The image URL builder
    - One CatalogStore instance

    Args:
        settings: Overrides the settings loaded from the environment.
        today: Clock for date-windowed listings (defaults to `date.today`).

    Returns:
        A ready CatalogStore. The caller closes it with `await store.aclose()`.
    """
    settings = settings or get_settings()

    # ── Logging (first, so the rest logs formatted) ──────────────────
    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
    bind_session()
    logger = structlog.get_logger(__name__)

    client = TMDBClient(
        access_token=settings.TMDB_ACCESS_TOKEN,
        base_url=settings.TMDB_BASE_URL,
        timeout=settings.HTTP_TIMEOUT,
    )
    images = ImageUrlBuilder(
        image_base=settings.TMDB_IMAGE_BASE_URL,
        poster_placeholder=settings.POSTER_PLACEHOLDER_URL,
        avatar_placeholder=settings.AVATAR_PLACEHOLDER_URL,
        gravatar_base=settings.GRAVATAR_BASE_URL,
    )
    store = CatalogStore(
        client,
        account_id=settings.TMDB_ACCOUNT_ID,
        images=images,
        today=today or date.today,
        language=settings.TMDB_LANGUAGE,
    )

    logger.info(
        "store_created",
        base_url=settings.TMDB_BASE_URL,
        language=settings.TMDB_LANGUAGE,
    )
    return store
