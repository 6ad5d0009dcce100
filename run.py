"""Command-line entry point.

Builds the catalog store from the environment, refreshes every listing
concurrently and logs what was loaded.

Usage:
    TMDB_ACCESS_TOKEN=... TMDB_ACCOUNT_ID=... python run.py
"""
import asyncio

import structlog

from movie_catalog import create_store
from movie_catalog.services.catalog_store import LISTING_CATEGORIES


async def main() -> int:
    logger = structlog.get_logger("run")
    async with create_store() as store:
        await store.refresh_all()

        failed = 0
        for category in LISTING_CATEGORIES:
            state = store.categories[category]
            if state.error:
                failed += 1
            logger.info(
                "listing_summary",
                category=category.value,
                count=len(state.items),
                total_pages=state.total_pages,
                error=state.error,
                top=[movie.title for movie in state.items[:3]],
            )
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
