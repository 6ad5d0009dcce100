"""Catalog store: client-side state for movie listings, search, details,
watchlist and the user profile.

The store owns all state the presentation layer renders. Every public
coroutine suspends only on the TMDB client call, then writes its results
and publishes a StoreChange to subscribers.

Failure model:
- APIClientError (network, HTTP, success:false) is caught, its message is
  stored on the matching state's `error`, and the method returns an
  empty/None/False signal. Nothing is retried.
- InvalidInputError (caller bug) propagates.

Concurrency notes:
- Listings are independent; fetches for different categories can run
  concurrently (see `refresh_all`).
- A second fetch for the same category and page joins the one in flight.
  Fetches for different pages of one category are not serialized: the
  last response written wins.
- Watchlist mutations for the same movie id are not synchronized.

Usage:
    store = CatalogStore(client, account_id="123", images=builder)
    unsubscribe = store.subscribe(on_change)
    await store.fetch_popular()
    store.categories[Category.POPULAR].items
"""
from __future__ import annotations

import asyncio
from datetime import date
from typing import Callable

import structlog

from movie_catalog.api_clients.tmdb_client import TMDBClient
from movie_catalog.models.api_schemas import Movie, MovieDetail, UserProfile
from movie_catalog.services.queries import build_discover_params
from movie_catalog.services.ranking import WatchlistSort, filter_and_rank, sort_watchlist
from movie_catalog.services.state import (
    Category,
    CategoryState,
    Listener,
    ResourceState,
    StoreChange,
    Topic,
    WatchlistState,
)
from movie_catalog.utils.exceptions import APIClientError, InvalidInputError
from movie_catalog.utils.images import ImageUrlBuilder, user_initial

logger = structlog.get_logger(__name__)

LISTING_CATEGORIES = (Category.NOW_PLAYING, Category.UPCOMING, Category.POPULAR)


class CatalogStore:
    """State container for one app session.

    Construct one per session and hand it to whatever renders it; close it
    with `aclose()` (or `async with store`) to release the HTTP client.

    Args:
        client: TMDB API client.
        account_id: Account owning the watchlist and profile.
        images: Image URL builder.
        today: Clock used for the "now playing"/"upcoming" date windows.
        language: Language sent with discovery queries.
    """

    def __init__(
        self,
        client: TMDBClient,
        account_id: str,
        images: ImageUrlBuilder,
        today: Callable[[], date] = date.today,
        language: str = "en-US",
    ) -> None:
        self._client = client
        self._account_id = account_id
        self._images = images
        self._today = today
        self._language = language

        self.categories: dict[Category, CategoryState] = {
            category: CategoryState() for category in Category
        }
        self.watchlist_state = WatchlistState()
        self.detail: MovieDetail | None = None
        self.detail_state = ResourceState()
        self.profile: UserProfile | None = None
        self.profile_state = ResourceState()

        # Keyed by movie id; dicts keep insertion order for rendering
        self._watchlist: dict[int, Movie] = {}
        self._listeners: list[Listener] = []
        self._in_flight: dict[tuple[Category, int], asyncio.Task] = {}

    async def aclose(self) -> None:
        """Close the underlying API client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    # ── Subscriptions ─────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, topic: Topic, category: Category | None = None) -> None:
        change = StoreChange(topic=topic, category=category)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                # A broken subscriber must not leave store state half-written
                logger.exception("listener_failed", topic=topic.value)

    # ── Listings ──────────────────────────────────────────────────────

    def items(self, category: Category) -> list[Movie]:
        """Cached items for a listing, in API order."""
        return self.categories[Category(category)].items

    async def fetch_category(self, category: Category, page: int = 1) -> None:
        """Fetch one page of a listing and replace its cached items.

        Args:
            category: NOW_PLAYING, UPCOMING or POPULAR.
            page: Page number, >= 1.

        Raises:
            InvalidInputError: For SEARCH, an unknown category or page < 1.
        """
        category = self._listing_category(category)
        if page < 1:
            raise InvalidInputError(f"page must be >= 1, got {page}")

        key = (category, page)
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._load_category(category, page))
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        else:
            logger.debug("category_fetch_joined", category=category.value, page=page)

        # Shielded so a cancelled caller cannot leave `loading` stuck
        await asyncio.shield(task)

    async def _load_category(self, category: Category, page: int) -> None:
        state = self.categories[category]
        state.loading = True
        state.error = None
        self._emit(Topic.CATEGORY, category)

        params = build_discover_params(category, page, self._today(), language=self._language)
        try:
            result = await self._client.discover_movies(params)
        except APIClientError as e:
            state.error = e.message
            logger.warning("category_fetch_failed", category=category.value, page=page, error=e.message)
        else:
            state.items = list(result.results)
            state.current_page = result.page
            state.total_pages = result.total_pages
            logger.info(
                "category_fetched",
                category=category.value,
                page=result.page,
                total_pages=result.total_pages,
                count=len(result.results),
            )
        finally:
            state.loading = False

        self._emit(Topic.CATEGORY, category)

    async def fetch_now_playing(self, force_refresh: bool = False) -> None:
        """Fetch "now playing" unless it is already cached."""
        await self._fetch_unless_cached(Category.NOW_PLAYING, force_refresh)

    async def fetch_upcoming(self, force_refresh: bool = False) -> None:
        """Fetch "upcoming" unless it is already cached."""
        await self._fetch_unless_cached(Category.UPCOMING, force_refresh)

    async def fetch_popular(self, force_refresh: bool = False) -> None:
        """Fetch "popular" unless it is already cached."""
        await self._fetch_unless_cached(Category.POPULAR, force_refresh)

    async def _fetch_unless_cached(self, category: Category, force_refresh: bool) -> None:
        if self.categories[category].items and not force_refresh:
            logger.debug("category_cache_hit", category=category.value)
            return
        await self.fetch_category(category)

    async def refresh_all(self) -> None:
        """Force-refresh every listing concurrently and wait for all of them."""
        await asyncio.gather(
            self.fetch_now_playing(force_refresh=True),
            self.fetch_upcoming(force_refresh=True),
            self.fetch_popular(force_refresh=True),
        )

    def clear_cache(self) -> None:
        """Empty every category and reset its pagination.

        Loading and error flags are not touched.
        """
        for state in self.categories.values():
            state.reset()
        logger.info("cache_cleared")
        self._emit(Topic.CATEGORY)

    @staticmethod
    def _listing_category(category: Category) -> Category:
        try:
            category = Category(category)
        except ValueError as e:
            raise InvalidInputError(f"Unknown category {category!r}") from e
        if category not in LISTING_CATEGORIES:
            raise InvalidInputError(f"Category {category.value!r} cannot be fetched as a listing")
        return category

    # ── Search ────────────────────────────────────────────────────────

    async def search(self, query: str) -> list[Movie]:
        """Search titles and return matches, newest first.

        Results are returned to the caller and not cached; the SEARCH
        category only carries the loading/error flags. An empty query
        returns [] without a request but still toggles `loading`.

        Args:
            query: Free text; matched as substrings or as title initials.

        Returns:
            Filtered, sorted results; [] on empty query or failure.
        """
        trimmed = query.strip()
        state = self.categories[Category.SEARCH]
        state.loading = True
        state.error = None
        self._emit(Topic.CATEGORY, Category.SEARCH)

        results: list[Movie] = []
        try:
            if trimmed:
                page = await self._client.search_movies(trimmed)
                results = filter_and_rank(page.results, trimmed)
                logger.info(
                    "search_completed",
                    query=trimmed,
                    matched=len(results),
                    total=len(page.results),
                )
        except APIClientError as e:
            state.error = e.message
            logger.warning("search_failed", query=trimmed, error=e.message)
        finally:
            state.loading = False

        self._emit(Topic.CATEGORY, Category.SEARCH)
        return results

    # ── Details ───────────────────────────────────────────────────────

    async def get_details(self, movie_id: int) -> MovieDetail | None:
        """Fetch a movie with credits and make it the current detail record.

        Returns:
            The record, or None on failure (the previous record is kept).
        """
        self.detail_state.loading = True
        self.detail_state.error = None
        self._emit(Topic.DETAIL)

        detail: MovieDetail | None = None
        try:
            detail = await self._client.get_movie_details(movie_id)
        except APIClientError as e:
            self.detail_state.error = e.message
            logger.warning("detail_fetch_failed", movie_id=movie_id, error=e.message)
        else:
            self.detail = detail
            logger.info("detail_fetched", movie_id=movie_id, has_credits=detail.credits is not None)
        finally:
            self.detail_state.loading = False

        self._emit(Topic.DETAIL)
        return detail

    # ── Watchlist ─────────────────────────────────────────────────────

    @property
    def watchlist(self) -> list[Movie]:
        """Watchlist entries in the order they were added or fetched."""
        return list(self._watchlist.values())

    def is_in_watchlist(self, movie_id: int) -> bool:
        return movie_id in self._watchlist

    def sorted_watchlist(self, sort: WatchlistSort = WatchlistSort.RATING, reverse: bool = False) -> list[Movie]:
        """Watchlist ordered for display; the stored order is unchanged."""
        return sort_watchlist(self._watchlist.values(), sort, reverse)

    async def fetch_watchlist(self, page: int = 1, sort_by: str = "created_at.asc") -> None:
        """Replace the local watchlist with one page from the account."""
        if page < 1:
            raise InvalidInputError(f"page must be >= 1, got {page}")

        state = self.watchlist_state
        state.loading = True
        state.error = None
        self._emit(Topic.WATCHLIST)

        try:
            result = await self._client.get_watchlist(self._account_id, sort_by=sort_by, page=page)
        except APIClientError as e:
            state.error = e.message
            logger.warning("watchlist_fetch_failed", page=page, error=e.message)
        else:
            self._watchlist = {movie.id: movie for movie in result.results}
            state.current_page = result.page
            state.total_pages = result.total_pages
            logger.info("watchlist_fetched", page=result.page, count=len(self._watchlist))
        finally:
            state.loading = False

        self._emit(Topic.WATCHLIST)

    async def add_to_watchlist(self, movie: Movie) -> bool:
        """Add a movie once the API confirms it.

        Returns:
            True if the movie was added; False if it was already present
            (no request made) or the API call failed.
        """
        if self.is_in_watchlist(movie.id):
            logger.debug("watchlist_add_skipped", movie_id=movie.id)
            return False

        if not await self._update_remote_watchlist(movie.id, watchlist=True):
            return False

        self._watchlist[movie.id] = movie
        logger.info("watchlist_added", movie_id=movie.id, count=len(self._watchlist))
        self._emit(Topic.WATCHLIST)
        return True

    async def remove_from_watchlist(self, movie_id: int) -> bool:
        """Remove a movie once the API confirms it.

        Returns:
            True if the movie was removed; False if it was not present
            (no request made) or the API call failed.
        """
        if not self.is_in_watchlist(movie_id):
            logger.debug("watchlist_remove_skipped", movie_id=movie_id)
            return False

        if not await self._update_remote_watchlist(movie_id, watchlist=False):
            return False

        self._watchlist.pop(movie_id, None)
        logger.info("watchlist_removed", movie_id=movie_id, count=len(self._watchlist))
        self._emit(Topic.WATCHLIST)
        return True

    async def toggle_watchlist(self, movie: Movie) -> bool:
        """Add the movie if absent, remove it if present.

        Returns:
            Whether the movie is in the watchlist afterwards. A failed
            call leaves membership, and so the return value, unchanged.
        """
        if self.is_in_watchlist(movie.id):
            await self.remove_from_watchlist(movie.id)
        else:
            await self.add_to_watchlist(movie)
        return self.is_in_watchlist(movie.id)

    async def _update_remote_watchlist(self, movie_id: int, watchlist: bool) -> bool:
        self.watchlist_state.error = None
        try:
            await self._client.update_watchlist(self._account_id, movie_id, watchlist=watchlist)
        except APIClientError as e:
            self.watchlist_state.error = e.message
            logger.warning("watchlist_update_failed", movie_id=movie_id, watchlist=watchlist, error=e.message)
            self._emit(Topic.WATCHLIST)
            return False
        return True

    # ── Profile & Images ──────────────────────────────────────────────

    async def get_user_profile(self) -> UserProfile | None:
        """Fetch the account profile, replacing the previous one on success."""
        self.profile_state.loading = True
        self.profile_state.error = None
        self._emit(Topic.PROFILE)

        profile: UserProfile | None = None
        try:
            profile = await self._client.get_account(self._account_id)
        except APIClientError as e:
            self.profile_state.error = e.message
            logger.warning("profile_fetch_failed", error=e.message)
        else:
            self.profile = profile
            logger.info("profile_fetched", account_id=profile.id)
        finally:
            self.profile_state.loading = False

        self._emit(Topic.PROFILE)
        return profile

    def get_poster_url(self, path: str | None, size: str = "medium") -> str:
        return self._images.poster(path, size)

    def get_user_avatar_url(self) -> str:
        return self._images.avatar(self.profile)

    def get_user_initial(self) -> str:
        return user_initial(self.profile)
