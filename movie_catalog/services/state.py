"""State containers and change notifications for the catalog store.

Every field here is plain data. The store mutates these objects and then
publishes a StoreChange so subscribers can re-read what they display.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from movie_catalog.models.api_schemas import Movie


class Category(str, Enum):
    """Fixed set of catalog listings."""
    NOW_PLAYING = "now_playing"
    UPCOMING = "upcoming"
    POPULAR = "popular"
    SEARCH = "search"


class Topic(str, Enum):
    """Which part of the store a change touched."""
    CATEGORY = "category"
    WATCHLIST = "watchlist"
    DETAIL = "detail"
    PROFILE = "profile"


@dataclass
class ResourceState:
    """Loading/error bookkeeping for one remote resource.

    `loading` is True only while a request for the resource is in flight.
    """
    loading: bool = False
    error: str | None = None


@dataclass
class CategoryState(ResourceState):
    """One listing: items in API order plus pagination from the last success."""
    items: list[Movie] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0

    def reset(self) -> None:
        """Drop cached items and pagination; loading/error are left alone."""
        self.items = []
        self.current_page = 1
        self.total_pages = 0


@dataclass
class WatchlistState(ResourceState):
    current_page: int = 1
    total_pages: int = 0


@dataclass(frozen=True)
class StoreChange:
    """Notification published after each batch of store mutations."""
    topic: Topic
    category: Category | None = None


Listener = Callable[[StoreChange], None]
