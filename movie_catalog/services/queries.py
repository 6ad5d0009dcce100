"""Discovery query construction for the catalog listings.

"Now playing" and "upcoming" are not TMDB list endpoints here: they are
discovery queries over a release-date window relative to `today`.

    now_playing  release_date in [today - 60 days, today]
    upcoming     release_date in [today + 1 day, today + 2 months]
    popular      no date window

All three sort by popularity descending. The two windowed listings are
restricted to theatrical (2) and digital (3) release types.
"""
from __future__ import annotations

from datetime import date
from typing import Any

from movie_catalog.services.state import Category
from movie_catalog.utils.dates import add_months, days_from
from movie_catalog.utils.exceptions import InvalidInputError

NOW_PLAYING_LOOKBACK_DAYS = 60
UPCOMING_LOOKAHEAD_MONTHS = 2
POPULARITY_DESC = "popularity.desc"
THEATRICAL_OR_DIGITAL = "2|3"


def build_discover_params(
    category: Category,
    page: int,
    today: date,
    language: str = "en-US",
) -> dict[str, Any]:
    """Build `/discover/movie` query parameters for a listing.

    Args:
        category: NOW_PLAYING, UPCOMING or POPULAR.
        page: Page number, 1-based.
        today: Reference day for the release-date window.
        language: Response language.

    Returns:
        Query parameters dict.

    Raises:
        InvalidInputError: For SEARCH or anything outside the enum.
    """
    params: dict[str, Any] = {
        "language": language,
        "page": page,
        "include_adult": False,
        "include_video": False,
        "sort_by": POPULARITY_DESC,
    }

    if category is Category.NOW_PLAYING:
        params["with_release_type"] = THEATRICAL_OR_DIGITAL
        params["release_date.gte"] = days_from(today, -NOW_PLAYING_LOOKBACK_DAYS).isoformat()
        params["release_date.lte"] = today.isoformat()
    elif category is Category.UPCOMING:
        params["with_release_type"] = THEATRICAL_OR_DIGITAL
        params["release_date.gte"] = days_from(today, 1).isoformat()
        params["release_date.lte"] = add_months(today, UPCOMING_LOOKAHEAD_MONTHS).isoformat()
    elif category is Category.POPULAR:
        pass
    else:
        raise InvalidInputError(f"No discovery query for category {category!r}")

    return params
