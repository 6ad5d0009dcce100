"""Local filtering and ordering of movie lists.

- filter_and_rank(): narrows raw search results to titles that actually
  match the query, then orders them newest first.
- sort_watchlist(): orders the watchlist by rating, title or release date.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, TypeVar

from movie_catalog.models.api_schemas import Movie
from movie_catalog.utils.dates import parse_release_date

MovieT = TypeVar("MovieT", bound=Movie)

MIN_INITIALS_LENGTH = 2


def initials(text: str) -> str:
    """First letter of every whitespace-separated word.

    >>> initials("captain america")
    'ca'
    """
    return "".join(word[0] for word in text.split())


def matches_query(movie: Movie, terms: list[str]) -> bool:
    """Whether a movie passes the partial-match or initials-match stage.

    Args:
        movie: Candidate result.
        terms: Lowercased query terms (at least one).
    """
    title = movie.title.lower()
    original_title = (movie.original_title or "").lower()

    if any(term in title or term in original_title for term in terms):
        return True

    # Initials only apply to a single-word query like "ca" for "Captain America"
    if len(terms) == 1 and len(terms[0]) >= MIN_INITIALS_LENGTH:
        term = terms[0]
        return term in initials(title) or term in initials(original_title)

    return False


def sort_by_release_desc(movies: Iterable[MovieT]) -> list[MovieT]:
    """Newest first; undated movies last in their original order."""
    dated: list[tuple[date, MovieT]] = []
    undated: list[MovieT] = []
    for movie in movies:
        released = parse_release_date(movie.release_date)
        if released is None:
            undated.append(movie)
        else:
            dated.append((released, movie))

    # sorted() is stable with reverse=True, so equal dates keep API order
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [movie for _, movie in dated] + undated


def filter_and_rank(movies: Iterable[MovieT], query: str) -> list[MovieT]:
    """Filter raw search results against the query and sort newest first.

    Args:
        movies: Results as returned by the search endpoint.
        query: User query; must be non-empty after stripping.

    Returns:
        New list, input is not modified.
    """
    terms = query.strip().lower().split()
    if not terms:
        return []
    return sort_by_release_desc(movie for movie in movies if matches_query(movie, terms))


class WatchlistSort(str, Enum):
    """Watchlist orderings offered to the user."""
    RATING = "vote_average"
    TITLE = "title"
    RELEASE_DATE = "release_date"

    @property
    def descending(self) -> bool:
        """Default direction: best/newest first, titles A to Z."""
        return self is not WatchlistSort.TITLE


def sort_watchlist(
    movies: Iterable[MovieT],
    sort: WatchlistSort = WatchlistSort.RATING,
    reverse: bool = False,
) -> list[MovieT]:
    """Return the movies ordered by `sort`.

    Args:
        movies: Watchlist entries.
        sort: Field to order by.
        reverse: Flip the option's default direction.
    """
    return sorted(movies, key=_SORT_KEYS[sort], reverse=sort.descending != reverse)


_SORT_KEYS: dict[WatchlistSort, Callable[[Movie], Any]] = {
    WatchlistSort.RATING: lambda movie: movie.vote_average or 0.0,
    WatchlistSort.TITLE: lambda movie: movie.title.lower(),
    # Undated movies count as the oldest
    WatchlistSort.RELEASE_DATE: lambda movie: parse_release_date(movie.release_date) or date.min,
}
