"""Pydantic models for catalog API response validation.

These models parse raw TMDB JSON into typed objects. Unknown fields are
ignored, and sub-resources the API may omit (credits, avatar, images)
are optional so a partial response is still a valid record.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator


# ══════════════════════════════════════════════════════════════════════
# Movies
# ══════════════════════════════════════════════════════════════════════

class Movie(BaseModel):
    """Movie summary as returned by list endpoints."""
    id: int
    title: str
    original_title: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: float = 0.0
    release_date: Optional[str] = None   # ISO date, may be "" or missing
    overview: str = ""
    genre_ids: list[int] = Field(default_factory=list)


class Genre(BaseModel):
    id: int
    name: str


class ProductionCompany(BaseModel):
    id: int
    name: str
    logo_path: Optional[str] = None
    origin_country: Optional[str] = None


class CastMember(BaseModel):
    id: int
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None


class CrewMember(BaseModel):
    id: int
    name: str
    job: Optional[str] = None
    department: Optional[str] = None


class Credits(BaseModel):
    """Credits embedded via `append_to_response=credits`."""
    cast: list[CastMember] = Field(default_factory=list)
    crew: list[CrewMember] = Field(default_factory=list)


class MovieDetail(Movie):
    """Full movie record from the detail endpoint."""
    genres: list[Genre] = Field(default_factory=list)
    runtime: Optional[int] = None
    status: Optional[str] = None
    tagline: Optional[str] = None
    original_language: Optional[str] = None
    production_companies: list[ProductionCompany] = Field(default_factory=list)
    credits: Optional[Credits] = None

    @model_validator(mode="after")
    def fill_genre_ids(self) -> "MovieDetail":
        """The detail endpoint sends `genres` but not `genre_ids`."""
        if not self.genre_ids and self.genres:
            self.genre_ids = [genre.id for genre in self.genres]
        return self


class MoviePage(BaseModel):
    """Envelope shared by every paginated list endpoint."""
    page: int = 1
    results: list[Movie] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


# ══════════════════════════════════════════════════════════════════════
# Account
# ══════════════════════════════════════════════════════════════════════

class GravatarAvatar(BaseModel):
    hash: Optional[str] = None


class TMDBAvatar(BaseModel):
    avatar_path: Optional[str] = None


class Avatar(BaseModel):
    gravatar: Optional[GravatarAvatar] = None
    tmdb: Optional[TMDBAvatar] = None


class UserProfile(BaseModel):
    """Account details from `GET /account/{account_id}`."""
    id: int
    name: str = ""
    username: str = ""
    avatar: Optional[Avatar] = None
    iso_639_1: Optional[str] = None
    iso_3166_1: Optional[str] = None
    include_adult: bool = False


class WatchlistUpdateResult(BaseModel):
    """Body of `POST /account/{account_id}/watchlist`."""
    success: bool = False
    status_code: Optional[int] = None
    status_message: Optional[str] = None
