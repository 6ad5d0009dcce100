"""Centralized client configuration using Pydantic Settings.

Loads configuration from environment variables and `.env` file with
full validation, type coercion, and sensible defaults.

Usage:
    from movie_catalog.config import get_settings

    settings = get_settings()  # cached singleton
    print(settings.TMDB_BASE_URL)
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_TOKENS = ("your-access-token-here", "changeme", "xxxxx")


class Settings(BaseSettings):
    """Client settings loaded from environment variables / .env file.

    Required:
        TMDB_ACCESS_TOKEN: Bearer token for the catalog API.
        TMDB_ACCOUNT_ID: Account that owns the watchlist and profile.

    All other fields have sensible defaults and are optional overrides.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Catalog API ───────────────────────────────────────────────────
    TMDB_ACCESS_TOKEN: str = Field(..., description="TMDB API read access token (required)")
    TMDB_ACCOUNT_ID: str = Field(..., description="TMDB account id used for watchlist/profile (required)")
    TMDB_BASE_URL: str = Field(default="https://api.themoviedb.org/3", description="TMDB API v3 base URL")
    TMDB_LANGUAGE: str = Field(default="en-US", description="Language sent with discovery queries")

    # ── Images ────────────────────────────────────────────────────────
    TMDB_IMAGE_BASE_URL: str = Field(
        default="https://media.themoviedb.org/t/p",
        description="Base URL that poster/backdrop path fragments are appended to",
    )
    GRAVATAR_BASE_URL: str = Field(default="https://www.gravatar.com/avatar", description="Gravatar avatar base URL")
    POSTER_PLACEHOLDER_URL: str = Field(
        default="https://via.placeholder.com/500x750?text=No+Image+Available",
        description="Image shown when a movie has no poster",
    )
    AVATAR_PLACEHOLDER_URL: str = Field(
        default="https://via.placeholder.com/150?text=User",
        description="Image shown when the profile has no avatar",
    )

    # ── HTTP Client ───────────────────────────────────────────────────
    HTTP_TIMEOUT: int = Field(default=30, ge=1, le=120, description="HTTP request timeout (seconds)")

    # ── Logging ───────────────────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    LOG_FORMAT: str = Field(default="json", description="Log output format ('json' or 'console')")

    # ── Validators ────────────────────────────────────────────────────

    @field_validator("TMDB_ACCESS_TOKEN")
    @classmethod
    def validate_access_token(cls, v: str) -> str:
        """Ensure the access token is not empty or a placeholder."""
        v = v.strip()
        if not v or v.lower() in PLACEHOLDER_TOKENS:
            raise ValueError(
                "TMDB_ACCESS_TOKEN must be set to a valid API read access token. "
                "Create one at https://www.themoviedb.org/settings/api"
            )
        return v

    @field_validator("TMDB_ACCOUNT_ID")
    @classmethod
    def validate_account_id(cls, v: str) -> str:
        """Reject blank account ids."""
        v = v.strip()
        if not v:
            raise ValueError("TMDB_ACCOUNT_ID must not be empty")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate log level."""
        v = v.upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        v = v.lower().strip()
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @field_validator("TMDB_BASE_URL", "TMDB_IMAGE_BASE_URL", "GRAVATAR_BASE_URL")
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Ensure base URLs don't have trailing slashes."""
        return v.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Uses `lru_cache` so the `.env` file is only read once.
    """
    return Settings()
