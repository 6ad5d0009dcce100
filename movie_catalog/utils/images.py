"""Image URL helpers for posters and profile avatars.

TMDB hands out path fragments such as "/pzIddUEMWhWzfvLI3TwxUG2wGoi.jpg";
the full URL is `{image_base}/{size_segment}{path}`.
"""
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from movie_catalog.models.api_schemas import UserProfile
from movie_catalog.utils.exceptions import InvalidInputError

POSTER_SIZES: dict[str, str] = {
    "small": "w185",
    "medium": "w342",
    "large": "w500",
    "original": "original",
}

AVATAR_SIZE = "small"


def is_absolute_url(value: str) -> bool:
    """True when `value` starts with a URL scheme (http:, https:, file:, ...)."""
    try:
        return bool(urlsplit(value).scheme)
    except ValueError:
        return False


@dataclass(frozen=True)
class ImageUrlBuilder:
    """Builds fully-qualified image URLs from API path fragments."""

    image_base: str
    poster_placeholder: str
    avatar_placeholder: str
    gravatar_base: str = "https://www.gravatar.com/avatar"

    def poster(self, path: str | None, size: str = "medium") -> str:
        """Full URL for a poster/backdrop path.

        Args:
            path: Path fragment, a complete URL, or None.
            size: One of small, medium, large, original.

        Returns:
            The placeholder for a missing path, the input for a complete URL,
            otherwise the composed URL.

        Raises:
            InvalidInputError: For an unknown size.
        """
        if size not in POSTER_SIZES:
            raise InvalidInputError(f"Unknown poster size {size!r}, expected one of {list(POSTER_SIZES)}")

        if not path or not path.strip():
            return self.poster_placeholder

        if is_absolute_url(path):
            return path

        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.image_base}/{POSTER_SIZES[size]}{path}"

    def avatar(self, profile: UserProfile | None) -> str:
        """Avatar URL: gravatar hash, then TMDB avatar path, then placeholder."""
        avatar = profile.avatar if profile else None
        if avatar is not None:
            if avatar.gravatar and avatar.gravatar.hash:
                return f"{self.gravatar_base}/{avatar.gravatar.hash}"
            if avatar.tmdb and avatar.tmdb.avatar_path:
                return self.poster(avatar.tmdb.avatar_path, AVATAR_SIZE)
        return self.avatar_placeholder


def user_initial(profile: UserProfile | None) -> str:
    """Uppercased first letter of the name, else of the username, else "?"."""
    if profile is not None:
        for value in (profile.name, profile.username):
            value = (value or "").strip()
            if value:
                return value[0].upper()
    return "?"
