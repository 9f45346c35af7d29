"""Input checks shared by the moderation services.

Every check raises :class:`InvalidInputError` before any request is made.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union
from urllib.parse import urlparse

from azure_moderator.exceptions import InvalidInputError
from azure_moderator.moderation.models import ContentCategory

# Azure accepts up to 4 MB of base64 text (about 3 MB of image data).
MAX_BASE64_IMAGE_SIZE = 4_194_304

VALID_ENCODINGS = ("url", "base64")
MIN_RATING = 0.0
MAX_RATING = 5.0


def is_valid_url(value: str) -> bool:
    """Return True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc) and " " not in value


def validate_text(text: str) -> None:
    if not text:
        raise InvalidInputError("Text cannot be empty")


def validate_rating(rating: float) -> None:
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidInputError("Rating must be between 0 and 5")


def validate_image(image: str, encoding: str) -> None:
    if not image:
        raise InvalidInputError("Image cannot be empty")
    if encoding not in VALID_ENCODINGS:
        raise InvalidInputError('Encoding must be "base64" or "url"')
    if encoding == "url" and not is_valid_url(image):
        raise InvalidInputError("Invalid image URL")
    if encoding == "base64" and len(image) > MAX_BASE64_IMAGE_SIZE:
        raise InvalidInputError("Image size exceeds maximum allowed (4MB base64 encoded)")


def validate_categories(
    categories: Optional[Iterable[Union[str, ContentCategory]]],
) -> list[str]:
    """Return category wire values, defaulting to every category."""
    try:
        return ContentCategory.parse(categories)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown content category: {exc}") from exc
