"""Image URL validation.

Dish images are referenced by URL. A URL is accepted when it is an absolute
http(s) URL that either looks like an image file or points at a known stock
image host. Accepted URLs are returned in the parser's normalized form rather
than as typed by the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import AnyUrl, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")
ALLOWED_IMAGE_HOSTS = ("unsplash.com", "images.unsplash.com", "pixabay.com", "pexels.com")

_url_adapter = TypeAdapter(AnyUrl)


@dataclass(frozen=True)
class ImageUrlValidation:
    """Outcome of validate_image_url.

    Attributes:
        is_valid: Whether the URL may be stored on a dish.
        sanitized: Normalized URL when valid, otherwise an empty string.
    """

    is_valid: bool
    sanitized: str


def _has_image_extension(path: str) -> bool:
    # Substring match: "/photo.jpg/raw" and "/a.png?x" style paths both pass.
    lowered = path.lower()
    return any(ext in lowered for ext in IMAGE_EXTENSIONS)


def _is_allowed_host(host: str) -> bool:
    return any(domain in host for domain in ALLOWED_IMAGE_HOSTS)


def validate_image_url(url: str) -> ImageUrlValidation:
    """Validate and normalize an image URL.

    Checks:
    - Empty input means "no image" and is valid
    - Must parse as an absolute URL
    - Scheme is http or https only
    - Path contains an image extension, or host is an allowed image host

    Args:
        url: URL as entered by the user.

    Returns:
        ImageUrlValidation with the normalized URL when valid.
    """
    if not url:
        return ImageUrlValidation(is_valid=True, sanitized="")

    try:
        parsed = _url_adapter.validate_python(url)
    except ValidationError:
        logger.debug("image_url.unparseable")
        return ImageUrlValidation(is_valid=False, sanitized="")

    if parsed.scheme not in ALLOWED_SCHEMES:
        logger.debug("image_url.rejected", extra={"reason": "scheme", "scheme": parsed.scheme})
        return ImageUrlValidation(is_valid=False, sanitized="")

    host = parsed.host or ""
    if not _has_image_extension(parsed.path or "") and not _is_allowed_host(host):
        logger.debug("image_url.rejected", extra={"reason": "not_an_image", "host": host})
        return ImageUrlValidation(is_valid=False, sanitized="")

    return ImageUrlValidation(is_valid=True, sanitized=str(parsed))
