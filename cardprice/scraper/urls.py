"""
Card Price Checker - URL Construction

Builds the marketplace search URL for a tag and turns the relative links
and image sources found on marketplace pages into absolute URLs.
"""

from __future__ import annotations

from urllib.parse import quote_plus, urljoin

import structlog

from cardprice.config import settings

logger = structlog.get_logger(__name__)


def build_search_url(tag: str, origin: str | None = None) -> str:
    """
    Build the marketplace search URL for a tag.

    The tag is form-encoded (spaces become '+'), so an already clean
    alphanumeric tag passes through unchanged.

    Args:
        tag: User-supplied product tag (e.g., "sv2a182").
        origin: Marketplace origin, defaults to settings.MARKETPLACE_ORIGIN.

    Returns:
        Absolute search URL.
    """
    base = (origin or settings.MARKETPLACE_ORIGIN).rstrip("/")
    url = (
        f"{base}{settings.SEARCH_PATH}"
        f"?category=-1&searchString={quote_plus(tag, encoding='utf-8')}&searchMode=v1"
    )
    logger.debug("search_url_constructed", tag=tag, url=url, source="urls")
    return url


def absolute_url(link: str, base: str) -> str:
    """Resolve a link found on `base` into an absolute URL."""
    return urljoin(base, link.strip())


def normalize_image_url(raw: str | None, origin: str | None = None) -> str:
    """
    Normalize an image source into an absolute URL.

    //host/x.jpg -> https://host/x.jpg
    /img/x.jpg   -> {origin}/img/x.jpg
    anything else passes through unchanged.
    """
    if not raw or not raw.strip():
        return ""
    value = raw.strip()
    if value.startswith("//"):
        return f"https:{value}"
    if value.startswith("/"):
        return f"{(origin or settings.MARKETPLACE_ORIGIN).rstrip('/')}{value}"
    return value
