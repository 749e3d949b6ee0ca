"""
Card Price Checker - Marketplace Selector Contract

Everything that couples the pipeline to the marketplace's markup lives here.
When the site layout changes, this is the file to update; extraction fails
with ExtractionError instead of returning silently wrong data.

Selectors use soupsieve syntax (BeautifulSoup.select / select_one).
"""

from __future__ import annotations

from typing import Callable

from pydantic import BaseModel, ConfigDict

PLACEHOLDER_IMAGE_TOKENS: tuple[str, ...] = (
    "transparent.gif",
    "spacer.gif",
    "pixel.gif",
    "data:image/gif;base64,R0lGODlhAQABA",
)


def is_real_image(value: str) -> bool:
    """Reject blank values and 1x1 transparent-pixel placeholders."""
    if not value or not value.strip():
        return False
    lowered = value.strip().lower()
    return not any(token.lower() in lowered for token in PLACEHOLDER_IMAGE_TOKENS)


class SelectorRule(BaseModel):
    """One candidate in an ordered fallback chain."""

    model_config = ConfigDict(frozen=True)

    selector: str
    attribute: str | None = None    # None -> element text
    accept: Callable[[str], bool] = is_real_image


# ---------------------------------------------------------------------------
# Page markers
# ---------------------------------------------------------------------------
NO_RESULTS_SELECTOR = ".no-results-text"

# Containers that hold the rows of a search-results listing
RESULT_LISTING_SELECTORS: tuple[str, ...] = (
    "div.table-body",
    "div[id^='productRow']",
    "#ProductsTable",
)

PRODUCT_LINK_PATTERN = "/Products/Singles/"
SEARCH_LINK_PATTERN = "/Products/Search"

# ---------------------------------------------------------------------------
# Product page fields
# ---------------------------------------------------------------------------
NAME_SELECTOR = "h1"

IMAGE_RULES: tuple[SelectorRule, ...] = (
    SelectorRule(selector="img.is-front", attribute="src"),
    SelectorRule(selector=".image.card-image img", attribute="src"),
    SelectorRule(selector="meta[property='og:image']", attribute="content"),
)

PRICE_SELECTORS: dict[str, str] = {
    "from": 'dt:-soup-contains-own("From") + dd',
    "trend": 'dt:-soup-contains-own("Price Trend") + dd span',
    "avg30": 'dt:-soup-contains-own("30-days average price") + dd span',
}
