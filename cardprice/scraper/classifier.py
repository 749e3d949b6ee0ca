"""
Card Price Checker - Page Classifier

Decides what kind of marketplace page a fetched document is.

Priority order:
1. No-results marker present              -> NoResultsPage
2. Listing container with a product link  -> SearchResultsPage(link)
3. Title mentions "search"                -> UnknownPage
4. Anything else                          -> ProductPage

The listing-link check runs before the title heuristic because product
pages can mention "Search" in unrelated text.
"""

from __future__ import annotations

import structlog
from bs4 import BeautifulSoup

from cardprice.models import (
    NoResultsPage,
    PageClassification,
    ProductPage,
    SearchResultsPage,
    UnknownPage,
)
from cardprice.scraper import selectors

logger = structlog.get_logger(__name__)


def parse_html(markup: str | BeautifulSoup) -> BeautifulSoup:
    """Lenient parse; malformed markup yields a best-effort tree, never an error."""
    if isinstance(markup, BeautifulSoup):
        return markup
    return BeautifulSoup(markup or "", "lxml")


def title_of(markup: str | BeautifulSoup) -> str:
    """Document title text, or "" when there is none."""
    soup = parse_html(markup)
    if soup.title is None:
        return ""
    return soup.title.get_text(strip=True)


def has_no_results_marker(markup: str | BeautifulSoup) -> bool:
    return parse_html(markup).select_one(selectors.NO_RESULTS_SELECTOR) is not None


def first_product_link(markup: str | BeautifulSoup) -> str | None:
    """First product link inside a results listing, skipping links back to search."""
    soup = parse_html(markup)
    for container_selector in selectors.RESULT_LISTING_SELECTORS:
        for container in soup.select(container_selector):
            for anchor in container.select("a[href]"):
                href = anchor.get("href", "").strip()
                if selectors.PRODUCT_LINK_PATTERN not in href:
                    continue
                if selectors.SEARCH_LINK_PATTERN in href:
                    continue
                return href
    return None


def classify(markup: str | BeautifulSoup, title: str | None = None) -> PageClassification:
    """
    Classify a fetched marketplace document.

    Args:
        markup: Page HTML (or an already parsed tree).
        title: Document title; read from the markup when omitted.

    Returns:
        One of ProductPage, SearchResultsPage, NoResultsPage, UnknownPage.
    """
    soup = parse_html(markup)
    if title is None:
        title = title_of(soup)

    link = first_product_link(soup)
    if has_no_results_marker(soup):
        result: PageClassification = NoResultsPage()
    elif link is not None:
        result = SearchResultsPage(link=link)
    elif "search" in title.lower():
        result = UnknownPage()
    else:
        result = ProductPage()

    logger.debug("page_classified", kind=result.kind, title=title, source="classifier")
    return result
