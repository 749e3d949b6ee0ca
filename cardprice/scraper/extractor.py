"""
Card Price Checker - Product Page Extractor

Pulls name, image and price fields out of a confirmed product page using
ordered selector fallback chains. Missing fields become sentinel values;
only when both "From" and "Price Trend" are missing is the page treated
as unreadable.
"""

from __future__ import annotations

from typing import Mapping, Sequence

import structlog
from bs4 import BeautifulSoup

from cardprice.errors import ExtractionError, NotFoundError
from cardprice.models import NAME_NOT_FOUND, NOT_AVAILABLE, CardData, PriceData
from cardprice.scraper import selectors
from cardprice.scraper.classifier import has_no_results_marker, parse_html
from cardprice.scraper.selectors import SelectorRule
from cardprice.scraper.urls import normalize_image_url

logger = structlog.get_logger(__name__)


class ResultExtractor:
    """
    Selector-driven extractor for marketplace product pages.

    The rule lists default to the module-level contract in
    cardprice.scraper.selectors and can be overridden per instance.

    Usage:
        extractor = ResultExtractor()
        card = extractor.extract(html, url=page_url)
    """

    def __init__(
        self,
        image_rules: Sequence[SelectorRule] | None = None,
        price_selectors: Mapping[str, str] | None = None,
        origin: str | None = None,
    ) -> None:
        self.image_rules = tuple(image_rules if image_rules is not None else selectors.IMAGE_RULES)
        self.price_selectors = dict(price_selectors if price_selectors is not None else selectors.PRICE_SELECTORS)
        self._origin = origin

    def extract(self, markup: str | BeautifulSoup, url: str = "") -> CardData:
        """
        Extract CardData from a product page.

        Raises:
            NotFoundError: no prices and the page carries a no-results marker.
            ExtractionError: no prices and no explanation (selector drift).
        """
        soup = parse_html(markup)
        price = self.extract_price(soup)

        if price.from_ == NOT_AVAILABLE and price.trend == NOT_AVAILABLE:
            if has_no_results_marker(soup):
                logger.info("extractor_no_results", url=url, source="extractor")
                raise NotFoundError()
            logger.warning("extractor_selectors_matched_nothing", url=url, source="extractor")
            raise ExtractionError()

        card = CardData(
            name=self.extract_name(soup),
            image_url=self.extract_image_url(soup),
            price=price,
            url=url,
        )
        logger.info(
            "extractor_success",
            name=card.name,
            price_from=price.from_,
            price_trend=price.trend,
            url=url,
            source="extractor",
        )
        return card

    def extract_name(self, soup: BeautifulSoup) -> str:
        heading = soup.select_one(selectors.NAME_SELECTOR)
        if heading is None:
            return NAME_NOT_FOUND
        name = heading.get_text(" ", strip=True)
        return name or NAME_NOT_FOUND

    def extract_image_url(self, soup: BeautifulSoup) -> str:
        """First acceptable candidate wins; later rules are never evaluated."""
        for rule in self.image_rules:
            value = _select_value(soup, rule)
            if value is not None and rule.accept(value):
                return normalize_image_url(value, self._origin)
        return ""

    def extract_price(self, soup: BeautifulSoup) -> PriceData:
        fields = {
            field: _select_text(soup, selector)
            for field, selector in self.price_selectors.items()
        }
        return PriceData(
            from_=fields.get("from", NOT_AVAILABLE),
            trend=fields.get("trend", NOT_AVAILABLE),
            avg30=fields.get("avg30", NOT_AVAILABLE),
        )


def _select_value(soup: BeautifulSoup, rule: SelectorRule) -> str | None:
    element = soup.select_one(rule.selector)
    if element is None:
        return None
    if rule.attribute is None:
        return element.get_text(" ", strip=True)
    value = element.get(rule.attribute)
    if isinstance(value, list):
        value = " ".join(value)
    return value.strip() if value else None


def _select_text(soup: BeautifulSoup, selector: str) -> str:
    element = soup.select_one(selector)
    if element is None:
        return NOT_AVAILABLE
    text = element.get_text(" ", strip=True)
    return text or NOT_AVAILABLE


_default_extractor = ResultExtractor()


def extract(markup: str | BeautifulSoup, url: str = "") -> CardData:
    """Extract with the default selector contract."""
    return _default_extractor.extract(markup, url=url)
