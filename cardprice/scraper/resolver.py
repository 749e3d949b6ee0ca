"""
Card Price Checker - Resolution Orchestrator

Drives one tag through the pipeline:

    tag -> search URL -> fetch -> classify -> branch -> extract

A search-results page is followed to its first product link at most
max_search_hops times (default 1). A followed page that is still not a
product page is reported as ExtractionError rather than followed further.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from cardprice.config import settings
from cardprice.errors import (
    AmbiguousTagError,
    ExtractionError,
    InvalidInputError,
    NotFoundError,
    ResolutionError,
)
from cardprice.models import (
    CardData,
    FetchResult,
    NoResultsPage,
    PageClassification,
    ProductPage,
    SearchResultsPage,
    UnknownPage,
)
from cardprice.scraper.classifier import classify, parse_html, title_of
from cardprice.scraper.extractor import ResultExtractor
from cardprice.scraper.fetcher import PageFetcher, make_fetcher
from cardprice.scraper.urls import absolute_url, build_search_url

logger = structlog.get_logger(__name__)


class Resolution(BaseModel):
    """Value form of a resolve() outcome: exactly one of card / error is set."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    card: CardData | None = None
    error: ResolutionError | None = None

    @classmethod
    def ok(cls, card: CardData) -> Resolution:
        return cls(card=card)

    @classmethod
    def failed(cls, error: ResolutionError) -> Resolution:
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.card is not None


class CardResolver:
    """
    Resolves product tags into CardData.

    Usage:
        async with DirectFetcher() as fetcher:
            resolver = CardResolver(fetcher)
            card = await resolver.resolve("sv2a182")
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: ResultExtractor | None = None,
        origin: str | None = None,
        max_search_hops: int | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._origin = origin or settings.MARKETPLACE_ORIGIN
        self._extractor = extractor or ResultExtractor(origin=self._origin)
        self._max_search_hops = (
            settings.MAX_SEARCH_HOPS if max_search_hops is None else max_search_hops
        )

    async def resolve(self, tag: str) -> CardData:
        """
        Resolve a tag into CardData.

        Raises:
            ResolutionError: one classified failure, never a partial result.
        """
        if tag is None or not tag.strip():
            raise InvalidInputError()

        url = build_search_url(tag.strip(), origin=self._origin)
        logger.info("resolve_started", tag=tag, url=url, source="resolver")

        page = await self._fetcher.fetch(url)
        classification = self._classify(page)

        if isinstance(classification, NoResultsPage):
            logger.info("resolve_not_found", tag=tag, url=page.url, source="resolver")
            raise NotFoundError()

        if isinstance(classification, UnknownPage):
            logger.info("resolve_ambiguous_tag", tag=tag, url=page.url, source="resolver")
            raise AmbiguousTagError()

        hops = 0
        while isinstance(classification, SearchResultsPage):
            if hops >= self._max_search_hops:
                logger.warning(
                    "resolve_search_hop_limit_reached",
                    tag=tag,
                    url=page.url,
                    hops=hops,
                    source="resolver",
                )
                raise ExtractionError(
                    "Followed search results did not lead to a product page."
                )
            hops += 1
            link = absolute_url(classification.link, page.url)
            logger.info("resolve_following_search_result", tag=tag, link=link, hop=hops, source="resolver")
            page = await self._fetcher.fetch(link)
            classification = self._classify(page)

        if not isinstance(classification, ProductPage):
            logger.warning(
                "resolve_followed_page_not_product",
                tag=tag,
                url=page.url,
                kind=classification.kind,
                source="resolver",
            )
            raise ExtractionError("Followed search result was not a product page.")

        card = self._extractor.extract(parse_html(page.html), url=page.url)
        logger.info("resolve_success", tag=tag, name=card.name, url=page.url, source="resolver")
        return card

    async def resolve_result(self, tag: str) -> Resolution:
        """resolve() with the outcome returned as a value instead of raised."""
        try:
            return Resolution.ok(await self.resolve(tag))
        except ResolutionError as e:
            logger.info("resolve_failed", tag=tag, kind=e.kind, error=e.message, source="resolver")
            return Resolution.failed(e)

    @staticmethod
    def _classify(page: FetchResult) -> PageClassification:
        soup = parse_html(page.html)
        return classify(soup, title_of(soup))


async def resolve(tag: str, fetcher: PageFetcher | None = None, **kwargs: Any) -> CardData:
    """
    Single entry point: resolve a tag with the given or configured fetcher.

    When no fetcher is passed, one is built from settings.FETCH_STRATEGY and
    closed again before returning.
    """
    if tag is None or not tag.strip():
        raise InvalidInputError()
    if fetcher is not None:
        return await CardResolver(fetcher, **kwargs).resolve(tag)
    async with make_fetcher() as owned:
        return await CardResolver(owned, **kwargs).resolve(tag)
