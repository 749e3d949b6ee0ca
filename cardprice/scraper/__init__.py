"""Card Price Checker - Marketplace Scraper Layer"""

from __future__ import annotations

from cardprice.scraper.classifier import classify, title_of
from cardprice.scraper.extractor import ResultExtractor, extract
from cardprice.scraper.fetcher import DirectFetcher, PageFetcher, RenderedFetcher, make_fetcher
from cardprice.scraper.resolver import CardResolver, Resolution, resolve
from cardprice.scraper.urls import build_search_url

__all__ = [
    "CardResolver",
    "DirectFetcher",
    "PageFetcher",
    "RenderedFetcher",
    "Resolution",
    "ResultExtractor",
    "build_search_url",
    "classify",
    "extract",
    "make_fetcher",
    "resolve",
    "title_of",
]
