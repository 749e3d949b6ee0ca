"""
Card Price Checker - Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- Marketplace HTML fixtures (tests/fixtures/*.html)
- FakeFetcher: in-memory PageFetcher keyed by URL
- Mock HTTP client (respx)
- Async test support via pytest-asyncio
"""

from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator, Callable, Iterator

import httpx
import pytest
import respx
import structlog

from cardprice.errors import ResolutionError
from cardprice.models import FetchResult

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ORIGIN = "https://www.cardmarket.com"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(autouse=True)
def silence_structlog() -> Iterator[None]:
    """Route structlog output nowhere so stdout assertions only see results."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# Fixture Loaders
# ---------------------------------------------------------------------------


def read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def load_fixture() -> Callable[[str], str]:
    """Load an HTML fixture by file name."""
    return read_fixture


@pytest.fixture(scope="session")
def product_html() -> str:
    return read_fixture("product_page.html")


@pytest.fixture(scope="session")
def search_results_html() -> str:
    return read_fixture("search_results.html")


@pytest.fixture(scope="session")
def no_results_html() -> str:
    return read_fixture("no_results.html")


@pytest.fixture(scope="session")
def ambiguous_html() -> str:
    return read_fixture("ambiguous_search.html")


# ---------------------------------------------------------------------------
# Fake fetcher
# ---------------------------------------------------------------------------


class FakeFetcher:
    """
    PageFetcher double serving canned pages.

    Each URL maps to either an HTML string, a FetchResult (to simulate a
    redirect), or a ResolutionError to raise. Unknown URLs raise KeyError
    so tests notice unexpected requests.
    """

    def __init__(self, pages: dict[str, str | FetchResult | ResolutionError] | None = None) -> None:
        self.pages: dict[str, str | FetchResult | ResolutionError] = dict(pages or {})
        self.calls: list[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        page = self.pages[url]
        if isinstance(page, ResolutionError):
            raise page
        if isinstance(page, FetchResult):
            return page
        return FetchResult(html=page, url=url)

    async def __aenter__(self) -> FakeFetcher:
        return self

    async def __aexit__(self, *args: object) -> None:
        return None


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


# ---------------------------------------------------------------------------
# Mock Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def mock_async_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Async HTTP client with respx interceptor.

    All HTTP requests are intercepted and must be explicitly mocked.
    Prevents accidental calls to the live marketplace in tests.
    """
    with respx.mock:
        async with httpx.AsyncClient() as client:
            yield client
