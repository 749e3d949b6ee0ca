"""
Card Price Checker - Page Fetchers

Two interchangeable strategies behind one contract:

    async fetch(url) -> FetchResult
    raises NetworkError | FetchTimeoutError | HttpError | EmptyBodyError

1. DirectFetcher   - plain HTTP GET via httpx with spoofed browser headers
2. RenderedFetcher - Playwright Chromium page, raced against a deadline

Clients and browsers are injected or owned via `async with`; neither
keeps per-request state, so one instance can serve many fetches.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Protocol

import httpx
import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from cardprice.config import FetchStrategy, settings
from cardprice.errors import (
    EmptyBodyError,
    FetchTimeoutError,
    HttpError,
    NetworkError,
    ResolutionError,
)
from cardprice.models import FetchResult

logger = structlog.get_logger(__name__)

# Serialized the same way a WebView hands back evaluated JavaScript: a JSON
# string literal with <, quotes and newlines escaped.
SERIALIZE_DOCUMENT_SCRIPT = "() => JSON.stringify(document.documentElement.outerHTML)"


class PageFetcher(Protocol):
    """Anything that can turn a URL into page markup."""

    async def fetch(self, url: str) -> FetchResult:
        ...


# ---------------------------------------------------------------------------
# Direct HTTP
# ---------------------------------------------------------------------------


class DirectFetcher:
    """
    Plain HTTP GET against the marketplace.

    Usage:
        async with DirectFetcher() as fetcher:
            page = await fetcher.fetch(url)

    Or inject a shared httpx.AsyncClient:
        fetcher = DirectFetcher(client=shared_client)
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._owns_client = False
        self._headers = headers or settings.request_headers()
        self._timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> DirectFetcher:
        if self._client is None:
            self._client = self._new_client()
            self._owns_client = True
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    async def fetch(self, url: str) -> FetchResult:
        if self._client is not None:
            return await self._get(self._client, url)
        async with self._new_client() as client:
            return await self._get(client, url)

    async def _get(self, client: httpx.AsyncClient, url: str) -> FetchResult:
        logger.info("direct_fetch_started", url=url, source="direct_fetcher")
        try:
            response = await client.get(
                url,
                headers=self._headers,
                timeout=self._timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException as e:
            logger.warning("direct_fetch_timeout", url=url, error=str(e), source="direct_fetcher")
            raise FetchTimeoutError(f"Page load timed out ({self._timeout:g}s).") from e
        except httpx.TransportError as e:
            logger.warning("direct_fetch_network_error", url=url, error=str(e), source="direct_fetcher")
            raise NetworkError(f"Network error: {e}") from e
        except httpx.RequestError as e:
            # Redirect loops and broken content encodings
            logger.warning("direct_fetch_request_error", url=url, error=str(e), source="direct_fetcher")
            raise NetworkError(f"Network error: {e}") from e

        if not response.is_success:
            logger.warning(
                "direct_fetch_http_error",
                url=url,
                status_code=response.status_code,
                source="direct_fetcher",
            )
            raise HttpError(response.status_code)

        body = response.text
        if not body or not body.strip():
            logger.warning("direct_fetch_empty_body", url=url, source="direct_fetcher")
            raise EmptyBodyError()

        final_url = str(response.url)
        logger.info(
            "direct_fetch_success",
            url=url,
            final_url=final_url,
            bytes=len(body),
            source="direct_fetcher",
        )
        return FetchResult(html=body, url=final_url)


# ---------------------------------------------------------------------------
# Rendered (Playwright)
# ---------------------------------------------------------------------------


class LoadRace:
    """
    Deadline race between a page-load signal and a timer.

    The first of complete() / fail() / expire() settles the race; every
    later signal is ignored and reported as such by returning False.
    """

    def __init__(self, timeout: float) -> None:
        self._timeout = timeout
        self._loop = asyncio.get_running_loop()
        self._future: asyncio.Future[None] = self._loop.create_future()
        self._timer: asyncio.TimerHandle | None = None

    @property
    def settled(self) -> bool:
        return self._future.done()

    def start(self) -> None:
        """Arm the deadline timer."""
        if self._timer is None and not self.settled:
            self._timer = self._loop.call_later(self._timeout, self.expire)

    def complete(self) -> bool:
        return self._settle(None, signal="load")

    def fail(self, error: ResolutionError) -> bool:
        return self._settle(error, signal="error")

    def expire(self) -> bool:
        return self._settle(
            FetchTimeoutError(f"Page load timed out ({self._timeout:g}s)."),
            signal="timeout",
        )

    def cancel(self) -> None:
        """Disarm the timer and abandon the race without a winner."""
        if self._timer is not None:
            self._timer.cancel()
        if not self._future.done():
            self._future.cancel()

    async def wait(self) -> None:
        """Wait for the winner; raises the winning error, if any."""
        try:
            await self._future
        finally:
            if self._timer is not None:
                self._timer.cancel()

    def _settle(self, error: ResolutionError | None, signal: str) -> bool:
        if self._future.done():
            logger.debug("render_race_late_signal_ignored", signal=signal, source="rendered_fetcher")
            return False
        if self._timer is not None:
            self._timer.cancel()
        if error is None:
            self._future.set_result(None)
        else:
            self._future.set_exception(error)
        return True


def decode_serialized_markup(raw: str | None) -> str:
    """
    Turn the JSON-string serialization of a document back into markup.

    Raises:
        EmptyBodyError: nothing was serialized.
    """
    if raw is None:
        raise EmptyBodyError()
    text = raw.strip()
    if not text or text == "null":
        raise EmptyBodyError()

    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        try:
            text = json.loads(text)
        except json.JSONDecodeError:
            text = (
                text[1:-1]
                .replace("\\u003C", "<")
                .replace("\\u003c", "<")
                .replace('\\"', '"')
                .replace("\\n", "\n")
            )

    if not text.strip():
        raise EmptyBodyError()
    return text


class RenderedFetcher:
    """
    Loads the URL in a JavaScript-capable Chromium page and serializes the
    rendered document once the load event fires or the deadline passes.

    Usage:
        async with RenderedFetcher() as fetcher:
            page = await fetcher.fetch(url)

    Or inject an already launched playwright Browser:
        fetcher = RenderedFetcher(browser=browser)
    """

    def __init__(
        self,
        browser: Any | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        headless: bool | None = None,
    ) -> None:
        self._browser = browser
        self._playwright: Any | None = None
        self._owns_browser = False
        self._user_agent = user_agent or settings.USER_AGENT
        self._timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self._headless = settings.RENDER_HEADLESS if headless is None else headless

    async def __aenter__(self) -> RenderedFetcher:
        if self._browser is None:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self._headless)
            self._owns_browser = True
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._owns_browser and self._browser is not None:
            await self._browser.close()
            self._browser = None
            self._owns_browser = False
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def fetch(self, url: str) -> FetchResult:
        assert self._browser is not None, "Browser not initialized. Use 'async with'."

        logger.info("rendered_fetch_started", url=url, timeout=self._timeout, source="rendered_fetcher")
        try:
            context = await self._browser.new_context(
                user_agent=self._user_agent,
                java_script_enabled=True,
            )
        except PlaywrightError as e:
            logger.warning("rendered_context_failed", url=url, error=str(e), source="rendered_fetcher")
            raise NetworkError(f"WebView Error: {e}") from e
        race = LoadRace(self._timeout)
        navigation: asyncio.Task[Any] | None = None
        document_status: dict[str, int] = {}

        try:
            try:
                page = await context.new_page()
            except PlaywrightError as e:
                logger.warning("rendered_page_failed", url=url, error=str(e), source="rendered_fetcher")
                raise NetworkError(f"WebView Error: {e}") from e

            def on_request_failed(request: Any) -> None:
                if request.is_navigation_request() and request.frame == page.main_frame:
                    race.fail(NetworkError(f"WebView Error: {request.failure}"))

            def on_response(response: Any) -> None:
                if response.request.is_navigation_request() and response.frame == page.main_frame:
                    document_status["status"] = response.status

            page.on("load", lambda _page: race.complete())
            page.on("requestfailed", on_request_failed)
            page.on("response", on_response)

            race.start()
            navigation = asyncio.create_task(page.goto(url, wait_until="load", timeout=0))
            navigation.add_done_callback(lambda task: _navigation_done(race, task))

            try:
                await race.wait()
            except FetchTimeoutError:
                logger.warning("rendered_fetch_timeout", url=url, timeout=self._timeout, source="rendered_fetcher")
                raise
            except NetworkError as e:
                logger.warning("rendered_fetch_network_error", url=url, error=e.message, source="rendered_fetcher")
                raise

            status = document_status.get("status")
            if status is not None and status >= 400:
                logger.warning("rendered_fetch_http_error", url=url, status_code=status, source="rendered_fetcher")
                raise HttpError(status)

            try:
                raw = await asyncio.wait_for(page.evaluate(SERIALIZE_DOCUMENT_SCRIPT), self._timeout)
            except asyncio.TimeoutError as e:
                logger.warning("rendered_fetch_serialize_timeout", url=url, timeout=self._timeout, source="rendered_fetcher")
                raise FetchTimeoutError(f"Page load timed out ({self._timeout:g}s).") from e
            except PlaywrightError as e:
                logger.warning("rendered_fetch_serialize_failed", url=url, error=str(e), source="rendered_fetcher")
                raise EmptyBodyError() from e

            html = decode_serialized_markup(raw)
            final_url = page.url or url
            logger.info(
                "rendered_fetch_success",
                url=url,
                final_url=final_url,
                bytes=len(html),
                source="rendered_fetcher",
            )
            return FetchResult(html=html, url=final_url)

        finally:
            race.cancel()
            if navigation is not None and not navigation.done():
                navigation.cancel()
            try:
                await context.close()
            except PlaywrightError as e:
                logger.warning("rendered_context_close_failed", url=url, error=str(e), source="rendered_fetcher")


def _navigation_done(race: LoadRace, task: asyncio.Task[Any]) -> None:
    """A navigation that dies before the race settles is a network failure."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        race.fail(NetworkError(f"WebView Error: {error}"))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def make_fetcher(strategy: FetchStrategy | str | None = None) -> DirectFetcher | RenderedFetcher:
    """Build the fetcher for a strategy (default: settings.FETCH_STRATEGY)."""
    chosen = FetchStrategy(strategy or settings.FETCH_STRATEGY)
    if chosen is FetchStrategy.RENDERED:
        return RenderedFetcher()
    return DirectFetcher()
