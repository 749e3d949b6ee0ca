"""
Card Price Checker - Configuration & Constants

Every header value, timeout and marketplace constant lives here.
No hardcoded values in the pipeline modules.

Usage:
    from cardprice.config import settings
"""

from __future__ import annotations

from enum import Enum

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class FetchStrategy(str, Enum):
    """Which PageFetcher implementation resolves a tag."""
    DIRECT = "direct"       # plain HTTP GET (httpx)
    RENDERED = "rendered"   # JavaScript-rendered page (Playwright)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for the card price checker.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # -----------------------------------------------------------------------
    # Marketplace
    # -----------------------------------------------------------------------
    MARKETPLACE_ORIGIN: str = "https://www.cardmarket.com"
    SEARCH_PATH: str = "/en/Pokemon/Products/Search"

    # -----------------------------------------------------------------------
    # Request identity
    # The target site blocks default client identifiers, these are load-bearing.
    # -----------------------------------------------------------------------
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
    )
    REFERER: str = "https://www.google.com"
    ACCEPT_LANGUAGE: str = "en-US,en;q=0.9"

    # -----------------------------------------------------------------------
    # Fetching
    # -----------------------------------------------------------------------
    FETCH_STRATEGY: FetchStrategy = FetchStrategy.DIRECT
    FETCH_TIMEOUT_SECONDS: float = 20.0
    RENDER_HEADLESS: bool = True

    # Search page -> product page follow-through depth
    MAX_SEARCH_HOPS: int = 1

    # -----------------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    def request_headers(self) -> dict[str, str]:
        """Headers sent with every direct marketplace request."""
        return {
            "User-Agent": self.USER_AGENT,
            "Referer": self.REFERER,
            "Accept-Language": self.ACCEPT_LANGUAGE,
        }


# Singleton instance
settings = Settings()
