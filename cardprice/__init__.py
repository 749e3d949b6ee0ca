"""Card Price Checker - resolve a card tag into Cardmarket pricing data."""

from __future__ import annotations

from cardprice.errors import ResolutionError
from cardprice.models import CardData, PriceData
from cardprice.scraper.resolver import CardResolver, Resolution, resolve
from cardprice.session import ResolutionSession, SessionSnapshot, SessionState

__all__ = [
    "CardData",
    "CardResolver",
    "PriceData",
    "Resolution",
    "ResolutionError",
    "ResolutionSession",
    "SessionSnapshot",
    "SessionState",
    "resolve",
]
