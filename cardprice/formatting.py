"""
Card Price Checker - Result Formatting

Plain-text rendering of resolution outcomes for terminal output.
"""

from __future__ import annotations

from cardprice.errors import ResolutionError
from cardprice.models import CardData


def format_card(card: CardData) -> str:
    """
    Render a card as the price block shown to the user.

    Example:
        Pikachu
        From: 0,50 €
        Price Trend: 1,23 €
        30-Day Avg: 1,10 €
    """
    lines = [
        card.name,
        f"From: {card.price.from_}",
        f"Price Trend: {card.price.trend}",
        f"30-Day Avg: {card.price.avg30}",
    ]
    if card.image_url:
        lines.append(f"Image: {card.image_url}")
    if card.url:
        lines.append(f"URL: {card.url}")
    return "\n".join(lines)


def format_error(error: ResolutionError) -> str:
    return f"Error: {error.message}"
