"""
Card Price Checker - Value Models

Immutable pydantic models passed between pipeline stages:
FetchResult (fetcher -> classifier), PageClassification variants
(classifier -> resolver) and CardData (extractor -> caller).
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

NOT_AVAILABLE = "N/A"
NAME_NOT_FOUND = "Name not found"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

class FetchResult(_Frozen):
    """Raw page markup plus the URL it was actually served from."""
    html: str
    url: str = Field(..., description="Final URL after redirects")


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class ProductPage(_Frozen):
    kind: Literal["product"] = "product"


class SearchResultsPage(_Frozen):
    """A listing page with at least one followable product link."""
    kind: Literal["search_results"] = "search_results"
    link: str


class NoResultsPage(_Frozen):
    kind: Literal["no_results"] = "no_results"


class UnknownPage(_Frozen):
    """A search page with no derivable next step."""
    kind: Literal["unknown"] = "unknown"


PageClassification = Union[ProductPage, SearchResultsPage, NoResultsPage, UnknownPage]


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

class PriceData(_Frozen):
    """Display strings as shown on the product page, or "N/A"."""
    from_: str = Field(default=NOT_AVAILABLE, alias="from")
    trend: str = NOT_AVAILABLE
    avg30: str = NOT_AVAILABLE


class CardData(_Frozen):
    """
    Structured pricing data for one card printing.

    Produced once per successful resolution and owned by the caller.
    """
    name: str = NAME_NOT_FOUND
    image_url: str = Field(default="", description="Absolute URL or empty")
    price: PriceData = Field(default_factory=PriceData)
    url: str = Field(default="", description="Product page the data was read from")
