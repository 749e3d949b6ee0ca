"""
Card Price Checker - Resolution Error Taxonomy

Every failure of a single resolve() call surfaces as exactly one of these.
All are terminal: the pipeline never retries against the marketplace.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Base class for classified resolution failures."""

    kind: str = "resolution_error"
    default_message: str = "Card could not be resolved."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(ResolutionError):
    """The tag was blank or whitespace-only."""
    kind = "invalid_input"
    default_message = "Please enter a tag first."


class NetworkError(ResolutionError):
    """The marketplace could not be reached (DNS, TLS, connection)."""
    kind = "network"
    default_message = "Network error while contacting the marketplace."


class FetchTimeoutError(ResolutionError):
    """The page did not finish loading before the deadline."""
    kind = "timeout"
    default_message = "Page load timed out."


class HttpError(ResolutionError):
    """The marketplace answered with a non-2xx status."""
    kind = "http"

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"Marketplace returned HTTP {status}.")


class EmptyBodyError(ResolutionError):
    """The response carried no markup."""
    kind = "empty_body"
    default_message = "Failed to get HTML from the page."


class AmbiguousTagError(ResolutionError):
    """The tag landed on an unspecific search page with nothing to follow."""
    kind = "ambiguous_tag"
    default_message = "Tag was not specific. Landed on a search results page."


class NotFoundError(ResolutionError):
    """The marketplace explicitly reported no results."""
    kind = "not_found"
    default_message = "No product found for tag."


class ExtractionError(ResolutionError):
    """Selectors matched nothing usable; the page layout likely changed."""
    kind = "extraction"
    default_message = "Price not found on page. CSS selectors might be outdated."
