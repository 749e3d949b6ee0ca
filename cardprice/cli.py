"""
Card Price Checker - Command-Line Entrypoint

Resolves one tag and prints the price block (or a classified error).

Run via:
    python -m cardprice sv2a182
    python -m cardprice sv2a182 --strategy rendered --json
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import structlog

from cardprice.config import FetchStrategy, settings
from cardprice.errors import InvalidInputError, ResolutionError
from cardprice.formatting import format_card, format_error
from cardprice.models import CardData
from cardprice.scraper.fetcher import make_fetcher
from cardprice.scraper.resolver import CardResolver

EXIT_OK = 0
EXIT_RESOLUTION_FAILED = 1
EXIT_INVALID_INPUT = 2


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """
    Set up structured logging on stderr, keeping stdout for results.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        json_output: JSON lines when True, console rendering otherwise.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    # Configure stdlib logging first (for third-party libraries)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cardprice",
        description="Look up Cardmarket prices for a Pokemon card tag.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cardprice sv2a182
  python -m cardprice "sv2a 182" --strategy rendered
  python -m cardprice sv2a182 --json
""",
    )
    parser.add_argument("tag", help="Product tag, e.g. sv2a182 (spaces are removed).")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in FetchStrategy],
        default=settings.FETCH_STRATEGY.value,
        help=f"Page fetch strategy (default: {settings.FETCH_STRATEGY.value}).",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON.")
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        help=f"Log level for stderr diagnostics (default: {settings.LOG_LEVEL}).",
    )
    return parser.parse_args(argv)


async def run(tag: str, strategy: str) -> CardData:
    """Resolve one tag with a freshly opened fetcher."""
    async with make_fetcher(strategy) as fetcher:
        return await CardResolver(fetcher).resolve(tag)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.log_level, settings.LOG_JSON)

    # The tag input never carries spaces
    tag = args.tag.replace(" ", "")
    if not tag:
        print(format_error(InvalidInputError()), file=sys.stderr)
        return EXIT_INVALID_INPUT

    try:
        card = asyncio.run(run(tag, args.strategy))
    except ResolutionError as e:
        print(format_error(e), file=sys.stderr)
        return EXIT_RESOLUTION_FAILED

    if args.json:
        print(card.model_dump_json(by_alias=True, indent=2))
    else:
        print(format_card(card))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
