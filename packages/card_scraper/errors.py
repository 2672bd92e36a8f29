"""Error taxonomy for the transaction extraction pipeline.

Every error is unrecoverable where it is detected: it terminates the month task
that raised it and, through the fail-fast task runner, the whole scrape.
Messages always name the raw value that could not be handled so new portal
variants can be diagnosed from the traceback alone.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base class for every error raised by ``card_scraper``."""


class NavigationError(ScraperError):
    """The page did not land on the requested URL (redirect or error dialog)."""

    def __init__(self, requested_url: str, actual_url: str) -> None:
        super().__init__(
            f"Error while trying to navigate to url {requested_url!r} "
            f"(landed on {actual_url!r})"
        )
        self.requested_url = requested_url
        self.actual_url = actual_url


class PaginationExhaustedError(ScraperError):
    """A section kept reporting a next-page control past the page bound."""

    def __init__(self, account_index: int, section_index: int, max_pages: int) -> None:
        super().__init__(
            f"section {section_index} of card {account_index} still reports a next "
            f"page after {max_pages} pages"
        )
        self.account_index = account_index
        self.section_index = section_index
        self.max_pages = max_pages


class FieldParseError(ScraperError, ValueError):
    """Base for failures converting raw cell text into typed values."""


class UnknownTransactionType(FieldParseError):
    def __init__(self, label: str) -> None:
        super().__init__(f"unknown transaction type {label!r}")
        self.label = label


class CurrencyResolutionError(FieldParseError):
    def __init__(self, symbol: str | None, context: str | None = None) -> None:
        if not symbol:
            msg = "cannot resolve currency value, no currency symbol provided"
        else:
            msg = f"cannot resolve currency value, unknown symbol {symbol!r}"
        if context is not None:
            msg = f"{msg} in {context!r}"
        super().__init__(msg)
        self.symbol = symbol


class AmountParseError(FieldParseError):
    def __init__(self, raw: str | None, reason: str = "failed to detect amount") -> None:
        super().__init__(f"cannot parse amount, {reason} for {raw!r}")
        self.raw = raw


class DateParseError(FieldParseError):
    def __init__(self, raw: str | None, layout: str) -> None:
        super().__init__(f"invalid {layout} date: {raw!r}")
        self.raw = raw


__all__ = [
    "ScraperError",
    "NavigationError",
    "PaginationExhaustedError",
    "FieldParseError",
    "UnknownTransactionType",
    "CurrencyResolutionError",
    "AmountParseError",
    "DateParseError",
]
