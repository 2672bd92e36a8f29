"""Transactions-table scraping for one month anchor.

One month task owns one page: it navigates to the anchor's charges URL,
verifies it landed there, then walks every card container and every
transactions section inside it, following the section's next-page control
until it disappears. Everything inside a task is sequential because the page is
a single mutable cursor; element handles are re-queried by index after every
click since a page reload invalidates them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .errors import NavigationError, PaginationExhaustedError, ScraperError
from .logging_setup import get_logger
from .models import Currency, MonthAnchor, RawRow, Transaction
from .months import BASE_URL, build_transactions_url
from .page import Browser, Element, NavigateFn, Page
from .parsing import convert_raw_rows, resolve_currency_in_text

CARD_CONTAINER_SELECTOR = ".infoList_holder"
SECTION_SELECTOR = ".NotPaddingTable"
ROW_SELECTOR = ".jobs_regular"
CELL_SELECTOR = "td"
CHARGED_CURRENCY_HEADER_SELECTOR = "tbody:first-child > tr:first-child > th:nth-child(7) > a"
NEXT_PAGE_SELECTOR = ".difdufLeft a"
ACCOUNT_INFO_SELECTOR = ".creditCard_name"
ACCOUNT_INFO_ITEM_SELECTOR = "li"

DEFAULT_MAX_PAGES = 200

_logger = get_logger("card_scraper.scraper")


@dataclass(frozen=True, slots=True)
class _RowColumns:
    date: int = 1
    processed_date: int = 2
    description: int = 3
    type_label: int = 4
    original_amount: int = 5
    charged_amount: int = 6
    memo: int = 7


_COLUMNS = _RowColumns()
_MIN_CELLS = _COLUMNS.memo + 1


# ---------------------------------------------------------------------------
# Element lookup (by index, re-queried after each page change)
# ---------------------------------------------------------------------------


def _card_container(page: Page, card_index: int) -> Element:
    containers = page.query_selector_all(CARD_CONTAINER_SELECTOR)
    if card_index >= len(containers):
        raise ScraperError(f"card container {card_index} disappeared from {page.url!r}")
    return containers[card_index]


def _section(page: Page, card_index: int, section_index: int) -> Element:
    sections = _card_container(page, card_index).query_selector_all(SECTION_SELECTOR)
    if section_index >= len(sections):
        raise ScraperError(
            f"section {section_index} of card {card_index} disappeared from {page.url!r}"
        )
    return sections[section_index]


def read_account_number(page: Page, card_index: int) -> str:
    """Account number from the card's info panel, e.g. ``"(1234)"`` -> ``"1234"``."""

    info = _card_container(page, card_index).query_selector(ACCOUNT_INFO_SELECTOR)
    items = info.query_selector_all(ACCOUNT_INFO_ITEM_SELECTOR) if info is not None else []
    if len(items) < 2:
        raise ScraperError(f"account number not found for card {card_index} on {page.url!r}")
    return items[1].inner_text().replace("(", "").replace(")", "").strip()


def read_section_charged_currency(section: Element) -> Currency:
    header = section.query_selector(CHARGED_CURRENCY_HEADER_SELECTOR)
    return resolve_currency_in_text(header.inner_text() if header is not None else None)


def read_section_rows(section: Element, charged_currency: Currency) -> list[RawRow]:
    """Read every currently visible row of ``section``."""

    rows: list[RawRow] = []
    for row in section.query_selector_all(ROW_SELECTOR):
        cells = [c.inner_text() for c in row.query_selector_all(CELL_SELECTOR)]
        if len(cells) < _MIN_CELLS:
            raise ScraperError(f"unexpected row layout, {len(cells)} cells: {cells!r}")
        rows.append(
            RawRow(
                type_label=cells[_COLUMNS.type_label],
                date_text=cells[_COLUMNS.date],
                processed_date_text=cells[_COLUMNS.processed_date],
                description=cells[_COLUMNS.description],
                original_amount_text=cells[_COLUMNS.original_amount],
                charged_amount_text=cells[_COLUMNS.charged_amount],
                memo=cells[_COLUMNS.memo],
                charged_currency=charged_currency,
            )
        )
    return rows


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def iter_section_pages(
    page: Page,
    card_index: int,
    section_index: int,
    *,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> Iterator[list[RawRow]]:
    """Yield the rows of each page of one section, following next-page controls.

    The charged currency is read from the first page's header and reused for
    later pages. Raises :class:`PaginationExhaustedError` when a next-page
    control is still present after ``max_pages`` pages.
    """

    charged_currency: Currency | None = None
    for page_number in range(1, max_pages + 1):
        section = _section(page, card_index, section_index)
        if charged_currency is None:
            charged_currency = read_section_charged_currency(section)
        rows = read_section_rows(section, charged_currency)
        _logger.debug(
            "card %d section %d page %d: %d rows",
            card_index,
            section_index,
            page_number,
            len(rows),
        )
        yield rows

        next_control = section.query_selector(NEXT_PAGE_SELECTOR)
        if next_control is None:
            return
        next_control.click()
        page.wait_for_load_state("domcontentloaded")

    raise PaginationExhaustedError(card_index, section_index, max_pages)


def read_current_transactions(
    page: Page, *, max_pages: int = DEFAULT_MAX_PAGES
) -> dict[str, list[Transaction]]:
    """Collect and normalize every account's transactions from the loaded page."""

    result: dict[str, list[Transaction]] = {}
    card_count = len(page.query_selector_all(CARD_CONTAINER_SELECTOR))
    for card_index in range(card_count):
        account_number = read_account_number(page, card_index)
        raw_rows: list[RawRow] = []
        section_count = len(
            _card_container(page, card_index).query_selector_all(SECTION_SELECTOR)
        )
        for section_index in range(section_count):
            for rows in iter_section_pages(
                page, card_index, section_index, max_pages=max_pages
            ):
                raw_rows.extend(rows)
        result.setdefault(account_number, []).extend(convert_raw_rows(raw_rows))
    return result


def fetch_transactions_for_month(
    browser: Browser,
    navigate_to: NavigateFn,
    anchor: MonthAnchor,
    *,
    base_url: str = BASE_URL,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> dict[str, list[Transaction]]:
    """Run one month task on a fresh page; the page is always closed."""

    url = build_transactions_url(anchor, base_url=base_url)
    page = browser.new_page()
    try:
        navigate_to(url, page)
        if page.url != url:
            raise NavigationError(url, page.url)
        txns = read_current_transactions(page, max_pages=max_pages)
    finally:
        page.close()

    _logger.info(
        "month %s: %d accounts, %d transactions",
        anchor,
        len(txns),
        sum(len(v) for v in txns.values()),
    )
    return txns


__all__ = [
    "DEFAULT_MAX_PAGES",
    "read_account_number",
    "read_section_charged_currency",
    "read_section_rows",
    "iter_section_pages",
    "read_current_transactions",
    "fetch_transactions_for_month",
]
