"""Month scheduling and fetch-URL construction.

The portal only serves one year of history, so the requested start is clamped
to ``now - 1 year``. One anchor is produced per calendar month from the
effective start up to (not including) the current month, followed by a single
open-cycle anchor.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from urllib.parse import urlencode

from .models import MonthAnchor

BASE_URL = "https://online.leumi-card.co.il"
TRANSACTIONS_PATH = "Registred/Transactions/ChargesDeals.aspx"

ACTION_TYPE_CURRENT = 1
ACTION_TYPE_MONTH = 2
PAGE_INDEX = -2

MAX_HISTORY_YEARS = 1


def _years_back(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        # Feb 29 -> Feb 28
        return moment.replace(year=moment.year - years, day=28)


def effective_start(start_date: datetime | None, now: datetime | None = None) -> datetime:
    """Return the later of ``start_date`` and one year before ``now``."""

    now = now or datetime.now()
    floor = _years_back(now, MAX_HISTORY_YEARS)
    if start_date is None:
        return floor
    return max(start_date, floor)


def _iter_months(start: datetime, end: datetime) -> Iterator[MonthAnchor]:
    year, month = start.year, start.month
    while (year, month) < (end.year, end.month):
        yield MonthAnchor(year=year, month=month)
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def month_anchors(start: datetime, now: datetime | None = None) -> list[MonthAnchor]:
    """Chronological month anchors from ``start`` plus the trailing open-cycle anchor.

    ``start`` is expected to be an effective start (see :func:`effective_start`).
    """

    now = now or datetime.now()
    anchors = list(_iter_months(start, now))
    anchors.append(MonthAnchor.current())
    return anchors


def build_transactions_url(anchor: MonthAnchor, *, base_url: str = BASE_URL) -> str:
    """Deterministic charges-table URL for ``anchor``.

    Query order is fixed (``ActionType``, ``MonthCharge``, ``Index``) so the
    post-navigation URL comparison is exact; ``MonthCharge`` is omitted for the
    open cycle.
    """

    params: list[tuple[str, str | int]] = []
    if anchor.is_current:
        params.append(("ActionType", ACTION_TYPE_CURRENT))
    else:
        params.append(("ActionType", ACTION_TYPE_MONTH))
        params.append(("MonthCharge", anchor.month_charge or ""))
    params.append(("Index", PAGE_INDEX))
    return f"{base_url.rstrip('/')}/{TRANSACTIONS_PATH}?{urlencode(params)}"


__all__ = [
    "BASE_URL",
    "TRANSACTIONS_PATH",
    "effective_start",
    "month_anchors",
    "build_transactions_url",
]
