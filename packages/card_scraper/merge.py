"""Fold per-month results into one account map and post-process each account.

The fold is a pure ``merge(acc, month) -> new map`` applied in task submission
order (chronological months, open cycle last), never in completion order.
Post-processing per account: installment de-duplication (unless installments
are combined), a stable sort by date and the start-boundary filter.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from functools import reduce
from typing import TypeAlias

from .logging_setup import get_logger
from .models import Transaction, TransactionType

_logger = get_logger("card_scraper.merge")

_InstallmentKey: TypeAlias = tuple[str, int, Decimal]


def merge(
    acc: Mapping[str, Sequence[Transaction]], result: Mapping[str, Sequence[Transaction]]
) -> dict[str, tuple[Transaction, ...]]:
    """Return a new map with ``result``'s transactions appended per account."""

    merged = {number: tuple(txns) for number, txns in acc.items()}
    for number, txns in result.items():
        merged[number] = merged.get(number, ()) + tuple(txns)
    return merged


def merge_month_results(
    month_results: Iterable[Mapping[str, Sequence[Transaction]]],
) -> dict[str, tuple[Transaction, ...]]:
    return reduce(merge, month_results, {})


def _installment_key(txn: Transaction) -> _InstallmentKey | None:
    if txn.type is not TransactionType.INSTALLMENTS or txn.installment is None:
        return None
    return (txn.description, txn.installment.total, txn.charged_amount)


def fix_installments(txns: Sequence[Transaction]) -> list[Transaction]:
    """Keep one instance per installment plan.

    Every monthly statement repeats the plan's line (``2 of 5``, ``3 of 5``...);
    entries sharing description, plan total and charged amount are one plan and
    only the first seen is kept. Only INSTALLMENTS-typed transactions take part;
    a Normal row whose memo happens to hold two numbers passes through untouched.
    """

    seen: set[_InstallmentKey] = set()
    out: list[Transaction] = []
    for txn in txns:
        key = _installment_key(txn)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        out.append(txn)
    return out


def sort_transactions_by_date(txns: Sequence[Transaction]) -> list[Transaction]:
    # sorted() is stable: equal dates keep insertion order
    return sorted(txns, key=lambda t: t.date)


def filter_old_transactions(
    txns: Sequence[Transaction], start: datetime, combine_installments: bool
) -> list[Transaction]:
    """Drop transactions dated before ``start``.

    With ``combine_installments`` an installment transaction is kept regardless
    of its date, since its plan may still have charges inside the window.
    """

    return [
        t
        for t in txns
        if t.date >= start
        or (combine_installments and t.type is TransactionType.INSTALLMENTS)
    ]


def prepare_transactions(
    txns: Sequence[Transaction], start: datetime, combine_installments: bool
) -> list[Transaction]:
    prepared = list(txns)
    if not combine_installments:
        prepared = fix_installments(prepared)
    prepared = sort_transactions_by_date(prepared)
    return filter_old_transactions(prepared, start, combine_installments)


def prepare_accounts(
    accounts: Mapping[str, Sequence[Transaction]],
    start: datetime,
    combine_installments: bool,
) -> dict[str, list[Transaction]]:
    prepared: dict[str, list[Transaction]] = {}
    for number, txns in accounts.items():
        prepared[number] = prepare_transactions(txns, start, combine_installments)
        _logger.info(
            "account %s: %d raw -> %d prepared transactions",
            number,
            len(txns),
            len(prepared[number]),
        )
    return prepared


__all__ = [
    "merge",
    "merge_month_results",
    "fix_installments",
    "sort_transactions_by_date",
    "filter_old_transactions",
    "prepare_transactions",
    "prepare_accounts",
]
