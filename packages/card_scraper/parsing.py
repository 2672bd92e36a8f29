"""Field parsers: raw cell text -> typed values.

Pure functions, no I/O. Vocabularies are closed on purpose: an unseen
transaction-type label or currency symbol raises instead of being guessed, so
portal changes surface as explicit errors.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from datetime import datetime
from decimal import Decimal
from typing import NamedTuple

from .errors import AmountParseError, CurrencyResolutionError, DateParseError, UnknownTransactionType
from .installments import resolve_installment
from .models import (
    HOME_CURRENCY,
    Currency,
    RawRow,
    Transaction,
    TransactionStatus,
    TransactionType,
)

DATE_FORMAT = "%d/%m/%Y"
_DATE_LAYOUT = "DD/MM/YYYY"

# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

_CURRENCY_TOKENS: dict[str, Currency] = {
    Currency.ILS.symbol: Currency.ILS,
    Currency.ILS.value: Currency.ILS,
    Currency.USD.symbol: Currency.USD,
    Currency.USD.value: Currency.USD,
}
_CURRENCY_SYMBOLS: tuple[str, ...] = (Currency.ILS.symbol, Currency.USD.symbol)
# Symbols match anywhere; ISO codes only as whole words ("Details" is not ILS).
_CURRENCY_IN_TEXT_RE = re.compile(
    "|".join(
        [re.escape(s) for s in _CURRENCY_SYMBOLS]
        + [rf"\b{c.value}\b" for c in Currency]
    ),
    re.IGNORECASE,
)
_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?")

TRANSACTION_TYPE_LABELS: dict[str, TransactionType] = {
    "רגילה": TransactionType.NORMAL,
    "חיוב עסקות מיידי": TransactionType.NORMAL,
    'אינטרנט/חו"ל': TransactionType.NORMAL,
    "חיוב חודשי": TransactionType.NORMAL,
    "דחוי חודש": TransactionType.NORMAL,
    "דחוי חודשיים": TransactionType.NORMAL,
    "חודשי + ריבית": TransactionType.NORMAL,
    "תשלומים": TransactionType.INSTALLMENTS,
}


class ParsedAmount(NamedTuple):
    amount: Decimal
    currency: Currency


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def resolve_currency(symbol_or_code: str | None) -> Currency:
    """Map a currency symbol or ISO code (case-insensitive) to :class:`Currency`."""

    if not symbol_or_code or not symbol_or_code.strip():
        raise CurrencyResolutionError(symbol_or_code)
    try:
        return _CURRENCY_TOKENS[symbol_or_code.strip().upper()]
    except KeyError:
        raise CurrencyResolutionError(symbol_or_code) from None


def resolve_currency_in_text(text: str | None) -> Currency:
    """Resolve the first known currency symbol/code embedded in ``text``.

    Used for column headers such as ``"סכום חיוב ב-₪"``.
    """

    m = _CURRENCY_IN_TEXT_RE.search(text or "")
    if m is None:
        raise CurrencyResolutionError(None, context=text)
    return resolve_currency(m.group(0))


def parse_amount(text: str | None) -> ParsedAmount | None:
    """Parse ``"1,234.50"``, ``"12.00 $"`` or ``"99.90 USD"`` into amount and currency.

    Returns ``None`` for empty input. A currency symbol anywhere in the text,
    or a trailing code token, selects the currency; otherwise the home
    currency applies.
    """

    if text is None or not text.strip():
        return None

    currency = HOME_CURRENCY
    s = text
    for symbol in _CURRENCY_SYMBOLS:
        if symbol in s:
            currency = _CURRENCY_TOKENS[symbol]
            s = s.replace(symbol, " ")
    s = re.sub(r"\s+", " ", s.replace(",", "")).strip()

    parts = s.split(" ")
    if len(parts) > 2:
        raise AmountParseError(text, "unexpected tokens")
    if len(parts) == 2:
        currency = resolve_currency(parts[1])

    if not _NUMBER_RE.fullmatch(parts[0]):
        raise AmountParseError(text)
    return ParsedAmount(amount=Decimal(parts[0]), currency=currency)


def classify_transaction_type(label: str | None) -> TransactionType:
    key = (label or "").strip()
    try:
        return TRANSACTION_TYPE_LABELS[key]
    except KeyError:
        raise UnknownTransactionType(label or "") from None


def parse_date(text: str | None) -> datetime:
    """Parse a ``DD/MM/YYYY`` portal date into a naive midnight timestamp."""

    s = (text or "").strip()
    try:
        return datetime.strptime(s, DATE_FORMAT)
    except ValueError:
        raise DateParseError(text, _DATE_LAYOUT) from None


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def _required_amount(text: str) -> ParsedAmount:
    parsed = parse_amount(text)
    if parsed is None:
        raise AmountParseError(text, "amount is empty")
    return parsed


def convert_raw_row(raw: RawRow) -> Transaction:
    """Normalize one :class:`RawRow`.

    The charged column shows an unsigned amount owed; it is stored negated.
    """

    original = _required_amount(raw.original_amount_text)
    charged = _required_amount(raw.charged_amount_text)
    return Transaction(
        type=classify_transaction_type(raw.type_label),
        date=parse_date(raw.date_text),
        processed_date=parse_date(raw.processed_date_text),
        original_amount=original.amount,
        original_currency=original.currency,
        charged_amount=-charged.amount,
        charged_currency=raw.charged_currency,
        description=raw.description.strip(),
        memo=raw.memo,
        installment=resolve_installment(raw.memo),
        status=TransactionStatus.COMPLETED,
    )


def convert_raw_rows(rows: Iterable[RawRow]) -> Iterator[Transaction]:
    for raw in rows:
        yield convert_raw_row(raw)


__all__ = [
    "DATE_FORMAT",
    "TRANSACTION_TYPE_LABELS",
    "ParsedAmount",
    "resolve_currency",
    "resolve_currency_in_text",
    "parse_amount",
    "classify_transaction_type",
    "parse_date",
    "convert_raw_row",
    "convert_raw_rows",
]
