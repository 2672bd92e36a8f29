"""Data models for the transaction extraction pipeline.

Records are frozen dataclasses: a :class:`RawRow` is the text read from one
table row, a :class:`Transaction` is its normalized form. Caller-facing input
is validated with pydantic (:class:`ScrapeOptions`). The caller-facing output
(:class:`ScrapeResult`) serializes to the camelCase shape consumed by the
aggregation tool via ``to_dict()``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Fixed vocabularies
# ---------------------------------------------------------------------------


class Currency(StrEnum):
    ILS = "ILS"
    USD = "USD"

    @property
    def symbol(self) -> str:
        return _CURRENCY_SYMBOLS[self]


_CURRENCY_SYMBOLS: dict[Currency, str] = {Currency.ILS: "₪", Currency.USD: "$"}

HOME_CURRENCY = Currency.ILS


class TransactionType(StrEnum):
    NORMAL = "normal"
    INSTALLMENTS = "installments"


class TransactionStatus(StrEnum):
    COMPLETED = "completed"


class LoginResult(StrEnum):
    SUCCESS = "success"
    CHANGE_PASSWORD = "change_password"
    INVALID_PASSWORD = "invalid_password"
    UNKNOWN_ERROR = "unknown_error"


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MonthAnchor:
    """Selects one billing month, or the current open cycle when both fields are ``None``."""

    year: int | None = None
    month: int | None = None

    def __post_init__(self) -> None:
        if (self.year is None) != (self.month is None):
            raise ValueError("MonthAnchor requires both year and month, or neither")
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValueError(f"MonthAnchor.month must be within 1..12, got {self.month}")

    @classmethod
    def current(cls) -> MonthAnchor:
        return cls()

    @property
    def is_current(self) -> bool:
        return self.year is None

    @property
    def month_charge(self) -> str | None:
        """Six-digit ``YYYYMM`` charge filter, ``None`` for the open cycle."""

        if self.is_current:
            return None
        return f"{self.year:04d}{self.month:02d}"

    def __str__(self) -> str:
        return "current" if self.is_current else f"{self.year:04d}-{self.month:02d}"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawRow:
    """Cell text of one transactions-table row, before normalization.

    ``charged_currency`` is resolved once per section from the column header
    and shared by every row of that section.
    """

    type_label: str
    date_text: str
    processed_date_text: str
    description: str
    original_amount_text: str
    charged_amount_text: str
    memo: str
    charged_currency: Currency


@dataclass(frozen=True, slots=True)
class Installment:
    number: int
    total: int


@dataclass(frozen=True, slots=True)
class Transaction:
    """A normalized transaction.

    ``charged_amount`` is negative for debits and denominated in
    ``charged_currency``; ``original_amount``/``original_currency`` describe the
    purchase in the currency it was made in.
    """

    type: TransactionType
    date: datetime
    processed_date: datetime
    original_amount: Decimal
    original_currency: Currency
    charged_amount: Decimal
    charged_currency: Currency
    description: str
    memo: str
    installment: Installment | None = None
    status: TransactionStatus = TransactionStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": str(self.type),
            "date": self.date.isoformat(),
            "processedDate": self.processed_date.isoformat(),
            "originalAmount": float(self.original_amount),
            "originalCurrency": str(self.original_currency),
            "chargedAmount": float(self.charged_amount),
            "chargedCurrency": str(self.charged_currency),
            "description": self.description,
            "memo": self.memo,
            "installments": (
                None
                if self.installment is None
                else {"number": self.installment.number, "total": self.installment.total}
            ),
            "status": str(self.status),
        }


AccountMap: TypeAlias = Mapping[str, Sequence[Transaction]]
"""Account number -> transactions, as produced by one month task or the merge."""


@dataclass(frozen=True, slots=True)
class AccountTransactions:
    account_number: str
    txns: tuple[Transaction, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "accountNumber": self.account_number,
            "txns": [t.to_dict() for t in self.txns],
        }


@dataclass(frozen=True, slots=True)
class ScrapeResult:
    accounts: tuple[AccountTransactions, ...]
    success: bool = True

    @classmethod
    def from_account_map(cls, accounts: AccountMap) -> ScrapeResult:
        return cls(
            accounts=tuple(
                AccountTransactions(account_number=number, txns=tuple(txns))
                for number, txns in accounts.items()
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "accounts": [a.to_dict() for a in self.accounts]}


# ---------------------------------------------------------------------------
# Caller-facing input
# ---------------------------------------------------------------------------


class ScrapeOptions(BaseModel):
    """Options accepted by ``fetch_transactions``.

    ``start_date`` is clamped to one year back by the scheduler; ``None`` means
    "as far back as the portal allows".
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    start_date: datetime | None = None
    combine_installments: bool = False

    @field_validator("start_date")
    @classmethod
    def _drop_tzinfo(cls, v: datetime | None) -> datetime | None:
        # Portal dates are naive local calendar dates; compare like with like.
        if v is None or v.tzinfo is None:
            return v
        return v.replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Login description
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LoginField:
    selector: str
    value: str


@dataclass(frozen=True, slots=True)
class LoginOptions:
    """Everything a generic login-flow collaborator needs to sign in."""

    login_url: str
    fields: tuple[LoginField, ...]
    submit_button_selector: str
    possible_results: Mapping[LoginResult, tuple[str, ...]]
    post_action: Callable[[], None] | None = field(default=None, compare=False)


__all__ = [
    "Currency",
    "HOME_CURRENCY",
    "TransactionType",
    "TransactionStatus",
    "LoginResult",
    "MonthAnchor",
    "RawRow",
    "Installment",
    "Transaction",
    "AccountMap",
    "AccountTransactions",
    "ScrapeResult",
    "ScrapeOptions",
    "LoginField",
    "LoginOptions",
]
