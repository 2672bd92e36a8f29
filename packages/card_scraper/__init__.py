"""Public interface for the ``card_scraper`` package.

Re-exports only; the pipeline lives in ``parsing`` / ``installments``
(field normalization), ``months`` (scheduling), ``scraper`` (page walking),
``merge`` (fold and post-processing) and ``leumi_card`` (orchestration).
"""

from .config import ScraperSettings
from .errors import (
    AmountParseError,
    CurrencyResolutionError,
    DateParseError,
    FieldParseError,
    NavigationError,
    PaginationExhaustedError,
    ScraperError,
    UnknownTransactionType,
)
from .installments import resolve_installment
from .institution import InstitutionScraper
from .leumi_card import LeumiCardScraper, fetch_transactions
from .merge import merge, merge_month_results, prepare_transactions
from .models import (
    AccountTransactions,
    Currency,
    Installment,
    LoginResult,
    MonthAnchor,
    RawRow,
    ScrapeOptions,
    ScrapeResult,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from .months import build_transactions_url, effective_start, month_anchors
from .parsing import (
    classify_transaction_type,
    convert_raw_row,
    parse_amount,
    parse_date,
    resolve_currency,
)

__all__ = [
    # API
    "fetch_transactions",
    "LeumiCardScraper",
    "InstitutionScraper",
    "ScraperSettings",
    # Pipeline stages
    "parse_amount",
    "resolve_currency",
    "classify_transaction_type",
    "parse_date",
    "convert_raw_row",
    "resolve_installment",
    "effective_start",
    "month_anchors",
    "build_transactions_url",
    "merge",
    "merge_month_results",
    "prepare_transactions",
    # Models
    "Currency",
    "TransactionType",
    "TransactionStatus",
    "LoginResult",
    "MonthAnchor",
    "RawRow",
    "Installment",
    "Transaction",
    "AccountTransactions",
    "ScrapeOptions",
    "ScrapeResult",
    # Errors
    "ScraperError",
    "FieldParseError",
    "NavigationError",
    "PaginationExhaustedError",
    "UnknownTransactionType",
    "CurrencyResolutionError",
    "AmountParseError",
    "DateParseError",
]
