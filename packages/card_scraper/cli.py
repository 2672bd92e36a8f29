"""CLI for the ``card_scraper`` package.

Command handlers (``cmd_*``) hold the logic and return an exit status; the
Typer commands below only parse options. A local ``.env`` is loaded with
``python-dotenv`` (never overriding the environment) before any command runs,
so ``CARD_SCRAPER_*`` settings can live there.

Live scraping needs a browser and a logged-in session supplied by the host
application, so the CLI works offline: ``months`` shows the fetch schedule and
``normalize`` runs the conversion/merge pipeline over a JSON dump of raw rows.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from typer.models import OptionInfo

from .config import ScraperSettings
from .errors import ScraperError
from .logging_setup import configure_logging, get_logger
from .merge import merge_month_results, prepare_accounts
from .models import RawRow, ScrapeOptions, ScrapeResult, Transaction
from .months import build_transactions_url, effective_start, month_anchors
from .parsing import convert_raw_rows, resolve_currency

_logger = get_logger("card_scraper.cli")


# ---- Command handlers ---------------------------------------------------------


def _raw_row_from_json(item: Mapping[str, Any]) -> RawRow:
    fields = dict(item)
    fields["charged_currency"] = resolve_currency(fields.get("charged_currency"))
    return RawRow(**fields)


def load_month_dump(path: str | Path) -> list[dict[str, list[Transaction]]]:
    """Load ``[{account_number: [raw_row, ...]}, ...]`` (one map per month task).

    Raw rows use :class:`~card_scraper.models.RawRow` field names;
    ``charged_currency`` is a symbol or ISO code.
    """

    with Path(path).open(encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, list):
        raise ValueError("month dump must be a JSON array of per-month account maps")
    months: list[dict[str, list[Transaction]]] = []
    for month in payload:
        months.append(
            {
                str(number): list(convert_raw_rows(_raw_row_from_json(r) for r in rows))
                for number, rows in month.items()
            }
        )
    return months


def cmd_normalize(
    input_path: str,
    *,
    start_date: datetime | None = None,
    combine_installments: bool = False,
    now: datetime | None = None,
) -> int:
    """Convert, merge and prepare a month dump; print the result as JSON."""

    options = ScrapeOptions(start_date=start_date, combine_installments=combine_installments)
    try:
        months = load_month_dump(input_path)
    except FileNotFoundError:
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1
    except (ScraperError, ValueError, TypeError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    start = effective_start(options.start_date, now)
    accounts = prepare_accounts(
        merge_month_results(months), start, options.combine_installments
    )
    result = ScrapeResult.from_account_map(accounts)
    _logger.info("normalized %d month results into %d accounts", len(months), len(accounts))
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0


def cmd_months(
    *,
    start_date: datetime | None = None,
    settings: ScraperSettings | None = None,
    now: datetime | None = None,
    console: Console | None = None,
) -> int:
    """Print the month anchors and fetch URLs that a scrape would request."""

    settings = settings or ScraperSettings.from_env()
    start = effective_start(start_date, now)
    table = Table(title=f"Month tasks from {start.date().isoformat()}")
    table.add_column("#", justify="right")
    table.add_column("Month")
    table.add_column("URL", overflow="fold")
    for i, anchor in enumerate(month_anchors(start, now)):
        table.add_row(
            str(i), str(anchor), build_transactions_url(anchor, base_url=settings.base_url)
        )
    (console or Console()).print(table)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Leumi Card transaction extraction: fetch schedule and offline normalization.",
)

# Module-level option objects (ruff B008: no calls in parameter defaults).
START_DATE_OPTION: OptionInfo = typer.Option(
    None,
    "--start-date",
    formats=["%Y-%m-%d"],
    help="Earliest date to include (clamped to one year back).",
)
INPUT_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--input",
    help="JSON dump of per-month raw rows, in schedule order.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # reported by the handler
)
COMBINE_INSTALLMENTS_OPTION: OptionInfo = typer.Option(
    False,
    "--combine-installments/--no-combine-installments",
    help="Keep monthly installment entries instead of one per plan.",
)


@app.command("months")
def months_cmd(
    start_date: datetime | None = START_DATE_OPTION,
) -> None:
    """Show the scheduled month tasks and their URLs."""

    raise typer.Exit(cmd_months(start_date=start_date))


@app.command("normalize")
def normalize_cmd(
    input_path: Annotated[Path, INPUT_PATH_OPTION],
    start_date: datetime | None = START_DATE_OPTION,
    *,
    combine_installments: bool = COMBINE_INSTALLMENTS_OPTION,
) -> None:
    """Normalize a raw-row dump into the per-account result JSON."""

    raise typer.Exit(
        cmd_normalize(
            str(input_path),
            start_date=start_date,
            combine_installments=combine_installments,
        )
    )


@app.callback()
def _root() -> None:
    """Load ``.env`` and configure logging before any subcommand."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main(argv: Sequence[str] | None = None) -> None:
    app(args=list(argv) if argv is not None else None)


if __name__ == "__main__":  # pragma: no cover
    main()
