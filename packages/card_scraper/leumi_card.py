"""Leumi Card portal: month fan-out, merge and the scraper facade.

``fetch_transactions`` schedules one task per month anchor, runs them
concurrently (each on its own page), folds the results in schedule order and
post-processes every account. Any task failure fails the whole call.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import TypeAlias

from .config import ScraperSettings
from .logging_setup import get_logger
from .merge import merge_month_results, prepare_accounts
from .models import (
    LoginField,
    LoginOptions,
    LoginResult,
    MonthAnchor,
    ScrapeOptions,
    ScrapeResult,
    Transaction,
)
from .months import effective_start, month_anchors
from .page import Browser, NavigateFn, Page
from .pmap import p_map
from .scraper import fetch_transactions_for_month

LOGIN_PATH = "Anonymous/Login/CardHoldersLogin.aspx"
HOME_PATH = "Registred/HomePage.aspx"
PASSWORD_EXPIRED_PATH = "Anonymous/Login/PasswordExpired.aspx"
LOGIN_INPUT_GROUP = "PlaceHolderMain_CardHoldersLogin1"
WRONG_DETAILS_SELECTOR = "#popupWrongDetails"

LoginFlow: TypeAlias = Callable[[LoginOptions], LoginResult]

_logger = get_logger("card_scraper.leumi_card")


def fetch_transactions(
    browser: Browser,
    options: ScrapeOptions,
    navigate_to: NavigateFn,
    *,
    settings: ScraperSettings | None = None,
    now: datetime | None = None,
) -> dict[str, list[Transaction]]:
    """Scrape every month in the window and return prepared transactions per account."""

    settings = settings or ScraperSettings()
    now = now or datetime.now()
    start = effective_start(options.start_date, now)
    anchors = month_anchors(start, now)
    _logger.info(
        "fetching %d month tasks from %s (combine_installments=%s)",
        len(anchors),
        start.date().isoformat(),
        options.combine_installments,
    )

    def _fetch(anchor: MonthAnchor) -> dict[str, list[Transaction]]:
        return fetch_transactions_for_month(
            browser,
            navigate_to,
            anchor,
            base_url=settings.base_url,
            max_pages=settings.max_pages,
        )

    month_results = p_map(anchors, _fetch, concurrency=settings.max_workers)
    merged = merge_month_results(month_results)
    return prepare_accounts(merged, start, options.combine_installments)


def _portal_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path}"


class LeumiCardScraper:
    """:class:`~card_scraper.institution.InstitutionScraper` for the Leumi Card portal.

    Parameters
    ----------
    browser:
        Source of fresh pages; one is opened per month task.
    navigate_to:
        Host-supplied navigation callable.
    login_flow:
        Generic login-form runner; only needed for :meth:`login`.
    page:
        The page the login flow runs on (used for the post-submit wait).
    """

    def __init__(
        self,
        browser: Browser,
        navigate_to: NavigateFn,
        *,
        login_flow: LoginFlow | None = None,
        page: Page | None = None,
        settings: ScraperSettings | None = None,
    ) -> None:
        self.browser = browser
        self.navigate_to = navigate_to
        self.login_flow = login_flow
        self.page = page
        self.settings = settings or ScraperSettings.from_env()

    def _wait_for_redirect_or_dialog(self) -> None:
        if self.page is None:
            raise RuntimeError("LeumiCardScraper.page is required to wait after login submit")
        self.page.wait_for_redirect_or_selector(WRONG_DETAILS_SELECTOR)

    def login_options(self, credentials: Mapping[str, str]) -> LoginOptions:
        base = self.settings.base_url
        return LoginOptions(
            login_url=_portal_url(base, LOGIN_PATH),
            fields=(
                LoginField(f"#{LOGIN_INPUT_GROUP}_txtUserName", credentials["username"]),
                LoginField(f"#{LOGIN_INPUT_GROUP}_txtPassword", credentials["password"]),
            ),
            submit_button_selector=f"#{LOGIN_INPUT_GROUP}_btnLogin",
            possible_results={
                LoginResult.SUCCESS: (_portal_url(base, HOME_PATH),),
                LoginResult.CHANGE_PASSWORD: (_portal_url(base, PASSWORD_EXPIRED_PATH),),
                LoginResult.INVALID_PASSWORD: (_portal_url(base, LOGIN_PATH),),
            },
            post_action=self._wait_for_redirect_or_dialog,
        )

    def login(self, credentials: Mapping[str, str]) -> LoginResult:
        if self.login_flow is None:
            raise RuntimeError("LeumiCardScraper was created without a login_flow")
        result = self.login_flow(self.login_options(credentials))
        _logger.info("login result: %s", result)
        return result

    def fetch_transactions(self, options: ScrapeOptions | None = None) -> ScrapeResult:
        accounts = fetch_transactions(
            self.browser,
            options or ScrapeOptions(),
            self.navigate_to,
            settings=self.settings,
        )
        return ScrapeResult.from_account_map(accounts)


__all__ = ["fetch_transactions", "LeumiCardScraper", "LoginFlow"]
