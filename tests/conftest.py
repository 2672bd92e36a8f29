"""Pytest configuration.

``packages/`` and the repo root are put on ``sys.path`` by
``[tool.pytest.ini_options] pythonpath`` so ``card_scraper`` and
``tests.helpers`` import without installing. Settings come from the
environment; clear them per test so a developer's shell cannot leak in.
"""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for env in (
        "CARD_SCRAPER_BASE_URL",
        "CARD_SCRAPER_MAX_WORKERS",
        "CARD_SCRAPER_MAX_PAGES",
        "CARD_SCRAPER_LOG_LEVEL",
    ):
        monkeypatch.delenv(env, raising=False)
