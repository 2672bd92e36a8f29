import io
import logging

import pytest
from pydantic import ValidationError

import card_scraper.logging_setup as logging_setup
from card_scraper.config import ScraperSettings
from card_scraper.models import ScrapeOptions


def test_settings_defaults(monkeypatch):
    for env in ("CARD_SCRAPER_BASE_URL", "CARD_SCRAPER_MAX_WORKERS", "CARD_SCRAPER_MAX_PAGES"):
        monkeypatch.delenv(env, raising=False)
    s = ScraperSettings.from_env()
    assert s.base_url == "https://online.leumi-card.co.il"
    assert s.max_workers is None
    assert s.max_pages == 200


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("CARD_SCRAPER_BASE_URL", " https://portal.test ")
    monkeypatch.setenv("CARD_SCRAPER_MAX_WORKERS", "4")
    monkeypatch.setenv("CARD_SCRAPER_MAX_PAGES", "10")
    s = ScraperSettings.from_env()
    assert (s.base_url, s.max_workers, s.max_pages) == ("https://portal.test", 4, 10)


def test_settings_reject_invalid_env(monkeypatch):
    monkeypatch.setenv("CARD_SCRAPER_MAX_PAGES", "0")
    with pytest.raises(ValidationError):
        ScraperSettings.from_env()


def test_scrape_options_validation():
    opts = ScrapeOptions.model_validate({"start_date": "2024-01-05T00:00:00"})
    assert opts.start_date.year == 2024 and opts.combine_installments is False
    with pytest.raises(ValidationError):
        ScrapeOptions.model_validate({"startDate": "2024-01-05T00:00:00"})


def test_configure_logging_once(monkeypatch):
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    pkg = logging.getLogger("card_scraper")
    monkeypatch.setattr(pkg, "handlers", [])
    monkeypatch.setattr(pkg, "propagate", True)
    monkeypatch.setattr(pkg, "level", pkg.level)
    monkeypatch.setenv("CARD_SCRAPER_LOG_LEVEL", "debug")

    stream = io.StringIO()
    logging_setup.configure_logging(stream=stream)
    logging_setup.configure_logging(stream=io.StringIO())
    logging_setup.get_logger("card_scraper.test").debug("hello %s", "world")

    assert len(pkg.handlers) == 1
    assert pkg.level == logging.DEBUG
    assert "card_scraper.test DEBUG hello world" in stream.getvalue()
