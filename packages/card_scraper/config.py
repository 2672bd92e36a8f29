"""Runtime settings, resolved from the environment.

Variables (all optional):

- ``CARD_SCRAPER_BASE_URL``: portal origin (defaults to the production portal).
- ``CARD_SCRAPER_MAX_WORKERS``: cap on concurrently running month tasks;
  unset means one worker per task.
- ``CARD_SCRAPER_MAX_PAGES``: pagination bound per section.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

from .months import BASE_URL
from .scraper import DEFAULT_MAX_PAGES


class ScraperSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    base_url: str = BASE_URL
    max_workers: int | None = Field(default=None, ge=1)
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, ge=1)

    @classmethod
    def from_env(cls) -> ScraperSettings:
        values: dict[str, str] = {}
        for key, env in (
            ("base_url", "CARD_SCRAPER_BASE_URL"),
            ("max_workers", "CARD_SCRAPER_MAX_WORKERS"),
            ("max_pages", "CARD_SCRAPER_MAX_PAGES"),
        ):
            raw = os.getenv(env)
            if raw is not None and raw.strip():
                values[key] = raw.strip()
        # Lax mode coerces numeric strings; invalid values raise ValidationError
        return cls.model_validate(values)


__all__ = ["ScraperSettings"]
