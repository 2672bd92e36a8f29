"""Capability shared by every institution-specific scraper.

The aggregation tool dispatches over institutions through this protocol; a
scraper satisfies it structurally, no base class is involved.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from .models import LoginResult, ScrapeOptions, ScrapeResult


@runtime_checkable
class InstitutionScraper(Protocol):
    def login(self, credentials: Mapping[str, str]) -> LoginResult: ...

    def fetch_transactions(self, options: ScrapeOptions | None = None) -> ScrapeResult: ...


__all__ = ["InstitutionScraper"]
