"""Page-interaction collaborator interfaces.

The pipeline drives a browser page but does not implement one. These
``Protocol`` types name the calls it makes; a Playwright sync ``Page`` and
``ElementHandle`` satisfy them structurally, and tests provide in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeAlias


class Element(Protocol):
    def query_selector(self, selector: str) -> Element | None: ...

    def query_selector_all(self, selector: str) -> list[Element]: ...

    def inner_text(self) -> str: ...

    def click(self) -> None: ...


class Page(Protocol):
    @property
    def url(self) -> str: ...

    def query_selector(self, selector: str) -> Element | None: ...

    def query_selector_all(self, selector: str) -> list[Element]: ...

    def wait_for_load_state(self, state: str = "domcontentloaded") -> None:
        """Block until the navigation triggered by the last action has loaded."""
        ...

    def wait_for_redirect_or_selector(self, selector: str) -> None:
        """Block until the URL changes or ``selector`` appears, whichever is first."""
        ...

    def close(self) -> None: ...


class Browser(Protocol):
    def new_page(self) -> Page: ...


NavigateFn: TypeAlias = Callable[[str, Page], None]
"""Navigates ``page`` to ``url``; supplied by the host (handles auth cookies etc.)."""


__all__ = ["Element", "Page", "Browser", "NavigateFn"]
