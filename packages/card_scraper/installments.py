"""Installment metadata from free-text memo annotations.

The portal writes installment progress into the memo column as prose, e.g.
``"תשלום 2 מתוך 5"``. The heuristic is deliberately simple and isolated here:
the first integer is the installment number, the second is the plan total.
"""

from __future__ import annotations

import re

from .models import Installment

_INT_RE = re.compile(r"\d+")


def resolve_installment(memo: str | None) -> Installment | None:
    """Return ``Installment(number, total)`` or ``None`` when fewer than two integers appear.

    ``number <= total`` is not checked.
    """

    if not memo:
        return None
    matches = _INT_RE.findall(memo)
    if len(matches) < 2:
        return None
    return Installment(number=int(matches[0]), total=int(matches[1]))


__all__ = ["resolve_installment"]
