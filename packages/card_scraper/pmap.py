"""Ordered, bounded-concurrency map over a thread pool (after ``p-map``).

Month tasks run concurrently but their results must be folded in submission
order, so ``p_map`` returns results indexed by input position regardless of
completion order. The first failure cancels work that has not started and is
re-raised unchanged; there is no partial result.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


def p_map(
    items: Sequence[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int | None = None,
) -> list[OutT]:
    """Map ``items`` through ``mapper`` on up to ``concurrency`` threads.

    ``concurrency=None`` runs every item at once. The returned list is in input
    order. The first mapper exception propagates after pending submissions are
    cancelled; mappers already running are allowed to finish.
    """

    if concurrency is None:
        concurrency = max(1, len(items))
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")
    if not items:
        return []

    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        futures: list[Future[OutT]] = [pool.submit(mapper, item) for item in items]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        for fut in futures:
            if fut in done and fut.exception() is not None:
                pool.shutdown(wait=False, cancel_futures=True)
                raise fut.exception()  # type: ignore[misc]
        return [fut.result() for fut in futures]


__all__ = ["p_map"]
