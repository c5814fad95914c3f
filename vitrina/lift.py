"""
Lift — Helpers for lifting collaborator calls into LazyCoroResult.

Re-exports catching_async from combinators.lift and adds a timeout wrapper.
Collaborator boundaries go through this module:

    from vitrina import lift as L

    fetch = L.catching_async(lambda: source.stock_levels(ids), on_error=...)
    fetched = await L.with_timeout(fetch, timeout, on_timeout=...)
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Awaitable
from datetime import timedelta

from kungfu import LazyCoroResult, Result, Error

from combinators.lift import catching_async


def with_timeout[T, E](
    run: Callable[[], Awaitable[Result[T, E]]],
    timeout: timedelta | None,
    on_timeout: Callable[[timedelta], E],
) -> LazyCoroResult[T, E]:
    """
    Bound a fallible computation in time.

    The wrapped computation is cancelled when the deadline passes and the
    result becomes Error(on_timeout(timeout)). `timeout=None` disables the bound.

    Example:
        checked = await with_timeout(
            lambda: validator.check_batch(lines),
            timedelta(seconds=10),
            on_timeout=lambda t: StockCheckFailed(f"timed out after {t}"),
        )
    """
    async def _call() -> Result[T, E]:
        return await run()

    async def _run() -> Result[T, E]:
        if timeout is None:
            return await _call()
        try:
            return await asyncio.wait_for(_call(), timeout.total_seconds())
        except TimeoutError:
            return Error(on_timeout(timeout))

    return LazyCoroResult(_run)


__all__ = (
    "catching_async",
    "with_timeout",
)
