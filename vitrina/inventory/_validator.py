"""
Stock validator — re-check the cart against live inventory in one batch.

Compares each line's quantity against CURRENT stock, not the stock captured
when the line was added. Lines without a variant are always available.

    validator = StockValidator(inventory, timeout=timedelta(seconds=10))

    match await validator.check_batch(cart.lines):
        case Ok(report) if report.is_clean:
            ...
        case Ok(report):
            for msg in report.messages(): ...
        case Error(StockCheckFailed(message)):
            ...
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import timedelta

from kungfu import Result, Ok, Error, LazyCoroResult

from vitrina import lift as L
from vitrina._types import VariantId
from vitrina.cart import CartLine
from vitrina.inventory._source import InventorySource
from vitrina.inventory._types import StockCheckFailed, StockCheckResult, StockReport

logger = logging.getLogger(__name__)


class StockValidator:
    def __init__(
        self,
        source: InventorySource,
        timeout: timedelta | None = None,
    ) -> None:
        self._source = source
        self._timeout = timeout

    def check_batch(
        self, lines: Iterable[CartLine]
    ) -> LazyCoroResult[StockReport, StockCheckFailed]:
        lines = tuple(lines)

        async def impl() -> Result[StockReport, StockCheckFailed]:
            variant_ids = list(dict.fromkeys(
                line.variant.id for line in lines if line.variant is not None
            ))
            if not variant_ids:
                return Ok(build_report(lines, {}))

            fetch = L.catching_async(
                lambda: self._source.stock_levels(variant_ids),
                on_error=lambda e: StockCheckFailed(f"Inventory query failed: {e}", e),
            )
            fetched = await L.with_timeout(
                lambda: fetch,
                self._timeout,
                on_timeout=lambda t: StockCheckFailed(
                    f"Inventory query timed out after {t.total_seconds():g}s",
                    timed_out=True,
                ),
            )

            match fetched:
                case Ok(levels):
                    report = build_report(lines, levels)
                    if not report.is_clean:
                        logger.info("Stock shortfall: %s", "; ".join(report.messages()))
                    return Ok(report)
                case Error(e):
                    logger.warning("Stock check failed: %s", e.message)
                    return Error(e)

        return LazyCoroResult(impl)


def build_report(
    lines: Iterable[CartLine],
    levels: Mapping[VariantId, int],
) -> StockReport:
    results: list[StockCheckResult] = []
    for line in lines:
        if line.variant is None:
            available = None
        else:
            available = max(int(levels.get(line.variant.id, 0)), 0)
        results.append(StockCheckResult(
            line_id=line.line_id,
            label=line.label,
            variant_id=line.variant.id if line.variant else None,
            requested=line.quantity,
            available=available,
        ))
    return StockReport(tuple(results))


__all__ = (
    "StockValidator",
    "build_report",
)
