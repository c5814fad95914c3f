"""
Stock check types — per-line results and the batch report.
"""

from __future__ import annotations

from dataclasses import dataclass

from vitrina._types import LineId, VariantId


@dataclass(frozen=True, slots=True)
class StockCheckResult:
    """
    One cart line checked against live stock. Transient, never stored.

    `variant_id` is None for legacy lines, which are always available.
    """

    line_id: LineId
    label: str
    variant_id: VariantId | None
    requested: int
    available: int | None

    @property
    def is_available(self) -> bool:
        return self.available is None or self.available >= self.requested

    @property
    def message(self) -> str:
        if self.is_available:
            return f"{self.label}: ok"
        return f"{self.label}: requested {self.requested}, only {self.available} available"


@dataclass(frozen=True, slots=True)
class StockReport:
    results: tuple[StockCheckResult, ...]

    @property
    def is_clean(self) -> bool:
        return all(r.is_available for r in self.results)

    @property
    def shortfalls(self) -> tuple[StockCheckResult, ...]:
        return tuple(r for r in self.results if not r.is_available)

    def messages(self) -> list[str]:
        """User-facing text naming each short line and its available quantity."""
        return [r.message for r in self.shortfalls]

    def available_by_line(self) -> dict[LineId, int]:
        """Live availability of variant lines, shaped for ReconcileStock."""
        return {
            r.line_id: r.available
            for r in self.results
            if r.available is not None
        }


@dataclass(frozen=True, slots=True)
class StockCheckFailed:
    """Inventory collaborator failed or timed out; the batch has no verdict."""

    message: str
    cause: Exception | None = None
    timed_out: bool = False


__all__ = (
    "StockCheckResult",
    "StockReport",
    "StockCheckFailed",
)
