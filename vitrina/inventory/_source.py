"""
Inventory source — live stock collaborator protocol + in-memory implementation.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from vitrina._types import VariantId
from vitrina.catalog import Variant


class InventorySource(Protocol):
    """
    Batch query by variant id.

    Variants missing from the returned mapping have live stock 0.
    """

    async def stock_levels(self, variant_ids: Sequence[VariantId]) -> Mapping[VariantId, int]: ...


class MemoryInventory:
    """
    In-memory inventory.

    Note: Only for tests and demos. `set_stock` simulates other shoppers.
    """

    def __init__(self, levels: Mapping[VariantId, int] | None = None) -> None:
        self._levels: dict[VariantId, int] = dict(levels or {})
        self.queries: list[tuple[VariantId, ...]] = []

    @classmethod
    def from_variants(cls, variants: Iterable[Variant]) -> MemoryInventory:
        return cls({v.id: v.stock for v in variants})

    def set_stock(self, variant_id: VariantId, stock: int) -> None:
        self._levels[variant_id] = stock

    def stock_of(self, variant_id: VariantId) -> int:
        return self._levels.get(variant_id, 0)

    async def stock_levels(self, variant_ids: Sequence[VariantId]) -> Mapping[VariantId, int]:
        self.queries.append(tuple(variant_ids))
        return {vid: self._levels[vid] for vid in variant_ids if vid in self._levels}


__all__ = (
    "InventorySource",
    "MemoryInventory",
)
