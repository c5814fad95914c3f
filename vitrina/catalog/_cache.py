"""
Variant cache — bounded LRU with TTL in front of the catalog source.

Stale stock here is acceptable: the stock validator re-reads live inventory
before money moves.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import timedelta

from vitrina._types import ProductId
from vitrina.catalog._types import Variant


class VariantCache:
    """
    In-memory LRU of product_id → variants.

    Example:
        cache = VariantCache(max_size=500, ttl=timedelta(seconds=30))
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: timedelta | None = timedelta(seconds=30),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_size = max_size
        self._ttl = ttl.total_seconds() if ttl else None
        self._clock = clock
        self._entries: dict[ProductId, tuple[float, tuple[Variant, ...]]] = {}
        self._order: list[ProductId] = []

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, product_id: ProductId) -> tuple[Variant, ...] | None:
        entry = self._entries.get(product_id)
        if entry is None:
            return None

        stored_at, variants = entry
        if self._ttl is not None and self._clock() - stored_at > self._ttl:
            await self.invalidate(product_id)
            return None

        # Move to end (most recent)
        self._order.remove(product_id)
        self._order.append(product_id)
        return variants

    async def set(self, product_id: ProductId, variants: tuple[Variant, ...]) -> None:
        if product_id in self._entries:
            self._order.remove(product_id)
        elif len(self._entries) >= self._max_size:
            oldest = self._order.pop(0)
            del self._entries[oldest]

        self._entries[product_id] = (self._clock(), variants)
        self._order.append(product_id)

    async def invalidate(self, product_id: ProductId) -> bool:
        if product_id in self._entries:
            del self._entries[product_id]
            self._order.remove(product_id)
            return True
        return False

    async def clear(self) -> None:
        self._entries.clear()
        self._order.clear()


__all__ = ("VariantCache",)
