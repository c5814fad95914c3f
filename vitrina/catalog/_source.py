"""
Catalog source — the read-only collaborator protocol + in-memory implementation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from vitrina._types import ProductId
from vitrina.catalog._types import Product, Variant


# ═══════════════════════════════════════════════════════════════════════════════
# Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CatalogSource(Protocol):
    """
    Catalog collaborator.

    Implementations may raise on transport failure; the resolver converts
    exceptions into CatalogUnavailable.
    """

    async def product(self, product_id: ProductId) -> Product | None: ...

    async def variants(self, product_id: ProductId) -> Sequence[Variant]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Catalog — For Testing / Demo
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCatalog:
    """
    In-memory catalog.

    Note: Only for single-process demos and tests.
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        variants: Iterable[Variant] = (),
    ) -> None:
        self._products: dict[ProductId, Product] = {}
        self._variants: dict[ProductId, list[Variant]] = {}
        self.variant_queries = 0
        for p in products:
            self.put_product(p)
        for v in variants:
            self.put_variant(v)

    def put_product(self, product: Product) -> None:
        self._products[product.id] = product

    def put_variant(self, variant: Variant) -> None:
        """Insert or replace by (product, color, size)."""
        rows = self._variants.setdefault(variant.product_id, [])
        rows[:] = [
            v for v in rows
            if v.id != variant.id and (v.color, v.size) != (variant.color, variant.size)
        ]
        rows.append(variant)

    def all_products(self) -> list[Product]:
        return list(self._products.values())

    def all_variants(self) -> list[Variant]:
        return [v for rows in self._variants.values() for v in rows]

    async def product(self, product_id: ProductId) -> Product | None:
        return self._products.get(product_id)

    async def variants(self, product_id: ProductId) -> Sequence[Variant]:
        self.variant_queries += 1
        return tuple(self._variants.get(product_id, ()))


__all__ = (
    "CatalogSource",
    "MemoryCatalog",
)
