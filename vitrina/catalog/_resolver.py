"""
Variant resolver — read-only projection over catalog variants.

    resolver = VariantResolver(catalog)

    colors = await resolver.list_colors("P1")          # Ok([ColorOption("Azul", ...), ...])
    sizes = await resolver.list_sizes("P1", "Azul")    # Ok([SizeOption("S", 3), SizeOption("M", 0)])

    match await resolver.resolve("P1", "Rojo", "M"):
        case Ok(variant):
            ...
        case Error(VariantNotFound()):
            ...  # selection incomplete, keep add-to-cart disabled

Every method returns a LazyCoroResult; collaborator exceptions become
CatalogUnavailable and never escape.
"""

from __future__ import annotations

import re

from kungfu import Result, Ok, Error, LazyCoroResult

from vitrina import lift as L
from vitrina._types import ProductId
from vitrina.catalog._cache import VariantCache
from vitrina.catalog._source import CatalogSource
from vitrina.catalog._types import (
    CatalogError,
    CatalogUnavailable,
    ColorOption,
    Product,
    ProductNotFound,
    ResolveError,
    SizeOption,
    Variant,
    VariantNotFound,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Ordering
# ═══════════════════════════════════════════════════════════════════════════════

APPAREL_SIZES = ("XXS", "XS", "S", "M", "L", "XL", "XXL", "XXXL")
_NUMERIC = re.compile(r"^\d+(\.\d+)?$")


def size_sort_key(size: str) -> tuple[int, float, str]:
    """Apparel sizes in wearing order, then numeric sizes ascending, then the rest."""
    normalized = size.strip().upper()
    if normalized in APPAREL_SIZES:
        return (0, APPAREL_SIZES.index(normalized), "")
    if _NUMERIC.match(normalized):
        return (1, float(normalized), "")
    return (2, 0.0, normalized)


def color_sort_key(color: str) -> str:
    return color.strip().casefold()


def _same(a: str, b: str) -> bool:
    return a.strip().casefold() == b.strip().casefold()


# ═══════════════════════════════════════════════════════════════════════════════
# Resolver
# ═══════════════════════════════════════════════════════════════════════════════


class VariantResolver:
    def __init__(
        self,
        source: CatalogSource,
        cache: VariantCache | None = None,
    ) -> None:
        self._source = source
        self._cache = cache if cache is not None else VariantCache()

    @property
    def cache(self) -> VariantCache:
        return self._cache

    def product(self, product_id: ProductId) -> LazyCoroResult[Product, CatalogError]:
        async def impl() -> Result[Product, CatalogError]:
            fetched = await L.catching_async(
                lambda: self._source.product(product_id),
                on_error=lambda e: CatalogUnavailable(f"product lookup failed: {e}", e),
            )
            match fetched:
                case Ok(None):
                    return Error(ProductNotFound(product_id))
                case Ok(product):
                    return Ok(product)
                case Error(e):
                    return Error(e)

        return LazyCoroResult(impl)

    def variants(
        self, product_id: ProductId
    ) -> LazyCoroResult[tuple[Variant, ...], CatalogUnavailable]:
        """All variants of a product (cached)."""
        async def impl() -> Result[tuple[Variant, ...], CatalogUnavailable]:
            cached = await self._cache.get(product_id)
            if cached is not None:
                return Ok(cached)

            fetched = await L.catching_async(
                lambda: self._source.variants(product_id),
                on_error=lambda e: CatalogUnavailable(f"variant lookup failed: {e}", e),
            )
            match fetched:
                case Ok(rows):
                    variants = tuple(rows)
                    await self._cache.set(product_id, variants)
                    return Ok(variants)
                case Error(e):
                    return Error(e)

        return LazyCoroResult(impl)

    def list_colors(
        self, product_id: ProductId
    ) -> LazyCoroResult[list[ColorOption], CatalogUnavailable]:
        return self.variants(product_id).map(distinct_colors)

    def list_sizes(
        self, product_id: ProductId, color: str
    ) -> LazyCoroResult[list[SizeOption], CatalogUnavailable]:
        return self.variants(product_id).map(lambda vs: sizes_for(vs, color))

    def resolve(
        self, product_id: ProductId, color: str, size: str
    ) -> LazyCoroResult[Variant, ResolveError]:
        async def impl() -> Result[Variant, ResolveError]:
            match await self.variants(product_id):
                case Ok(variants):
                    for v in variants:
                        if _same(v.color, color) and _same(v.size, size):
                            return Ok(v)
                    return Error(VariantNotFound(product_id, color, size))
                case Error(e):
                    return Error(e)

        return LazyCoroResult(impl)

    async def invalidate(self, product_id: ProductId) -> None:
        await self._cache.invalidate(product_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Pure projections
# ═══════════════════════════════════════════════════════════════════════════════


def distinct_colors(variants: tuple[Variant, ...]) -> list[ColorOption]:
    """One option per color; image = first dedicated variant image for it."""
    images: dict[str, str | None] = {}
    names: dict[str, str] = {}
    for v in sorted(variants, key=lambda v: size_sort_key(v.size)):
        key = color_sort_key(v.color)
        names.setdefault(key, v.color.strip())
        if images.get(key) is None:
            images[key] = v.image or None

    return [ColorOption(names[key], images[key]) for key in sorted(names)]


def sizes_for(variants: tuple[Variant, ...], color: str) -> list[SizeOption]:
    stock: dict[str, int] = {}
    for v in variants:
        if _same(v.color, color):
            size = v.size.strip()
            stock[size] = stock.get(size, 0) + max(v.stock, 0)

    return [SizeOption(size, stock[size]) for size in sorted(stock, key=size_sort_key)]


__all__ = (
    "VariantResolver",
    "distinct_colors",
    "sizes_for",
    "size_sort_key",
    "color_sort_key",
    "APPAREL_SIZES",
)
