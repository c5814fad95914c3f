"""
Catalog types — products, variants and the projections the resolver derives.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from vitrina._types import ProductId, VariantId


# ═══════════════════════════════════════════════════════════════════════════════
# Records (read-only, owned by the catalog collaborator)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: ProductId
    name: str
    base_price: Decimal
    images: tuple[str, ...] = ()
    category_id: str | None = None

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None


@dataclass(frozen=True, slots=True)
class Variant:
    """
    Purchasable (color, size) instantiation of a product.

    At most one variant exists per (product_id, color, size).
    """

    id: VariantId
    product_id: ProductId
    color: str
    size: str
    stock: int
    price_delta: Decimal = Decimal(0)
    sku: str | None = None
    image: str | None = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


# ═══════════════════════════════════════════════════════════════════════════════
# Projections
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ColorOption:
    """Distinct color; `image` is None when the caller should fall back to product images."""

    color: str
    image: str | None = None


@dataclass(frozen=True, slots=True)
class SizeOption:
    """Size for one color. Zero-stock sizes are listed so they render disabled."""

    size: str
    stock: int

    @property
    def available(self) -> bool:
        return self.stock > 0


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class VariantNotFound:
    """Selection incomplete or invalid. Not a crash."""

    product_id: ProductId
    color: str
    size: str

    @property
    def message(self) -> str:
        return f"No variant {self.color}/{self.size} for product {self.product_id}"


@dataclass(frozen=True, slots=True)
class ProductNotFound:
    product_id: ProductId

    @property
    def message(self) -> str:
        return f"Product {self.product_id} not found"


@dataclass(frozen=True, slots=True)
class CatalogUnavailable:
    """Catalog collaborator failed (network, database, ...)."""

    message: str
    cause: Exception | None = None


type CatalogError = ProductNotFound | CatalogUnavailable
type ResolveError = VariantNotFound | ProductNotFound | CatalogUnavailable


__all__ = (
    "Product",
    "Variant",
    "ColorOption",
    "SizeOption",
    "VariantNotFound",
    "ProductNotFound",
    "CatalogUnavailable",
    "CatalogError",
    "ResolveError",
)
