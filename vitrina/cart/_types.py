"""
Cart types — lines, state, commands and rejections.

Commands form a closed tagged union dispatched by `reduce` through `match`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal

from vitrina._types import LineId, ProductId, VariantId
from vitrina.catalog import Product, Variant


# ═══════════════════════════════════════════════════════════════════════════════
# Line
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductSnapshot:
    """Display fields captured when the line is added."""

    product_id: ProductId
    name: str
    base_price: Decimal
    image: str | None = None
    category: str | None = None

    @classmethod
    def from_product(cls, product: Product, image: str | None = None) -> ProductSnapshot:
        return cls(
            product_id=product.id,
            name=product.name,
            base_price=product.base_price,
            image=image or product.primary_image,
            category=product.category_id,
        )


@dataclass(frozen=True, slots=True)
class VariantRef:
    """Variant reference with the stock recorded at capture time."""

    id: VariantId
    color: str
    size: str
    stock: int
    price_delta: Decimal = Decimal(0)

    @classmethod
    def from_variant(cls, variant: Variant) -> VariantRef:
        return cls(
            id=variant.id,
            color=variant.color,
            size=variant.size,
            stock=variant.stock,
            price_delta=variant.price_delta,
        )


def line_id_for(product_id: ProductId, variant_id: VariantId | None) -> LineId:
    return product_id if variant_id is None else f"{product_id}:{variant_id}"


@dataclass(frozen=True, slots=True)
class CartLine:
    product: ProductSnapshot
    variant: VariantRef | None
    quantity: int

    @classmethod
    def of(
        cls,
        product: Product,
        variant: Variant | None = None,
        quantity: int = 1,
    ) -> CartLine:
        """Build a line from catalog records."""
        return cls(
            product=ProductSnapshot.from_product(product, variant.image if variant else None),
            variant=VariantRef.from_variant(variant) if variant else None,
            quantity=quantity,
        )

    @property
    def line_id(self) -> LineId:
        return line_id_for(
            self.product.product_id,
            self.variant.id if self.variant else None,
        )

    @property
    def unit_price(self) -> Decimal:
        delta = self.variant.price_delta if self.variant else Decimal(0)
        return self.product.base_price + delta

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def stock_bound(self) -> int | None:
        """Advisory bound; None for legacy lines without a variant."""
        return self.variant.stock if self.variant else None

    @property
    def label(self) -> str:
        if self.variant is None:
            return self.product.name
        return f"{self.product.name} ({self.variant.color}/{self.variant.size})"

    def with_quantity(self, quantity: int) -> CartLine:
        return replace(self, quantity=quantity)


# ═══════════════════════════════════════════════════════════════════════════════
# State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartState:
    """
    Ordered lines + panel visibility.

    Order is insertion order, for display only. No two lines share a line_id.
    """

    lines: tuple[CartLine, ...] = ()
    is_open: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def find(self, line_id: LineId) -> CartLine | None:
        for line in self.lines:
            if line.line_id == line_id:
                return line
        return None


EMPTY_CART = CartState()


# ═══════════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class AddLine:
    line: CartLine


@dataclass(frozen=True, slots=True)
class UpdateQuantity:
    line_id: LineId
    quantity: int


@dataclass(frozen=True, slots=True)
class RemoveLine:
    line_id: LineId


@dataclass(frozen=True, slots=True)
class ClearCart:
    pass


@dataclass(frozen=True, slots=True)
class ToggleCart:
    pass


@dataclass(frozen=True, slots=True)
class OpenCart:
    pass


@dataclass(frozen=True, slots=True)
class CloseCart:
    pass


@dataclass(frozen=True, slots=True)
class ReconcileStock:
    """
    Clamp lines to live availability (line_id → available units).

    Lines with nothing available are removed; the recorded stock bound is
    refreshed to the live value. Lines absent from the mapping are untouched.
    """

    available: Mapping[LineId, int] = field(default_factory=dict)


type CartCommand = (
    AddLine
    | UpdateQuantity
    | RemoveLine
    | ClearCart
    | ToggleCart
    | OpenCart
    | CloseCart
    | ReconcileStock
)

LINE_COMMANDS = (AddLine, UpdateQuantity, RemoveLine, ClearCart, ReconcileStock)
"""Commands that change lines and therefore the persisted blob."""


# ═══════════════════════════════════════════════════════════════════════════════
# Rejections
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class InvalidLine:
    """Malformed add: missing product identity, non-positive quantity, ..."""

    reason: str

    @property
    def message(self) -> str:
        return f"Invalid cart line: {self.reason}"


@dataclass(frozen=True, slots=True)
class StockExceeded:
    line_id: LineId
    requested: int
    available: int

    @property
    def message(self) -> str:
        return f"Only {self.available} available for {self.line_id} (requested {self.requested})"


type CartRejection = InvalidLine | StockExceeded


# ═══════════════════════════════════════════════════════════════════════════════
# Storage errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StorageCorrupt:
    """Persisted blob could not be parsed."""

    message: str


@dataclass(frozen=True, slots=True)
class StorageError:
    """Storage backend failure (I/O, database)."""

    message: str
    cause: Exception | None = None


__all__ = (
    "ProductSnapshot",
    "VariantRef",
    "CartLine",
    "CartState",
    "EMPTY_CART",
    "line_id_for",
    # Commands
    "AddLine",
    "UpdateQuantity",
    "RemoveLine",
    "ClearCart",
    "ToggleCart",
    "OpenCart",
    "CloseCart",
    "ReconcileStock",
    "CartCommand",
    "LINE_COMMANDS",
    # Rejections
    "InvalidLine",
    "StockExceeded",
    "CartRejection",
    # Storage
    "StorageCorrupt",
    "StorageError",
)
