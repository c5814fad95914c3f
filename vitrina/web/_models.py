"""
HTTP models — pydantic In/Out codecs around the domain types.

In-models expose `to_domain()`, out-models `from_domain()`.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from vitrina.cart import CartLine, CartLineRecord, CartTotals
from vitrina.catalog import ColorOption, SizeOption, Variant
from vitrina.checkout import ShippingDetails, ValidationFailed
from vitrina.inventory import StockCheckResult, StockReport
from vitrina.payment import PaymentMethodInfo, SessionRedirect


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class ColorOut(BaseModel):
    color: str
    image: str | None

    @classmethod
    def from_domain(cls, dom: ColorOption) -> ColorOut:
        return cls(color=dom.color, image=dom.image)


class SizeOut(BaseModel):
    size: str
    stock: int
    available: bool

    @classmethod
    def from_domain(cls, dom: SizeOption) -> SizeOut:
        return cls(size=dom.size, stock=dom.stock, available=dom.available)


class VariantOut(BaseModel):
    id: str
    product_id: str
    color: str
    size: str
    stock: int
    price_delta: Decimal
    sku: str | None
    image: str | None

    @classmethod
    def from_domain(cls, dom: Variant) -> VariantOut:
        return cls(
            id=dom.id,
            product_id=dom.product_id,
            color=dom.color,
            size=dom.size,
            stock=dom.stock,
            price_delta=dom.price_delta,
            sku=dom.sku,
            image=dom.image,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class CartIn(BaseModel):
    lines: list[CartLineRecord] = Field(default_factory=list)

    def to_domain(self) -> list[CartLine]:
        return [record.to_domain() for record in self.lines]


class TotalsOut(BaseModel):
    item_count: int
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    free_shipping: bool
    missing_for_free_shipping: Decimal

    @classmethod
    def from_domain(cls, dom: CartTotals) -> TotalsOut:
        return cls(
            item_count=dom.item_count,
            subtotal=dom.subtotal,
            tax=dom.tax,
            shipping=dom.shipping,
            total=dom.total,
            free_shipping=dom.free_shipping,
            missing_for_free_shipping=dom.missing_for_free_shipping,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Stock
# ═══════════════════════════════════════════════════════════════════════════════


class StockResultOut(BaseModel):
    line_id: str
    variant_id: str | None
    requested: int
    available: int | None
    is_available: bool

    @classmethod
    def from_domain(cls, dom: StockCheckResult) -> StockResultOut:
        return cls(
            line_id=dom.line_id,
            variant_id=dom.variant_id,
            requested=dom.requested,
            available=dom.available,
            is_available=dom.is_available,
        )


class StockReportOut(BaseModel):
    clean: bool
    results: list[StockResultOut]
    messages: list[str]

    @classmethod
    def from_domain(cls, dom: StockReport) -> StockReportOut:
        return cls(
            clean=dom.is_clean,
            results=[StockResultOut.from_domain(r) for r in dom.results],
            messages=dom.messages(),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Payment / checkout
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethodOut(BaseModel):
    id: str
    name: str
    description: str
    fees: Decimal
    supported_currencies: list[str]

    @classmethod
    def from_domain(cls, dom: PaymentMethodInfo) -> PaymentMethodOut:
        return cls(
            id=dom.method.value,
            name=dom.name,
            description=dom.description,
            fees=dom.fee_percent,
            supported_currencies=list(dom.currencies),
        )


class ShippingIn(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    region: str = ""
    postal_code: str = ""
    country: str = "Colombia"

    def to_domain(self) -> ShippingDetails:
        return ShippingDetails(**self.model_dump())


class CheckoutIn(BaseModel):
    method: str
    user_id: str = Field(min_length=1)
    shipping: ShippingIn
    lines: list[CartLineRecord] = Field(min_length=1)


class FieldErrorsOut(BaseModel):
    errors: dict[str, str]

    @classmethod
    def from_domain(cls, dom: ValidationFailed) -> FieldErrorsOut:
        return cls(errors={e.field: e.message for e in dom.errors})


class SessionOut(BaseModel):
    method: str
    session_id: str
    url: str

    @classmethod
    def from_domain(cls, dom: SessionRedirect) -> SessionOut:
        return cls(method=dom.method.value, session_id=dom.session_id, url=dom.url)


__all__ = (
    "ColorOut",
    "SizeOut",
    "VariantOut",
    "CartIn",
    "TotalsOut",
    "StockResultOut",
    "StockReportOut",
    "PaymentMethodOut",
    "ShippingIn",
    "CheckoutIn",
    "FieldErrorsOut",
    "SessionOut",
)
