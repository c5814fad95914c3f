"""
Payment types — normalized checkout payload, redirect target, failures.

Every provider creator receives the same CheckoutPayload, so adding a
provider means adding one creator, not touching callers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, auto

from vitrina._types import ProductId, VariantId


# ═══════════════════════════════════════════════════════════════════════════════
# Method — closed enumeration
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"

    @classmethod
    def parse(cls, value: str | PaymentMethod) -> PaymentMethod | None:
        if isinstance(value, PaymentMethod):
            return value
        normalized = value.strip().lower()
        for method in cls:
            if method.value == normalized:
                return method
        return None


@dataclass(frozen=True, slots=True)
class PaymentMethodInfo:
    method: PaymentMethod
    name: str
    description: str
    fee_percent: Decimal
    currencies: tuple[str, ...]


# ═══════════════════════════════════════════════════════════════════════════════
# Payload
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    product_id: ProductId
    variant_id: VariantId | None
    name: str
    unit_price: Decimal
    quantity: int
    color: str | None = None
    size: str | None = None
    image: str | None = None

    @property
    def total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class CustomerContact:
    name: str
    email: str
    phone: str


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    address: str
    city: str
    region: str
    postal_code: str
    country: str


@dataclass(frozen=True, slots=True)
class CheckoutPayload:
    """
    Normalized request handed to every provider.

    `reference` is the merchant-side id of this attempt (a fresh one per
    checkout session); providers echo it back through their callbacks.
    """

    reference: str
    items: tuple[LineItem, ...]
    customer: CustomerContact
    address: ShippingAddress
    user_id: str | None
    currency: str
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    metadata: Mapping[str, str] = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SessionRedirect:
    """Opaque redirect target the shopper is sent to."""

    method: PaymentMethod
    session_id: str
    url: str


class FailureKind(Enum):
    INVALID_PAYLOAD = auto()
    UNSUPPORTED_METHOD = auto()
    PROVIDER = auto()
    TRANSPORT = auto()
    TIMEOUT = auto()


@dataclass(frozen=True, slots=True)
class PaymentSessionFailed:
    kind: FailureKind
    message: str
    method: PaymentMethod | None = None

    @property
    def retryable(self) -> bool:
        return self.kind in (FailureKind.PROVIDER, FailureKind.TRANSPORT, FailureKind.TIMEOUT)


__all__ = (
    "PaymentMethod",
    "PaymentMethodInfo",
    "LineItem",
    "CustomerContact",
    "ShippingAddress",
    "CheckoutPayload",
    "SessionRedirect",
    "FailureKind",
    "PaymentSessionFailed",
)
