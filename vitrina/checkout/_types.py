"""
Checkout types — steps, identity, shipping form, session and errors.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import IntEnum

from vitrina.inventory import StockCheckFailed, StockReport
from vitrina.payment import PaymentMethod, PaymentSessionFailed


class Step(IntEnum):
    SHIPPING = 1
    PAYMENT = 2
    CONFIRM = 3


# ═══════════════════════════════════════════════════════════════════════════════
# Identity & form
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Identity:
    """Already-resolved shopper identity from the identity collaborator."""

    user_id: str
    name: str = ""
    email: str = ""
    phone: str = ""


@dataclass(frozen=True, slots=True)
class ShippingDetails:
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    region: str = ""
    postal_code: str = ""
    country: str = "Colombia"

    @classmethod
    def from_identity(cls, identity: Identity) -> ShippingDetails:
        return cls(name=identity.name, email=identity.email, phone=identity.phone)

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """
    One checkout attempt. Lives in memory only; discarded on success or cancel.
    """

    identity: Identity
    shipping: ShippingDetails
    reference: str
    method: PaymentMethod | None = None
    step: Step = Step.SHIPPING


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True, slots=True)
class ValidationFailed:
    errors: tuple[FieldError, ...]

    @property
    def message(self) -> str:
        return "; ".join(f"{e.field}: {e.message}" for e in self.errors)

    def for_field(self, name: str) -> str | None:
        for e in self.errors:
            if e.field == name:
                return e.message
        return None


@dataclass(frozen=True, slots=True)
class StockShortfall:
    """Cart-level error naming each short line and what is available."""

    report: StockReport

    @property
    def message(self) -> str:
        return "Not enough stock: " + "; ".join(self.report.messages())


@dataclass(frozen=True, slots=True)
class IdentityRequired:
    message: str = "Sign in to check out"


@dataclass(frozen=True, slots=True)
class EmptyCart:
    message: str = "Your cart is empty"


@dataclass(frozen=True, slots=True)
class NoCheckoutSession:
    message: str = "Checkout has not been started"


@dataclass(frozen=True, slots=True)
class NoPaymentMethodSelected:
    message: str = "Choose a payment method"


@dataclass(frozen=True, slots=True)
class UnsupportedPaymentMethod:
    value: str

    @property
    def message(self) -> str:
        return f"Payment method {self.value!r} is not available"


@dataclass(frozen=True, slots=True)
class SubmissionInProgress:
    message: str = "Payment is already being processed"


@dataclass(frozen=True, slots=True)
class WrongStep:
    step: Step
    expected: Step

    @property
    def message(self) -> str:
        return f"Not allowed from {self.step.name.lower()} (expected {self.expected.name.lower()})"


type CheckoutError = (
    ValidationFailed
    | StockShortfall
    | StockCheckFailed
    | IdentityRequired
    | EmptyCart
    | NoCheckoutSession
    | NoPaymentMethodSelected
    | UnsupportedPaymentMethod
    | SubmissionInProgress
    | WrongStep
    | PaymentSessionFailed
)


__all__ = (
    "Step",
    "Identity",
    "ShippingDetails",
    "CheckoutSession",
    # Errors
    "FieldError",
    "ValidationFailed",
    "StockShortfall",
    "IdentityRequired",
    "EmptyCart",
    "NoCheckoutSession",
    "NoPaymentMethodSelected",
    "UnsupportedPaymentMethod",
    "SubmissionInProgress",
    "WrongStep",
    "CheckoutError",
)
