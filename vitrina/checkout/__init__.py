"""
Checkout — shipping → payment → confirm, ending in a provider redirect.

    from vitrina import checkout as CO

    flow = CO.CheckoutOrchestrator(store, validator, payments)
    flow.begin(CO.Identity("u1", "Ana Pérez", "ana@example.com", "3001234567"))
"""

from vitrina.checkout._types import (
    Step,
    Identity,
    ShippingDetails,
    CheckoutSession,
    FieldError,
    ValidationFailed,
    StockShortfall,
    IdentityRequired,
    EmptyCart,
    NoCheckoutSession,
    NoPaymentMethodSelected,
    UnsupportedPaymentMethod,
    SubmissionInProgress,
    WrongStep,
    CheckoutError,
)
from vitrina.checkout._validate import validate_shipping, MIN_LENGTHS
from vitrina.checkout._guard import SubmissionGuard
from vitrina.checkout._payload import build_payload, line_items
from vitrina.checkout._orchestrator import CheckoutOrchestrator

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
    # Operations
    "validate_shipping",
    "MIN_LENGTHS",
    "SubmissionGuard",
    "build_payload",
    "line_items",
    "CheckoutOrchestrator",
)
