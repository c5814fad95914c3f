"""
Payment — provider-agnostic session creation.

    from vitrina import payment as P

    payments = (
        P.dispatcher()
        .on(P.PaymentMethod.STRIPE, P.StripeSessionCreator(url))
        .build()
    )
"""

from vitrina.payment._types import (
    PaymentMethod,
    PaymentMethodInfo,
    LineItem,
    CustomerContact,
    ShippingAddress,
    CheckoutPayload,
    SessionRedirect,
    FailureKind,
    PaymentSessionFailed,
)
from vitrina.payment._creators import (
    SessionCreator,
    HttpSessionCreator,
    StripeSessionCreator,
    PayPalSessionCreator,
    SimulatedSessionCreator,
    STRIPE_INFO,
    PAYPAL_INFO,
)
from vitrina.payment._dispatcher import (
    PaymentDispatcher,
    DispatcherBuilder,
    dispatcher,
    validate_payload,
    EMAIL_RE,
)

__all__ = (
    # Types
    "PaymentMethod",
    "PaymentMethodInfo",
    "LineItem",
    "CustomerContact",
    "ShippingAddress",
    "CheckoutPayload",
    "SessionRedirect",
    "FailureKind",
    "PaymentSessionFailed",
    # Creators
    "SessionCreator",
    "HttpSessionCreator",
    "StripeSessionCreator",
    "PayPalSessionCreator",
    "SimulatedSessionCreator",
    "STRIPE_INFO",
    "PAYPAL_INFO",
    # Dispatcher
    "PaymentDispatcher",
    "DispatcherBuilder",
    "dispatcher",
    "validate_payload",
    "EMAIL_RE",
)
