"""
Payment dispatcher — the only exit door toward money movement.

Selects the provider-specific creator for the requested method and returns a
redirect target or a typed failure. Never mutates the cart, never persists an
order.

    payments = (
        dispatcher()
        .on(PaymentMethod.STRIPE, StripeSessionCreator(settings.stripe_endpoint))
        .on(PaymentMethod.PAYPAL, PayPalSessionCreator(settings.paypal_endpoint))
        .timeout(seconds=30)
        .build()
    )

    match await payments.create_session(payload, PaymentMethod.STRIPE):
        case Ok(SessionRedirect(url=url)): redirect(url)
        case Error(failure): show(failure.message)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta

from kungfu import Result, Ok, Error, LazyCoroResult

from vitrina import lift as L
from vitrina.payment._creators import SessionCreator
from vitrina.payment._types import (
    CheckoutPayload,
    FailureKind,
    PaymentMethod,
    PaymentMethodInfo,
    PaymentSessionFailed,
    SessionRedirect,
)

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ═══════════════════════════════════════════════════════════════════════════════
# Payload validation
# ═══════════════════════════════════════════════════════════════════════════════


def validate_payload(payload: CheckoutPayload) -> Result[CheckoutPayload, PaymentSessionFailed]:
    def invalid(message: str) -> Result[CheckoutPayload, PaymentSessionFailed]:
        return Error(PaymentSessionFailed(FailureKind.INVALID_PAYLOAD, message))

    if not payload.items:
        return invalid("Cart is empty")
    if not EMAIL_RE.match(payload.customer.email.strip()):
        return invalid("Valid email is required")
    if len(payload.customer.name.strip()) < 2:
        return invalid("Customer name is required")
    for item in payload.items:
        if item.unit_price <= 0 or item.quantity <= 0:
            return invalid(f"Invalid item: {item.name}")
    if payload.total < 0:
        return invalid("Negative total")
    return Ok(payload)


# ═══════════════════════════════════════════════════════════════════════════════
# Dispatcher
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentDispatcher:
    def __init__(
        self,
        creators: dict[PaymentMethod, SessionCreator],
        timeout: timedelta | None,
    ) -> None:
        self._creators = dict(creators)
        self._timeout = timeout

    @property
    def supported_methods(self) -> tuple[PaymentMethod, ...]:
        return tuple(m for m in PaymentMethod if m in self._creators)

    def supports(self, method: PaymentMethod) -> bool:
        return method in self._creators

    def methods(self) -> list[PaymentMethodInfo]:
        return [self._creators[m].info for m in self.supported_methods]

    def create_session(
        self,
        payload: CheckoutPayload,
        method: PaymentMethod,
    ) -> LazyCoroResult[SessionRedirect, PaymentSessionFailed]:
        async def impl() -> Result[SessionRedirect, PaymentSessionFailed]:
            creator = self._creators.get(method)
            if creator is None:
                return Error(PaymentSessionFailed(
                    FailureKind.UNSUPPORTED_METHOD,
                    f"Unsupported payment method: {method.value}",
                    method,
                ))

            match validate_payload(payload):
                case Error(e):
                    return Error(PaymentSessionFailed(e.kind, e.message, method))
                case Ok(_):
                    pass

            if payload.currency not in creator.info.currencies:
                return Error(PaymentSessionFailed(
                    FailureKind.INVALID_PAYLOAD,
                    f"{creator.info.name} does not accept {payload.currency}",
                    method,
                ))

            guarded = L.catching_async(
                lambda: creator.create(payload),
                on_error=lambda e: PaymentSessionFailed(
                    FailureKind.PROVIDER, f"Payment provider crashed: {e}", method
                ),
            )
            outcome = await L.with_timeout(
                lambda: guarded,
                self._timeout,
                on_timeout=lambda t: PaymentSessionFailed(
                    FailureKind.TIMEOUT,
                    f"Payment provider did not answer within {t.total_seconds():g}s",
                    method,
                ),
            )

            match outcome:
                case Ok(Ok(redirect)):
                    logger.info(
                        "Payment session %s created via %s for %s",
                        redirect.session_id, method.value, payload.reference,
                    )
                    return Ok(redirect)
                case Ok(Error(failure)) | Error(failure):
                    logger.warning(
                        "Payment session via %s failed (%s): %s",
                        method.value, failure.kind.name, failure.message,
                    )
                    return Error(failure)

        return LazyCoroResult(impl)


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class DispatcherBuilder:
    """
    Immutable builder. Last registration for a method wins.
    """

    _creators: tuple[tuple[PaymentMethod, SessionCreator], ...] = ()
    _timeout: timedelta | None = field(default=timedelta(seconds=30))

    def on(self, method: PaymentMethod, creator: SessionCreator) -> DispatcherBuilder:
        return DispatcherBuilder((*self._creators, (method, creator)), self._timeout)

    def timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> DispatcherBuilder:
        """Bound each session creation; timeout() with no arguments disables it."""
        if delta is None and seconds is not None:
            delta = timedelta(seconds=seconds)
        return DispatcherBuilder(self._creators, delta)

    def build(self) -> PaymentDispatcher:
        return PaymentDispatcher(dict(self._creators), self._timeout)


def dispatcher() -> DispatcherBuilder:
    return DispatcherBuilder()


__all__ = (
    "PaymentDispatcher",
    "DispatcherBuilder",
    "dispatcher",
    "validate_payload",
    "EMAIL_RE",
)
