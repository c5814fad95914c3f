"""
Checkout orchestrator — gated 3-step state machine ending in a payment handoff.

    SHIPPING ──(valid form + clean stock check)──▶ PAYMENT
    PAYMENT  ──(supported method selected)───────▶ CONFIRM
    CONFIRM  ──submit: guard, stock check, dispatch──▶ redirect (submitted lines removed)

Backward moves are always allowed and keep every entered field. A failed
submit keeps the session (and the form) so the shopper can retry; only
cancel() discards it.

    checkout = CheckoutOrchestrator(store, validator, payments, settings)
    checkout.begin(identity)
    checkout.update_shipping(address="Calle 10 # 5-20", city="Bogotá", ...)
    await checkout.advance()
    checkout.select_method(PaymentMethod.STRIPE)
    await checkout.advance()

    match await checkout.submit():
        case Ok(redirect): go(redirect.url)
        case Error(e): show(e.message)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from kungfu import Result, Ok, Error

from vitrina.cart import CartRejection, CartState, CartStore
from vitrina.config import Settings
from vitrina.inventory import StockValidator
from vitrina.payment import PaymentDispatcher, PaymentMethod, SessionRedirect
from vitrina.checkout._guard import SubmissionGuard
from vitrina.checkout._payload import build_payload
from vitrina.checkout._types import (
    CheckoutError,
    CheckoutSession,
    EmptyCart,
    Identity,
    IdentityRequired,
    NoCheckoutSession,
    NoPaymentMethodSelected,
    ShippingDetails,
    Step,
    StockShortfall,
    SubmissionInProgress,
    UnsupportedPaymentMethod,
    WrongStep,
)
from vitrina.checkout._validate import validate_shipping

logger = logging.getLogger(__name__)


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        stock: StockValidator,
        payments: PaymentDispatcher,
        settings: Settings | None = None,
    ) -> None:
        self._cart = cart
        self._stock = stock
        self._payments = payments
        self._settings = settings or cart.settings
        self._guard = SubmissionGuard()
        self._session: CheckoutSession | None = None
        self._last_error: CheckoutError | None = None

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def session(self) -> CheckoutSession | None:
        return self._session

    @property
    def step(self) -> Step | None:
        return self._session.step if self._session else None

    @property
    def in_flight(self) -> bool:
        return self._guard.busy

    @property
    def last_error(self) -> CheckoutError | None:
        """Most recent failure, for step-scoped display. Cleared by progress."""
        return self._last_error

    @property
    def payment_methods(self) -> tuple[PaymentMethod, ...]:
        return self._payments.supported_methods

    # ═══════════════════════════════════════════════════════════════════════════
    # Transitions
    # ═══════════════════════════════════════════════════════════════════════════

    def begin(self, identity: Identity | None) -> Result[CheckoutSession, CheckoutError]:
        """Start from a non-empty cart with an established identity."""
        if identity is None or not identity.user_id:
            return self._fail(IdentityRequired())
        if self._cart.state.is_empty:
            return self._fail(EmptyCart())

        if self._session is not None and self._session.identity == identity:
            # Re-entering keeps what was already typed
            return self._ok(self._session)

        self._session = CheckoutSession(
            identity=identity,
            shipping=ShippingDetails.from_identity(identity),
            reference=f"order_{uuid.uuid4().hex[:20]}",
        )
        return self._ok(self._session)

    def update_shipping(self, **changes: str) -> Result[CheckoutSession, CheckoutError]:
        """Edit form fields. No validation until the shopper moves forward."""
        if self._session is None:
            return self._fail(NoCheckoutSession())
        unknown = set(changes) - set(ShippingDetails.field_names())
        if unknown:
            raise TypeError(f"Unknown shipping fields: {', '.join(sorted(unknown))}")

        shipping = replace(self._session.shipping, **changes)
        self._session = replace(self._session, shipping=shipping)
        return Ok(self._session)

    def select_method(
        self, method: PaymentMethod | str
    ) -> Result[CheckoutSession, CheckoutError]:
        if self._session is None:
            return self._fail(NoCheckoutSession())

        parsed = PaymentMethod.parse(method)
        if parsed is None or not self._payments.supports(parsed):
            raw = method.value if isinstance(method, PaymentMethod) else method
            return self._fail(UnsupportedPaymentMethod(raw))

        self._session = replace(self._session, method=parsed)
        return self._ok(self._session)

    async def advance(self) -> Result[CheckoutSession, CheckoutError]:
        session = self._session
        if session is None:
            return self._fail(NoCheckoutSession())

        match session.step:
            case Step.SHIPPING:
                return await self._leave_shipping(session)
            case Step.PAYMENT:
                if session.method is None:
                    return self._fail(NoPaymentMethodSelected())
                if not self._payments.supports(session.method):
                    return self._fail(UnsupportedPaymentMethod(session.method.value))
                self._session = replace(session, step=Step.CONFIRM)
                return self._ok(self._session)
            case Step.CONFIRM:
                return self._fail(WrongStep(Step.CONFIRM, Step.PAYMENT))

    def back(self) -> Result[CheckoutSession, CheckoutError]:
        """Step back without re-validation; entered data is kept."""
        if self._session is None:
            return self._fail(NoCheckoutSession())
        if self._session.step is not Step.SHIPPING:
            self._session = replace(self._session, step=Step(self._session.step - 1))
        return self._ok(self._session)

    def cancel(self) -> None:
        """Discard the session. The cart is untouched."""
        self._session = None
        self._last_error = None

    async def submit(self) -> Result[SessionRedirect, CheckoutError]:
        session = self._session
        if session is None:
            return self._fail(NoCheckoutSession())
        if session.step is not Step.CONFIRM:
            return self._fail(WrongStep(session.step, Step.CONFIRM))
        if session.method is None:
            return self._fail(NoPaymentMethodSelected())

        if not self._guard.acquire():
            logger.info("Duplicate submit ignored for %s", session.reference)
            return Error(SubmissionInProgress())

        try:
            lines = self._cart.lines
            if not lines:
                return self._fail(EmptyCart())

            # Stock may have moved since Shipping was left
            match await self._stock.check_batch(lines):
                case Error(e):
                    return self._fail(e)
                case Ok(report) if not report.is_clean:
                    return self._fail(StockShortfall(report))
                case Ok(_):
                    pass

            payload = build_payload(session, lines, self._settings)
            match await self._payments.create_session(payload, session.method):
                case Ok(redirect):
                    # Lines added while the provider was answering stay in the cart
                    for line in lines:
                        await self._cart.remove(line.line_id)
                    self._session = None
                    self._last_error = None
                    logger.info(
                        "Checkout %s handed off to %s", session.reference, redirect.method.value
                    )
                    return Ok(redirect)
                case Error(failure):
                    return self._fail(failure)
        finally:
            self._guard.release()

    async def apply_available_stock(self) -> Result[CartState, CartRejection | CheckoutError]:
        """
        Resolve the last shortfall by clamping short lines to what is available.

        Lines with nothing left are removed. The shopper still has to move
        forward again, which re-checks stock.
        """
        error = self._last_error
        if not isinstance(error, StockShortfall):
            return Ok(self._cart.state)
        result = await self._cart.reconcile(error.report.available_by_line())
        if isinstance(result, Ok):
            self._last_error = None
        return result

    # ═══════════════════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════════════════

    async def _leave_shipping(
        self, session: CheckoutSession
    ) -> Result[CheckoutSession, CheckoutError]:
        match validate_shipping(session.shipping):
            case Error(invalid):
                return self._fail(invalid)
            case Ok(cleaned):
                pass

        lines = self._cart.lines
        if not lines:
            return self._fail(EmptyCart())

        match await self._stock.check_batch(lines):
            case Error(e):
                return self._fail(e)
            case Ok(report) if not report.is_clean:
                return self._fail(StockShortfall(report))
            case Ok(_):
                pass

        current = self._session
        if current is None or current.reference != session.reference:
            # Cancelled while the stock check was in flight
            return self._fail(NoCheckoutSession())

        if current.shipping != session.shipping:
            # Form edited while the stock check was in flight
            match validate_shipping(current.shipping):
                case Error(invalid):
                    return self._fail(invalid)
                case Ok(cleaned):
                    pass

        self._session = replace(current, shipping=cleaned, step=Step.PAYMENT)
        return self._ok(self._session)

    def _ok(self, session: CheckoutSession) -> Result[CheckoutSession, CheckoutError]:
        self._last_error = None
        return Ok(session)

    def _fail[T](self, error: CheckoutError) -> Result[T, CheckoutError]:
        self._last_error = error
        return Error(error)


__all__ = ("CheckoutOrchestrator",)
