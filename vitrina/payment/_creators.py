"""
Session creators — one per provider, all fed the same CheckoutPayload.

HTTP creators talk to the storefront's provider endpoints:

    Stripe  POST {cartItems, email, customerData, userId, metadata}
            ← {id, url}
    PayPal  POST {amount, currency, order_id, email, customer_data}
            ← {order_id, approval_url}

Either endpoint reports failure as a non-2xx status and/or
{"success": false, "error": "..."}. Creators never raise.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Any, Protocol

import httpx
from kungfu import Result, Ok, Error

from vitrina.payment._types import (
    CheckoutPayload,
    FailureKind,
    PaymentMethod,
    PaymentMethodInfo,
    PaymentSessionFailed,
    SessionRedirect,
)

logger = logging.getLogger(__name__)


STRIPE_INFO = PaymentMethodInfo(
    method=PaymentMethod.STRIPE,
    name="Tarjeta de Crédito/Débito",
    description="Visa, Mastercard, American Express",
    fee_percent=Decimal("2.9"),
    currencies=("USD", "EUR", "COP"),
)

PAYPAL_INFO = PaymentMethodInfo(
    method=PaymentMethod.PAYPAL,
    name="PayPal",
    description="Paga con tu cuenta de PayPal",
    fee_percent=Decimal("3.4"),
    currencies=("USD", "EUR", "COP"),
)

DEFAULT_INFO = {
    PaymentMethod.STRIPE: STRIPE_INFO,
    PaymentMethod.PAYPAL: PAYPAL_INFO,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class SessionCreator(Protocol):
    @property
    def info(self) -> PaymentMethodInfo: ...

    async def create(
        self, payload: CheckoutPayload
    ) -> Result[SessionRedirect, PaymentSessionFailed]: ...


def _amount(value: Decimal) -> int | str:
    return int(value) if value == value.to_integral_value() else str(value)


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP creators
# ═══════════════════════════════════════════════════════════════════════════════


class HttpSessionCreator:
    """
    Base for JSON-over-HTTP providers.

    Pass a shared `httpx.AsyncClient` to reuse connections; otherwise a
    short-lived client is opened per call.
    """

    method: PaymentMethod

    def __init__(
        self,
        endpoint: str,
        client: httpx.AsyncClient | None = None,
        info: PaymentMethodInfo | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._client = client
        self._info = info or DEFAULT_INFO[self.method]

    @property
    def info(self) -> PaymentMethodInfo:
        return self._info

    async def create(
        self, payload: CheckoutPayload
    ) -> Result[SessionRedirect, PaymentSessionFailed]:
        body = self.build_body(payload)
        try:
            if self._client is not None:
                response = await self._client.post(self._endpoint, json=body)
            else:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await client.post(self._endpoint, json=body)
        except httpx.HTTPError as e:
            logger.warning("%s session request failed: %s", self.method.value, e)
            return Error(self._failure(FailureKind.TRANSPORT, f"{self.info.name} unreachable: {e}"))

        try:
            data: Any = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            return Error(self._failure(
                FailureKind.PROVIDER,
                f"{self.info.name} returned HTTP {response.status_code} without a JSON object",
            ))

        if response.is_error or data.get("success") is False:
            message = data.get("error") or f"HTTP {response.status_code}"
            return Error(self._failure(FailureKind.PROVIDER, str(message)))

        return self.parse_response(data)

    def build_body(self, payload: CheckoutPayload) -> dict[str, Any]:
        raise NotImplementedError

    def parse_response(self, data: dict[str, Any]) -> Result[SessionRedirect, PaymentSessionFailed]:
        raise NotImplementedError

    def _failure(self, kind: FailureKind, message: str) -> PaymentSessionFailed:
        return PaymentSessionFailed(kind, message, self.method)

    def _redirect(self, session_id: Any, url: Any) -> Result[SessionRedirect, PaymentSessionFailed]:
        if not session_id or not url:
            return Error(self._failure(
                FailureKind.PROVIDER, f"{self.info.name} response is missing session id or url"
            ))
        return Ok(SessionRedirect(self.method, str(session_id), str(url)))


class StripeSessionCreator(HttpSessionCreator):
    method = PaymentMethod.STRIPE

    def build_body(self, payload: CheckoutPayload) -> dict[str, Any]:
        return {
            "cartItems": [
                {
                    "id": item.product_id,
                    "variantId": item.variant_id,
                    "name": item.name,
                    "price": _amount(item.unit_price),
                    "quantity": item.quantity,
                    "color": item.color,
                    "size": item.size,
                    "image": item.image,
                }
                for item in payload.items
            ],
            "email": payload.customer.email,
            "customerData": {
                "name": payload.customer.name,
                "email": payload.customer.email,
                "phone": payload.customer.phone,
                "address": payload.address.address,
                "city": payload.address.city,
                "state": payload.address.region,
                "zipCode": payload.address.postal_code,
                "country": payload.address.country,
            },
            "userId": payload.user_id,
            "metadata": {
                "reference": payload.reference,
                "currency": payload.currency,
                "subtotal": _amount(payload.subtotal),
                "tax": _amount(payload.tax),
                "shipping": _amount(payload.shipping),
                "total": _amount(payload.total),
                **payload.metadata,
            },
        }

    def parse_response(self, data: dict[str, Any]) -> Result[SessionRedirect, PaymentSessionFailed]:
        return self._redirect(data.get("id"), data.get("url"))


class PayPalSessionCreator(HttpSessionCreator):
    method = PaymentMethod.PAYPAL

    def build_body(self, payload: CheckoutPayload) -> dict[str, Any]:
        return {
            "amount": _amount(payload.total),
            "currency": payload.currency,
            "order_id": payload.reference,
            "email": payload.customer.email,
            "customer_data": {
                "name": payload.customer.name,
                "phone": payload.customer.phone,
                "address": payload.address.address,
                "city": payload.address.city,
                "state": payload.address.region,
                "zip_code": payload.address.postal_code,
                "country": payload.address.country,
                "user_id": payload.user_id,
            },
        }

    def parse_response(self, data: dict[str, Any]) -> Result[SessionRedirect, PaymentSessionFailed]:
        return self._redirect(data.get("order_id"), data.get("approval_url"))


# ═══════════════════════════════════════════════════════════════════════════════
# Simulated provider — demo / tests
# ═══════════════════════════════════════════════════════════════════════════════


class SimulatedSessionCreator:
    """
    In-process provider.

    Records every payload it receives. Set `fail_with` to make the next
    calls fail with a provider error.
    """

    def __init__(
        self,
        method: PaymentMethod,
        base_url: str = "https://pay.example.test",
        fail_with: str | None = None,
    ) -> None:
        self._method = method
        self._base_url = base_url.rstrip("/")
        self.fail_with = fail_with
        self.calls: list[CheckoutPayload] = []

    @property
    def info(self) -> PaymentMethodInfo:
        return DEFAULT_INFO[self._method]

    async def create(
        self, payload: CheckoutPayload
    ) -> Result[SessionRedirect, PaymentSessionFailed]:
        self.calls.append(payload)
        if self.fail_with is not None:
            return Error(PaymentSessionFailed(FailureKind.PROVIDER, self.fail_with, self._method))

        session_id = f"{self._method.value}_{uuid.uuid4().hex[:16]}"
        return Ok(SessionRedirect(
            method=self._method,
            session_id=session_id,
            url=f"{self._base_url}/{self._method.value}/{session_id}",
        ))


__all__ = (
    "SessionCreator",
    "HttpSessionCreator",
    "StripeSessionCreator",
    "PayPalSessionCreator",
    "SimulatedSessionCreator",
    "STRIPE_INFO",
    "PAYPAL_INFO",
    "DEFAULT_INFO",
)
