import asyncio
import json
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import httpx
import pytest

from support import unwrap_err, unwrap_ok

from vitrina.payment import (
    CheckoutPayload,
    CustomerContact,
    FailureKind,
    LineItem,
    PaymentMethod,
    PayPalSessionCreator,
    ShippingAddress,
    SimulatedSessionCreator,
    StripeSessionCreator,
    dispatcher,
)


@pytest.fixture
def payload():
    return CheckoutPayload(
        reference="order_test",
        items=(
            LineItem("P1", "P1-AZ-M", "Camiseta", Decimal("45000"), 2, "Azul", "M"),
        ),
        customer=CustomerContact("Ana Pérez", "ana@example.com", "3001234567"),
        address=ShippingAddress("Calle 10 # 5-20", "Bogotá", "Cundinamarca", "110111", "Colombia"),
        user_id="u-ana",
        currency="COP",
        subtotal=Decimal("90000"),
        tax=Decimal("17100"),
        shipping=Decimal("15000"),
        total=Decimal("122100"),
    )


def simulated():
    stripe = SimulatedSessionCreator(PaymentMethod.STRIPE)
    paypal = SimulatedSessionCreator(PaymentMethod.PAYPAL)
    payments = (
        dispatcher()
        .on(PaymentMethod.STRIPE, stripe)
        .on(PaymentMethod.PAYPAL, paypal)
        .build()
    )
    return payments, stripe, paypal


async def test_dispatches_to_the_selected_provider_only(payload):
    payments, stripe, paypal = simulated()

    redirect = unwrap_ok(await payments.create_session(payload, PaymentMethod.PAYPAL))

    assert redirect.method is PaymentMethod.PAYPAL
    assert redirect.url.endswith(redirect.session_id)
    assert paypal.calls == [payload]
    assert stripe.calls == []


async def test_provider_failure_is_returned_not_raised(payload):
    payments, stripe, _ = simulated()
    stripe.fail_with = "card_declined"

    failure = unwrap_err(await payments.create_session(payload, PaymentMethod.STRIPE))

    assert failure.kind is FailureKind.PROVIDER
    assert failure.message == "card_declined"
    assert failure.retryable


async def test_unregistered_method_is_rejected(payload):
    payments = dispatcher().on(PaymentMethod.STRIPE, SimulatedSessionCreator(PaymentMethod.STRIPE)).build()

    failure = unwrap_err(await payments.create_session(payload, PaymentMethod.PAYPAL))

    assert failure.kind is FailureKind.UNSUPPORTED_METHOD
    assert payments.supported_methods == (PaymentMethod.STRIPE,)


async def test_last_registration_wins(payload):
    first = SimulatedSessionCreator(PaymentMethod.STRIPE)
    second = SimulatedSessionCreator(PaymentMethod.STRIPE)
    payments = dispatcher().on(PaymentMethod.STRIPE, first).on(PaymentMethod.STRIPE, second).build()

    await payments.create_session(payload, PaymentMethod.STRIPE)

    assert first.calls == []
    assert len(second.calls) == 1


@pytest.mark.parametrize(
    "change",
    [
        {"items": ()},
        {"customer": CustomerContact("Ana", "not-an-email", "3001234567")},
        {"customer": CustomerContact("A", "ana@example.com", "3001234567")},
        {"items": (LineItem("P1", None, "Free", Decimal("0"), 1),)},
    ],
)
async def test_invalid_payload_never_reaches_a_provider(payload, change):
    payments, stripe, _ = simulated()

    failure = unwrap_err(await payments.create_session(replace(payload, **change), PaymentMethod.STRIPE))

    assert failure.kind is FailureKind.INVALID_PAYLOAD
    assert stripe.calls == []


class HangingCreator(SimulatedSessionCreator):
    async def create(self, payload):
        await asyncio.sleep(5)
        return await super().create(payload)


class CrashingCreator(SimulatedSessionCreator):
    async def create(self, payload):
        raise RuntimeError("boom")


async def test_provider_timeout_becomes_typed_failure(payload):
    payments = (
        dispatcher()
        .on(PaymentMethod.STRIPE, HangingCreator(PaymentMethod.STRIPE))
        .timeout(delta=timedelta(milliseconds=20))
        .build()
    )

    failure = unwrap_err(await payments.create_session(payload, PaymentMethod.STRIPE))

    assert failure.kind is FailureKind.TIMEOUT


async def test_creator_exception_is_contained(payload):
    payments = dispatcher().on(PaymentMethod.STRIPE, CrashingCreator(PaymentMethod.STRIPE)).build()

    failure = unwrap_err(await payments.create_session(payload, PaymentMethod.STRIPE))

    assert failure.kind is FailureKind.PROVIDER
    assert "boom" in failure.message


def test_methods_lists_registered_providers_with_fees():
    payments, _, _ = simulated()

    infos = payments.methods()

    assert [i.method for i in infos] == [PaymentMethod.STRIPE, PaymentMethod.PAYPAL]
    assert [i.fee_percent for i in infos] == [Decimal("2.9"), Decimal("3.4")]


def test_method_parsing():
    assert PaymentMethod.parse("Stripe") is PaymentMethod.STRIPE
    assert PaymentMethod.parse(" paypal ") is PaymentMethod.PAYPAL
    assert PaymentMethod.parse("bitcoin") is None


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP creators
# ═══════════════════════════════════════════════════════════════════════════════


async def test_stripe_creator_posts_normalized_cart_and_reads_redirect(payload):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "cs_123", "url": "https://checkout.stripe.test/cs_123"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        creator = StripeSessionCreator("https://shop.test/api/create-stripe-session", client)
        redirect = unwrap_ok(await creator.create(payload))

    assert redirect.session_id == "cs_123"
    assert redirect.url == "https://checkout.stripe.test/cs_123"
    assert seen["url"] == "https://shop.test/api/create-stripe-session"
    assert seen["body"]["email"] == "ana@example.com"
    assert seen["body"]["userId"] == "u-ana"
    assert seen["body"]["cartItems"][0] == {
        "id": "P1",
        "variantId": "P1-AZ-M",
        "name": "Camiseta",
        "price": 45000,
        "quantity": 2,
        "color": "Azul",
        "size": "M",
        "image": None,
    }
    assert seen["body"]["metadata"]["reference"] == "order_test"


async def test_paypal_creator_maps_order_and_approval_url(payload):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["amount"] == 122100
        assert body["currency"] == "COP"
        assert body["order_id"] == "order_test"
        return httpx.Response(200, json={"order_id": "PP-9", "approval_url": "https://paypal.test/approve/PP-9"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        redirect = unwrap_ok(await PayPalSessionCreator("https://shop.test/pp", client).create(payload))

    assert redirect.method is PaymentMethod.PAYPAL
    assert redirect.session_id == "PP-9"


async def test_http_error_body_is_surfaced(payload):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"success": False, "error": "Invalid amount"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        failure = unwrap_err(await PayPalSessionCreator("https://shop.test/pp", client).create(payload))

    assert failure.kind is FailureKind.PROVIDER
    assert failure.message == "Invalid amount"


async def test_transport_error_is_contained(payload):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        failure = unwrap_err(await StripeSessionCreator("https://shop.test/s", client).create(payload))

    assert failure.kind is FailureKind.TRANSPORT


async def test_success_response_without_url_is_a_failure(payload):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "cs_1"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        failure = unwrap_err(await StripeSessionCreator("https://shop.test/s", client).create(payload))

    assert failure.kind is FailureKind.PROVIDER
