import asyncio
from datetime import timedelta

import pytest

from support import make_line, unwrap_err, unwrap_ok

from vitrina.checkout import (
    CheckoutOrchestrator,
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
    ValidationFailed,
    WrongStep,
    validate_shipping,
)
from vitrina.demo import DEMO_USER
from vitrina.inventory import StockCheckFailed, StockValidator
from vitrina.payment import (
    EMAIL_RE,
    FailureKind,
    PaymentMethod,
    PaymentSessionFailed,
    SimulatedSessionCreator,
    dispatcher,
)

ADDRESS = {
    "address": "Calle 10 # 5-20",
    "city": "Bogotá",
    "region": "Cundinamarca",
    "postal_code": "110111",
}


class GatedCreator(SimulatedSessionCreator):
    """Holds every call until released."""

    def __init__(self, method):
        super().__init__(method)
        self.release = asyncio.Event()
        self.started = asyncio.Event()

    async def create(self, payload):
        self.started.set()
        await self.release.wait()
        return await super().create(payload)


class GatedInventory:
    """Holds every stock query until released."""

    def __init__(self, inner):
        self.inner = inner
        self.release = asyncio.Event()
        self.started = asyncio.Event()

    async def stock_levels(self, ids):
        self.started.set()
        await self.release.wait()
        return await self.inner.stock_levels(ids)


@pytest.fixture
def provider():
    return SimulatedSessionCreator(PaymentMethod.STRIPE)


@pytest.fixture
def flow(shop, store, provider):
    payments = dispatcher().on(PaymentMethod.STRIPE, provider).build()
    return CheckoutOrchestrator(store, shop.validator, payments, shop.settings)


@pytest.fixture
async def filled(store):
    await store.add(make_line("P1", "P1-AZ-M", quantity=2, stock=5))
    return store


async def at_confirm(flow):
    flow.begin(DEMO_USER)
    flow.update_shipping(**ADDRESS)
    unwrap_ok(await flow.advance())
    unwrap_ok(flow.select_method(PaymentMethod.STRIPE))
    return unwrap_ok(await flow.advance())


# ═══════════════════════════════════════════════════════════════════════════════
# Begin
# ═══════════════════════════════════════════════════════════════════════════════


async def test_guest_cannot_check_out(flow, filled):
    assert isinstance(unwrap_err(flow.begin(None)), IdentityRequired)
    assert flow.session is None


def test_empty_cart_cannot_check_out(flow):
    assert isinstance(unwrap_err(flow.begin(DEMO_USER)), EmptyCart)


async def test_begin_prefills_contact_from_identity(flow, filled):
    session = unwrap_ok(flow.begin(DEMO_USER))

    assert session.step is Step.SHIPPING
    assert session.shipping.name == "Ana Pérez"
    assert session.shipping.email == "ana@example.com"
    assert session.shipping.phone == "3001234567"
    assert session.shipping.country == "Colombia"


async def test_reentering_with_the_same_identity_keeps_the_typed_form(flow, filled):
    first = unwrap_ok(flow.begin(DEMO_USER))
    flow.update_shipping(**ADDRESS)

    again = unwrap_ok(flow.begin(DEMO_USER))

    assert again.reference == first.reference
    assert again.shipping.address == ADDRESS["address"]

    other = Identity("u-luis", "Luis Gómez", "luis@example.com", "3109876543")
    fresh = unwrap_ok(flow.begin(other))
    assert fresh.reference != first.reference
    assert fresh.shipping.address == ""


async def test_operations_without_session_fail(flow):
    assert isinstance(unwrap_err(await flow.advance()), NoCheckoutSession)
    assert isinstance(unwrap_err(flow.back()), NoCheckoutSession)
    assert isinstance(unwrap_err(await flow.submit()), NoCheckoutSession)


# ═══════════════════════════════════════════════════════════════════════════════
# Shipping → Payment
# ═══════════════════════════════════════════════════════════════════════════════


async def test_invalid_form_keeps_shipping_with_field_errors(flow, filled, shop):
    flow.begin(DEMO_USER)
    flow.update_shipping(address="Cl", city="Bogotá", region="Cundinamarca", postal_code="11")

    error = unwrap_err(await flow.advance())

    assert isinstance(error, ValidationFailed)
    assert error.for_field("address") == "Address must be at least 5 characters"
    assert error.for_field("postal_code") is not None
    assert flow.step is Step.SHIPPING
    assert flow.last_error == error
    assert shop.inventory.queries == []


async def test_stock_drop_blocks_leaving_shipping_and_names_the_line(flow, filled, shop):
    flow.begin(DEMO_USER)
    flow.update_shipping(**ADDRESS)
    shop.inventory.set_stock("P1-AZ-M", 1)

    error = unwrap_err(await flow.advance())

    assert isinstance(error, StockShortfall)
    [short] = error.report.shortfalls
    assert (short.requested, short.available, short.is_available) == (2, 1, False)
    assert "only 1 available" in error.message
    assert flow.step is Step.SHIPPING


async def test_fixing_a_shortfall_clamps_the_cart_and_lets_checkout_proceed(flow, filled, shop):
    flow.begin(DEMO_USER)
    flow.update_shipping(**ADDRESS)
    shop.inventory.set_stock("P1-AZ-M", 1)
    await flow.advance()

    unwrap_ok(await flow.apply_available_stock())

    assert filled.lines[0].quantity == 1
    assert unwrap_ok(await flow.advance()).step is Step.PAYMENT


async def test_inventory_outage_blocks_with_typed_error(store, filled, provider):
    class Down:
        async def stock_levels(self, ids):
            raise ConnectionError("down")

    payments = dispatcher().on(PaymentMethod.STRIPE, provider).build()
    flow = CheckoutOrchestrator(store, StockValidator(Down()), payments)
    flow.begin(DEMO_USER)
    flow.update_shipping(**ADDRESS)

    assert isinstance(unwrap_err(await flow.advance()), StockCheckFailed)
    assert flow.step is Step.SHIPPING


async def test_valid_form_and_clean_stock_move_to_payment_with_trimmed_fields(flow, filled):
    flow.begin(DEMO_USER)
    flow.update_shipping(**{**ADDRESS, "city": "  Bogotá  "})

    session = unwrap_ok(await flow.advance())

    assert session.step is Step.PAYMENT
    assert session.shipping.city == "Bogotá"


def gated_flow(shop, store, provider):
    gate = GatedInventory(shop.inventory)
    payments = dispatcher().on(PaymentMethod.STRIPE, provider).build()
    return gate, CheckoutOrchestrator(store, StockValidator(gate), payments, shop.settings)


async def test_shipping_edits_made_during_the_stock_check_are_kept(shop, store, filled, provider):
    gate, flow = gated_flow(shop, store, provider)
    flow.begin(DEMO_USER)
    flow.update_shipping(**ADDRESS)

    moving = asyncio.create_task(flow.advance())
    await gate.started.wait()
    flow.update_shipping(city="  Medellín ")
    gate.release.set()
    session = unwrap_ok(await moving)

    assert session.step is Step.PAYMENT
    assert session.shipping.city == "Medellín"
    assert flow.session.shipping.city == "Medellín"


async def test_invalid_edit_during_the_stock_check_stays_on_shipping(shop, store, filled, provider):
    gate, flow = gated_flow(shop, store, provider)
    flow.begin(DEMO_USER)
    flow.update_shipping(**ADDRESS)

    moving = asyncio.create_task(flow.advance())
    await gate.started.wait()
    flow.update_shipping(city="M")
    gate.release.set()
    error = unwrap_err(await moving)

    assert isinstance(error, ValidationFailed)
    assert error.for_field("city") == "City must be at least 2 characters"
    assert flow.step is Step.SHIPPING
    assert flow.session.shipping.city == "M"


async def test_cancel_during_the_stock_check_abandons_the_transition(shop, store, filled, provider):
    gate, flow = gated_flow(shop, store, provider)
    flow.begin(DEMO_USER)
    flow.update_shipping(**ADDRESS)

    moving = asyncio.create_task(flow.advance())
    await gate.started.wait()
    flow.cancel()
    gate.release.set()

    assert isinstance(unwrap_err(await moving), NoCheckoutSession)
    assert flow.session is None
    assert filled.state.item_count == 2


# ═══════════════════════════════════════════════════════════════════════════════
# Payment → Confirm, back
# ═══════════════════════════════════════════════════════════════════════════════


async def test_confirm_requires_a_supported_method(flow, filled):
    flow.begin(DEMO_USER)
    flow.update_shipping(**ADDRESS)
    await flow.advance()

    assert isinstance(unwrap_err(await flow.advance()), NoPaymentMethodSelected)
    assert isinstance(unwrap_err(flow.select_method("paypal")), UnsupportedPaymentMethod)
    assert isinstance(unwrap_err(flow.select_method("cash")), UnsupportedPaymentMethod)
    assert flow.step is Step.PAYMENT

    flow.select_method("stripe")
    assert unwrap_ok(await flow.advance()).step is Step.CONFIRM


async def test_back_never_loses_data_and_skips_validation(flow, filled):
    await at_confirm(flow)

    unwrap_ok(flow.back())
    session = unwrap_ok(flow.back())

    assert session.step is Step.SHIPPING
    assert session.shipping.address == ADDRESS["address"]
    assert session.method is PaymentMethod.STRIPE
    assert unwrap_ok(flow.back()).step is Step.SHIPPING


async def test_advance_from_confirm_is_not_a_transition(flow, filled):
    await at_confirm(flow)
    assert isinstance(unwrap_err(await flow.advance()), WrongStep)


# ═══════════════════════════════════════════════════════════════════════════════
# Submit
# ═══════════════════════════════════════════════════════════════════════════════


async def test_submit_outside_confirm_is_refused(flow, filled, provider):
    flow.begin(DEMO_USER)
    assert isinstance(unwrap_err(await flow.submit()), WrongStep)
    assert provider.calls == []


async def test_successful_submit_redirects_clears_cart_and_discards_session(flow, filled, provider):
    await at_confirm(flow)

    redirect = unwrap_ok(await flow.submit())

    assert redirect.method is PaymentMethod.STRIPE
    assert filled.state.is_empty
    assert flow.session is None
    assert not flow.in_flight
    [payload] = provider.calls
    assert payload.customer.email == "ana@example.com"
    assert payload.items[0].quantity == 2
    assert payload.total == payload.subtotal + payload.tax + payload.shipping


async def test_stock_is_rechecked_right_before_payment(flow, filled, shop, provider):
    await at_confirm(flow)
    shop.inventory.set_stock("P1-AZ-M", 0)

    error = unwrap_err(await flow.submit())

    assert isinstance(error, StockShortfall)
    assert provider.calls == []
    assert not flow.in_flight
    assert flow.step is Step.CONFIRM


async def test_failed_payment_keeps_form_and_cart_for_retry(flow, filled, provider):
    await at_confirm(flow)
    provider.fail_with = "card_declined"

    error = unwrap_err(await flow.submit())

    assert isinstance(error, PaymentSessionFailed)
    assert not flow.in_flight
    assert flow.session.shipping.address == ADDRESS["address"]
    assert filled.state.item_count == 2

    provider.fail_with = None
    unwrap_ok(await flow.submit())
    assert len(provider.calls) == 2


async def test_double_submit_starts_only_one_payment_session(shop, store, filled):
    gated = GatedCreator(PaymentMethod.STRIPE)
    payments = dispatcher().on(PaymentMethod.STRIPE, gated).build()
    flow = CheckoutOrchestrator(store, shop.validator, payments, shop.settings)
    await at_confirm(flow)

    first = asyncio.create_task(flow.submit())
    await gated.started.wait()
    assert flow.in_flight

    second = await flow.submit()
    gated.release.set()
    outcome = await first

    assert isinstance(unwrap_err(second), SubmissionInProgress)
    unwrap_ok(outcome)
    assert len(gated.calls) == 1
    assert not flow.in_flight


async def test_lines_added_while_the_provider_answers_stay_in_the_cart(shop, store, filled):
    gated = GatedCreator(PaymentMethod.STRIPE)
    payments = dispatcher().on(PaymentMethod.STRIPE, gated).build()
    flow = CheckoutOrchestrator(store, shop.validator, payments, shop.settings)
    await at_confirm(flow)

    submitting = asyncio.create_task(flow.submit())
    await gated.started.wait()
    await store.add(make_line("P3", None, quantity=1, price="35000"))
    gated.release.set()
    unwrap_ok(await submitting)

    assert [line.line_id for line in store.lines] == ["P3"]
    [payload] = gated.calls
    assert [item.product_id for item in payload.items] == ["P1"]


async def test_payment_timeout_releases_the_guard(shop, store, filled):
    gated = GatedCreator(PaymentMethod.STRIPE)
    payments = (
        dispatcher()
        .on(PaymentMethod.STRIPE, gated)
        .timeout(delta=timedelta(milliseconds=20))
        .build()
    )
    flow = CheckoutOrchestrator(store, shop.validator, payments, shop.settings)
    await at_confirm(flow)

    error = unwrap_err(await flow.submit())

    assert error.kind is FailureKind.TIMEOUT
    assert not flow.in_flight
    assert flow.step is Step.CONFIRM


async def test_cancel_discards_session_but_keeps_cart(flow, filled):
    await at_confirm(flow)

    flow.cancel()

    assert flow.session is None
    assert filled.state.item_count == 2


# ═══════════════════════════════════════════════════════════════════════════════
# Field rules
# ═══════════════════════════════════════════════════════════════════════════════


def test_shipping_rules_report_every_failing_field():
    error = unwrap_err(validate_shipping(ShippingDetails(email="nope", phone="123")))

    fields = {e.field for e in error.errors}
    assert fields == {"name", "email", "phone", "address", "city", "region", "postal_code"}
    assert error.for_field("email") == "Email is not valid"


def test_complete_shipping_passes():
    identity = Identity("u1", "Ana Pérez", "ana@example.com", "3001234567")
    details = ShippingDetails(
        name=identity.name,
        email=identity.email,
        phone=identity.phone,
        **ADDRESS,
    )

    assert unwrap_ok(validate_shipping(details)) == details


@pytest.mark.parametrize("email", ["ana@example.com", "ana@example", "ana pérez@example.com"])
def test_shipping_email_rule_is_the_payment_email_rule(email):
    error = unwrap_err(validate_shipping(ShippingDetails(email=email)))

    assert (error.for_field("email") is None) == bool(EMAIL_RE.match(email))
