"""
FastAPI surface over the stateless core operations.

Run yourself with uvicorn:

    app = create_app()                      # demo storefront
    app = create_app(seed_storefront(Settings.from_env()))
"""

import logging
import uuid

import fastapi
from kungfu import Ok, Error

from vitrina.cart import EMPTY_CART, AddLine, CartState, compute_totals, reduce
from vitrina.catalog import VariantNotFound, ProductNotFound
from vitrina.checkout import (
    CheckoutSession,
    Identity,
    build_payload,
    validate_shipping,
)
from vitrina.demo import Storefront, seed_storefront
from vitrina.payment import FailureKind, PaymentMethod
from vitrina.web._models import (
    CartIn,
    CheckoutIn,
    ColorOut,
    FieldErrorsOut,
    PaymentMethodOut,
    SessionOut,
    SizeOut,
    StockReportOut,
    TotalsOut,
    VariantOut,
)

logger = logging.getLogger(__name__)


def _cart_from(records: CartIn) -> CartState:
    """Replay posted lines through the reducer so duplicates merge and bounds hold."""
    state = EMPTY_CART
    for line in records.to_domain():
        match reduce(state, AddLine(line)):
            case Ok(next_state):
                state = next_state
            case Error(rejection):
                raise fastapi.HTTPException(422, detail=rejection.message)
    return state


def create_app(storefront: Storefront | None = None) -> fastapi.FastAPI:
    shop = storefront or seed_storefront()
    app = fastapi.FastAPI(title="vitrina", version="0.1.0")

    # ═══════════════════════════════════════════════════════════════════════════
    # Catalog
    # ═══════════════════════════════════════════════════════════════════════════

    @app.get("/products/{product_id}/colors")
    async def list_colors(product_id: str) -> list[ColorOut]:
        match await shop.resolver.list_colors(product_id):
            case Ok(colors):
                return [ColorOut.from_domain(c) for c in colors]
            case Error(e):
                raise fastapi.HTTPException(503, detail=e.message)

    @app.get("/products/{product_id}/sizes")
    async def list_sizes(product_id: str, color: str) -> list[SizeOut]:
        match await shop.resolver.list_sizes(product_id, color):
            case Ok(sizes):
                return [SizeOut.from_domain(s) for s in sizes]
            case Error(e):
                raise fastapi.HTTPException(503, detail=e.message)

    @app.get("/products/{product_id}/variant")
    async def resolve_variant(product_id: str, color: str, size: str) -> VariantOut:
        match await shop.resolver.resolve(product_id, color, size):
            case Ok(variant):
                return VariantOut.from_domain(variant)
            case Error(VariantNotFound() | ProductNotFound() as e):
                raise fastapi.HTTPException(404, detail=e.message)
            case Error(e):
                raise fastapi.HTTPException(503, detail=e.message)

    # ═══════════════════════════════════════════════════════════════════════════
    # Cart & stock
    # ═══════════════════════════════════════════════════════════════════════════

    @app.post("/cart/totals")
    async def cart_totals(body: CartIn) -> TotalsOut:
        state = _cart_from(body)
        return TotalsOut.from_domain(compute_totals(state.lines, shop.settings))

    @app.post("/stock/check")
    async def check_stock(body: CartIn) -> StockReportOut:
        match await shop.validator.check_batch(body.to_domain()):
            case Ok(report):
                return StockReportOut.from_domain(report)
            case Error(e):
                raise fastapi.HTTPException(503, detail=e.message)

    # ═══════════════════════════════════════════════════════════════════════════
    # Payment
    # ═══════════════════════════════════════════════════════════════════════════

    @app.get("/payments/methods")
    async def payment_methods() -> list[PaymentMethodOut]:
        return [PaymentMethodOut.from_domain(m) for m in shop.payments.methods()]

    @app.post("/checkout/session")
    async def create_checkout_session(body: CheckoutIn) -> SessionOut:
        method = PaymentMethod.parse(body.method)
        if method is None or not shop.payments.supports(method):
            raise fastapi.HTTPException(422, detail=f"Unsupported payment method: {body.method}")

        match validate_shipping(body.shipping.to_domain()):
            case Ok(shipping):
                pass
            case Error(invalid):
                raise fastapi.HTTPException(
                    422, detail=FieldErrorsOut.from_domain(invalid).model_dump()
                )

        state = _cart_from(CartIn(lines=body.lines))

        match await shop.validator.check_batch(state.lines):
            case Ok(report) if not report.is_clean:
                raise fastapi.HTTPException(409, detail=report.messages())
            case Ok(_):
                pass
            case Error(e):
                raise fastapi.HTTPException(503, detail=e.message)

        session = CheckoutSession(
            identity=Identity(body.user_id, shipping.name, shipping.email, shipping.phone),
            shipping=shipping,
            reference=f"order_{uuid.uuid4().hex[:20]}",
            method=method,
        )
        payload = build_payload(session, state.lines, shop.settings)

        match await shop.payments.create_session(payload, method):
            case Ok(redirect):
                return SessionOut.from_domain(redirect)
            case Error(failure):
                status = 504 if failure.kind is FailureKind.TIMEOUT else 402
                raise fastapi.HTTPException(status, detail=failure.message)

    return app


__all__ = ("create_app",)
