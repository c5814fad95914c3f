"""
Build the normalized provider payload from a checkout session and cart lines.
"""

from __future__ import annotations

from collections.abc import Iterable

from vitrina.cart import CartLine, compute_totals
from vitrina.config import Settings
from vitrina.payment import (
    CheckoutPayload,
    CustomerContact,
    LineItem,
    ShippingAddress,
)
from vitrina.checkout._types import CheckoutSession


def line_items(lines: Iterable[CartLine]) -> tuple[LineItem, ...]:
    return tuple(
        LineItem(
            product_id=line.product.product_id,
            variant_id=line.variant.id if line.variant else None,
            name=line.product.name,
            unit_price=line.unit_price,
            quantity=line.quantity,
            color=line.variant.color if line.variant else None,
            size=line.variant.size if line.variant else None,
            image=line.product.image,
        )
        for line in lines
    )


def build_payload(
    session: CheckoutSession,
    lines: Iterable[CartLine],
    settings: Settings,
) -> CheckoutPayload:
    lines = tuple(lines)
    totals = compute_totals(lines, settings)
    ship = session.shipping
    return CheckoutPayload(
        reference=session.reference,
        items=line_items(lines),
        customer=CustomerContact(name=ship.name, email=ship.email, phone=ship.phone),
        address=ShippingAddress(
            address=ship.address,
            city=ship.city,
            region=ship.region,
            postal_code=ship.postal_code,
            country=ship.country,
        ),
        user_id=session.identity.user_id,
        currency=settings.currency,
        subtotal=totals.subtotal,
        tax=totals.tax,
        shipping=totals.shipping,
        total=totals.total,
        metadata={
            "item_count": str(totals.item_count),
            "method": session.method.value if session.method else "",
        },
    )


__all__ = (
    "build_payload",
    "line_items",
)
