"""
Cart totals — derived values, recomputed on every read and never stored.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from vitrina._types import ZERO
from vitrina.config import Settings
from vitrina.cart._types import CartLine


@dataclass(frozen=True, slots=True)
class CartTotals:
    item_count: int
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    missing_for_free_shipping: Decimal = ZERO

    @property
    def free_shipping(self) -> bool:
        return self.item_count > 0 and self.shipping == ZERO


EMPTY_TOTALS = CartTotals(0, ZERO, ZERO, ZERO, ZERO)


def compute_totals(lines: Iterable[CartLine], settings: Settings | None = None) -> CartTotals:
    """
    subtotal = Σ (base price + variant delta) × quantity
    tax      = subtotal × tax_rate, rounded half-up to the money quantum
    shipping = 0 when subtotal is strictly above the threshold, else the flat fee
    total    = subtotal + tax + shipping

    An empty cart totals to zero everywhere (no shipping fee on nothing).
    """
    cfg = settings or Settings()
    lines = tuple(lines)
    if not lines:
        return EMPTY_TOTALS

    item_count = sum(line.quantity for line in lines)
    subtotal = sum((line.line_total for line in lines), ZERO)
    tax = (subtotal * cfg.tax_rate).quantize(cfg.money_quantum, rounding=ROUND_HALF_UP)

    if subtotal > cfg.free_shipping_threshold:
        shipping = ZERO
        missing = ZERO
    else:
        shipping = cfg.shipping_fee
        # One more unit of currency tips it over the strict threshold
        missing = cfg.free_shipping_threshold - subtotal + cfg.money_quantum

    return CartTotals(
        item_count=item_count,
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
        missing_for_free_shipping=missing,
    )


__all__ = (
    "CartTotals",
    "EMPTY_TOTALS",
    "compute_totals",
)
