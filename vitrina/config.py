"""
Settings — pricing, storage and collaborator configuration.

Fluent builder pattern, same as every other policy object in vitrina:

    settings = (
        Settings()
        .with_pricing(tax_rate=Decimal("0.19"), shipping_fee=Decimal("15000"))
        .with_timeouts(stock=timedelta(seconds=5))
    )

Or read once at startup:

    settings = Settings.from_env()   # VITRINA_* variables, defaults otherwise
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import timedelta
from decimal import Decimal, InvalidOperation

ENV_PREFIX = "VITRINA_"


# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Engine configuration.

    Note: Immutable — each with_* method returns new Settings.

    Pricing defaults are the storefront's: IVA 19%, free shipping strictly
    above 200 000 COP, otherwise a flat 15 000 COP fee.
    """

    tax_rate: Decimal = Decimal("0.19")
    free_shipping_threshold: Decimal = Decimal("200000")
    shipping_fee: Decimal = Decimal("15000")
    currency: str = "COP"
    money_quantum: Decimal = Decimal("1")

    storage_key: str = "vitrina:cart"

    # None disables the bound
    stock_check_timeout: timedelta | None = timedelta(seconds=10)
    payment_timeout: timedelta | None = timedelta(seconds=30)

    stripe_endpoint: str = "http://localhost:3000/api/create-stripe-session"
    paypal_endpoint: str = "http://localhost:3000/api/payments/paypal"

    def with_pricing(
        self,
        *,
        tax_rate: Decimal | None = None,
        free_shipping_threshold: Decimal | None = None,
        shipping_fee: Decimal | None = None,
        currency: str | None = None,
    ) -> Settings:
        """
        Override pricing knobs; omitted ones keep their value.

        Example:
            .with_pricing(tax_rate=Decimal("0.08"), currency="USD")
        """
        return replace(
            self,
            tax_rate=self.tax_rate if tax_rate is None else tax_rate,
            free_shipping_threshold=(
                self.free_shipping_threshold
                if free_shipping_threshold is None
                else free_shipping_threshold
            ),
            shipping_fee=self.shipping_fee if shipping_fee is None else shipping_fee,
            currency=self.currency if currency is None else currency,
        )

    def with_storage_key(self, key: str) -> Settings:
        return replace(self, storage_key=key)

    def with_timeouts(
        self,
        *,
        stock: timedelta | None = None,
        payment: timedelta | None = None,
    ) -> Settings:
        """Override collaborator timeouts. Use without_timeouts() to disable them."""
        return replace(
            self,
            stock_check_timeout=self.stock_check_timeout if stock is None else stock,
            payment_timeout=self.payment_timeout if payment is None else payment,
        )

    def without_timeouts(self) -> Settings:
        return replace(self, stock_check_timeout=None, payment_timeout=None)

    def with_endpoints(
        self,
        *,
        stripe: str | None = None,
        paypal: str | None = None,
    ) -> Settings:
        return replace(
            self,
            stripe_endpoint=stripe or self.stripe_endpoint,
            paypal_endpoint=paypal or self.paypal_endpoint,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from VITRINA_* variables.

        Absent variables keep defaults. Malformed values raise ValueError,
        so a bad deployment fails at startup instead of mid-checkout.

        Recognized:
            VITRINA_TAX_RATE, VITRINA_FREE_SHIPPING_THRESHOLD,
            VITRINA_SHIPPING_FEE, VITRINA_CURRENCY, VITRINA_STORAGE_KEY,
            VITRINA_STOCK_CHECK_TIMEOUT, VITRINA_PAYMENT_TIMEOUT (seconds, 0 = off),
            VITRINA_STRIPE_ENDPOINT, VITRINA_PAYPAL_ENDPOINT
        """
        env = os.environ if environ is None else environ
        base = cls()

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value is not None and value.strip() else None

        return cls(
            tax_rate=_decimal(get("TAX_RATE"), base.tax_rate, "TAX_RATE"),
            free_shipping_threshold=_decimal(
                get("FREE_SHIPPING_THRESHOLD"),
                base.free_shipping_threshold,
                "FREE_SHIPPING_THRESHOLD",
            ),
            shipping_fee=_decimal(get("SHIPPING_FEE"), base.shipping_fee, "SHIPPING_FEE"),
            currency=(get("CURRENCY") or base.currency).upper(),
            money_quantum=base.money_quantum,
            storage_key=get("STORAGE_KEY") or base.storage_key,
            stock_check_timeout=_seconds(
                get("STOCK_CHECK_TIMEOUT"), base.stock_check_timeout, "STOCK_CHECK_TIMEOUT"
            ),
            payment_timeout=_seconds(
                get("PAYMENT_TIMEOUT"), base.payment_timeout, "PAYMENT_TIMEOUT"
            ),
            stripe_endpoint=get("STRIPE_ENDPOINT") or base.stripe_endpoint,
            paypal_endpoint=get("PAYPAL_ENDPOINT") or base.paypal_endpoint,
        )


def _decimal(raw: str | None, default: Decimal, name: str) -> Decimal:
    if raw is None:
        return default
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{ENV_PREFIX}{name}: not a decimal: {raw!r}") from None
    if value < 0:
        raise ValueError(f"{ENV_PREFIX}{name}: must be non-negative, got {raw!r}")
    return value


def _seconds(raw: str | None, default: timedelta | None, name: str) -> timedelta | None:
    if raw is None:
        return default
    try:
        seconds = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name}: not a number of seconds: {raw!r}") from None
    if seconds < 0:
        raise ValueError(f"{ENV_PREFIX}{name}: must be non-negative, got {raw!r}")
    return timedelta(seconds=seconds) if seconds > 0 else None


__all__ = (
    "Settings",
    "ENV_PREFIX",
)
