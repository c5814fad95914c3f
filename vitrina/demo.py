"""
Demo storefront — seeded in-memory collaborators.

Used by the CLI and the web app when no real catalog is wired in. Prices in COP.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from vitrina.catalog import MemoryCatalog, Product, Variant, VariantCache, VariantResolver
from vitrina.checkout import Identity
from vitrina.config import Settings
from vitrina.inventory import MemoryInventory, StockValidator
from vitrina.payment import (
    PaymentDispatcher,
    PaymentMethod,
    SimulatedSessionCreator,
    dispatcher,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Seed Data
# ═══════════════════════════════════════════════════════════════════════════════

PRODUCTS = (
    Product("P1", "Camiseta Básica", Decimal("45000"), ("/img/p1.jpg",), "men"),
    Product("P2", "Jean Slim", Decimal("120000"), ("/img/p2.jpg",), "women"),
    Product("P3", "Gorra Clásica", Decimal("35000"), ("/img/p3.jpg",), "accessories"),
    Product("P4", "Tenis Urbanos", Decimal("210000"), ("/img/p4.jpg",), "shoes"),
)

VARIANTS = (
    Variant("P1-AZ-S", "P1", "Azul", "S", 4, image="/img/p1-azul.jpg"),
    Variant("P1-AZ-M", "P1", "Azul", "M", 5, image="/img/p1-azul.jpg"),
    Variant("P1-AZ-L", "P1", "Azul", "L", 0),
    Variant("P1-NE-M", "P1", "Negro", "M", 2, Decimal("5000")),
    Variant("P1-NE-XL", "P1", "Negro", "XL", 1, Decimal("5000")),
    Variant("P2-AZ-30", "P2", "Azul", "30", 3),
    Variant("P2-AZ-32", "P2", "Azul", "32", 6),
    Variant("P2-GR-32", "P2", "Gris", "32", 2, Decimal("-10000"), image="/img/p2-gris.jpg"),
    Variant("P4-BL-40", "P4", "Blanco", "40", 2),
    Variant("P4-BL-42", "P4", "Blanco", "42", 1),
)
# P3 has no variants: legacy product, always available

DEMO_USER = Identity(
    user_id="u-ana",
    name="Ana Pérez",
    email="ana@example.com",
    phone="3001234567",
)


@dataclass(frozen=True, slots=True)
class Storefront:
    """Everything a front end needs, wired together."""

    catalog: MemoryCatalog
    inventory: MemoryInventory
    resolver: VariantResolver
    validator: StockValidator
    payments: PaymentDispatcher
    settings: Settings


def seed_storefront(settings: Settings | None = None) -> Storefront:
    cfg = settings or Settings()
    catalog = MemoryCatalog(PRODUCTS, VARIANTS)
    inventory = MemoryInventory.from_variants(VARIANTS)
    payments = (
        dispatcher()
        .on(PaymentMethod.STRIPE, SimulatedSessionCreator(PaymentMethod.STRIPE))
        .on(PaymentMethod.PAYPAL, SimulatedSessionCreator(PaymentMethod.PAYPAL))
        .timeout(delta=cfg.payment_timeout)
        .build()
    )
    return Storefront(
        catalog=catalog,
        inventory=inventory,
        resolver=VariantResolver(catalog, VariantCache(max_size=100)),
        validator=StockValidator(inventory, timeout=cfg.stock_check_timeout),
        payments=payments,
        settings=cfg,
    )


__all__ = (
    "PRODUCTS",
    "VARIANTS",
    "DEMO_USER",
    "Storefront",
    "seed_storefront",
)
