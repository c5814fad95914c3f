"""
Core types for vitrina.

Identifier and money aliases shared by every component.
"""

from __future__ import annotations

from decimal import Decimal

# ═══════════════════════════════════════════════════════════════════════════════
# Identity & Money
# ═══════════════════════════════════════════════════════════════════════════════

type ProductId = str
"""Opaque product identifier issued by the catalog."""

type VariantId = str
"""Opaque variant identifier issued by the catalog."""

type LineId = str
"""Derived cart line identity, stable for the lifetime of the line."""

type Money = Decimal
"""Amount in the store currency. Never a float."""

ZERO: Decimal = Decimal(0)

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ProductId",
    "VariantId",
    "LineId",
    "Money",
    "ZERO",
)
