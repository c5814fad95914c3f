"""
vitrina — cart & checkout consistency engine for a storefront.

    from vitrina import catalog as CT    # Variant resolution
    from vitrina import cart as K        # Stock-bounded, persisted cart
    from vitrina import inventory as INV # Live stock re-validation
    from vitrina import payment as P     # Provider session dispatch
    from vitrina import checkout as CO   # Gated checkout flow
"""

from vitrina import catalog
from vitrina import cart
from vitrina import inventory
from vitrina import payment
from vitrina import checkout
from vitrina import lift
from vitrina.config import Settings
from vitrina._types import (
    ProductId,
    VariantId,
    LineId,
    Money,
)

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "cart",
    "inventory",
    "payment",
    "checkout",
    "lift",
    "Settings",
    "ProductId",
    "VariantId",
    "LineId",
    "Money",
)
