"""
Cart — stock-bounded, persisted cart state.

    from vitrina import cart as K

    store = K.CartStore(K.FileCartStorage(path))
    await store.hydrate()
    await store.add(K.CartLine.of(product, variant, quantity=2))
    store.totals   # CartTotals(item_count=2, subtotal=..., tax=..., shipping=..., total=...)

The reducer is usable on its own:

    match K.reduce(K.EMPTY_CART, K.AddLine(line)):
        case Ok(state): ...
"""

from vitrina.cart._types import (
    ProductSnapshot,
    VariantRef,
    CartLine,
    CartState,
    EMPTY_CART,
    line_id_for,
    AddLine,
    UpdateQuantity,
    RemoveLine,
    ClearCart,
    ToggleCart,
    OpenCart,
    CloseCart,
    ReconcileStock,
    CartCommand,
    InvalidLine,
    StockExceeded,
    CartRejection,
    StorageCorrupt,
    StorageError,
)
from vitrina.cart._reduce import reduce, validate_line
from vitrina.cart._totals import CartTotals, EMPTY_TOTALS, compute_totals
from vitrina.cart._codec import (
    CartLineRecord,
    VariantRecord,
    encode_lines,
    decode_lines,
)
from vitrina.cart._storage import (
    CartStorage,
    MemoryCartStorage,
    FileCartStorage,
    SQLAlchemyCartStorage,
    CartBlobTable,
    create_database,
)
from vitrina.cart._store import CartStore, Listener

__all__ = (
    # Types
    "ProductSnapshot",
    "VariantRef",
    "CartLine",
    "CartState",
    "EMPTY_CART",
    "line_id_for",
    # Commands
    "AddLine",
    "UpdateQuantity",
    "RemoveLine",
    "ClearCart",
    "ToggleCart",
    "OpenCart",
    "CloseCart",
    "ReconcileStock",
    "CartCommand",
    # Rejections
    "InvalidLine",
    "StockExceeded",
    "CartRejection",
    "StorageCorrupt",
    "StorageError",
    # Reducer & totals
    "reduce",
    "validate_line",
    "CartTotals",
    "EMPTY_TOTALS",
    "compute_totals",
    # Codec
    "CartLineRecord",
    "VariantRecord",
    "encode_lines",
    "decode_lines",
    # Storage
    "CartStorage",
    "MemoryCartStorage",
    "FileCartStorage",
    "SQLAlchemyCartStorage",
    "CartBlobTable",
    "create_database",
    # Store
    "CartStore",
    "Listener",
)
