"""
Inventory — live stock re-validation.

    from vitrina import inventory as INV

    validator = INV.StockValidator(INV.MemoryInventory({"v1": 3}))
    report = await validator.check_batch(store.lines)
"""

from vitrina.inventory._types import StockCheckResult, StockReport, StockCheckFailed
from vitrina.inventory._source import InventorySource, MemoryInventory
from vitrina.inventory._validator import StockValidator, build_report

__all__ = (
    "StockCheckResult",
    "StockReport",
    "StockCheckFailed",
    "InventorySource",
    "MemoryInventory",
    "StockValidator",
    "build_report",
)
