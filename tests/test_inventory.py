import asyncio
from datetime import timedelta

from support import make_line, unwrap_err, unwrap_ok

from vitrina.inventory import MemoryInventory, StockCheckFailed, StockValidator


async def test_quantities_equal_to_live_stock_are_clean():
    inventory = MemoryInventory({"P1-AZ-M": 2, "P2-AZ-32": 1})
    lines = [
        make_line(quantity=2),
        make_line("P2", "P2-AZ-32", quantity=1),
    ]

    report = unwrap_ok(await StockValidator(inventory).check_batch(lines))

    assert report.is_clean
    assert report.shortfalls == ()


async def test_one_line_dropping_below_request_flips_the_batch():
    inventory = MemoryInventory({"P1-AZ-M": 2, "P2-AZ-32": 1})
    lines = [make_line(quantity=2), make_line("P2", "P2-AZ-32", quantity=1)]
    validator = StockValidator(inventory)

    inventory.set_stock("P2-AZ-32", 0)
    report = unwrap_ok(await validator.check_batch(lines))

    assert not report.is_clean
    assert [r.line_id for r in report.shortfalls] == ["P2:P2-AZ-32"]
    assert report.results[0].is_available


async def test_live_stock_not_captured_stock_is_compared():
    # Captured stock 5, live stock 1
    line = make_line("P1", "P1-AZ-M", quantity=2, stock=5, color="Azul", size="M")
    inventory = MemoryInventory({"P1-AZ-M": 1})

    report = unwrap_ok(await StockValidator(inventory).check_batch([line]))

    [result] = report.results
    assert result.requested == 2
    assert result.available == 1
    assert result.is_available is False
    assert report.messages() == ["Product P1 (Azul/M): requested 2, only 1 available"]


async def test_lines_without_variant_are_always_available():
    inventory = MemoryInventory()
    report = unwrap_ok(await StockValidator(inventory).check_batch([make_line("P3", None, 99)]))

    assert report.is_clean
    assert inventory.queries == []


async def test_variant_unknown_to_inventory_counts_as_zero():
    report = unwrap_ok(await StockValidator(MemoryInventory()).check_batch([make_line()]))

    assert report.results[0].available == 0
    assert not report.is_clean


async def test_one_batched_query_per_check():
    inventory = MemoryInventory({"a": 5, "b": 5})
    lines = [make_line("P1", "a"), make_line("P2", "b"), make_line("P3", "a")]

    await StockValidator(inventory).check_batch(lines)

    assert inventory.queries == [("a", "b")]


async def test_available_by_line_feeds_reconciliation():
    inventory = MemoryInventory({"P1-AZ-M": 1})
    lines = [make_line(quantity=2), make_line("P3", None)]

    report = unwrap_ok(await StockValidator(inventory).check_batch(lines))

    assert report.available_by_line() == {"P1:P1-AZ-M": 1}


class BrokenInventory:
    async def stock_levels(self, variant_ids):
        raise ConnectionError("inventory down")


class SlowInventory:
    async def stock_levels(self, variant_ids):
        await asyncio.sleep(5)
        return {}


async def test_inventory_failure_is_a_typed_error():
    error = unwrap_err(await StockValidator(BrokenInventory()).check_batch([make_line()]))

    assert isinstance(error, StockCheckFailed)
    assert "inventory down" in error.message


async def test_slow_inventory_times_out():
    validator = StockValidator(SlowInventory(), timeout=timedelta(milliseconds=20))

    error = unwrap_err(await validator.check_batch([make_line()]))

    assert error.timed_out
