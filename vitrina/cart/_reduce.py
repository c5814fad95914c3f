"""
Cart reducer — pure transition `(state, command) → Result[state', rejection]`.

No I/O and no mutation: a rejected command returns Error and the caller keeps
the previous state untouched.

    state = EMPTY_CART
    match reduce(state, AddLine(line)):
        case Ok(next_state):
            state = next_state
        case Error(StockExceeded(available=n)):
            print(f"only {n} left")
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace

from kungfu import Result, Ok, Error

from vitrina._types import LineId
from vitrina.cart._types import (
    AddLine,
    CartCommand,
    CartLine,
    CartRejection,
    CartState,
    ClearCart,
    CloseCart,
    InvalidLine,
    OpenCart,
    ReconcileStock,
    RemoveLine,
    StockExceeded,
    ToggleCart,
    UpdateQuantity,
)


def reduce(state: CartState, command: CartCommand) -> Result[CartState, CartRejection]:
    match command:
        case AddLine(line):
            return _add(state, line)
        case UpdateQuantity(line_id, quantity):
            return _update(state, line_id, quantity)
        case RemoveLine(line_id):
            return Ok(_remove(state, line_id))
        case ClearCart():
            return Ok(replace(state, lines=()))
        case ToggleCart():
            return Ok(replace(state, is_open=not state.is_open))
        case OpenCart():
            return Ok(replace(state, is_open=True))
        case CloseCart():
            return Ok(replace(state, is_open=False))
        case ReconcileStock(available):
            return Ok(_reconcile(state, available))
        case _:
            return Error(InvalidLine(f"unknown command {type(command).__name__}"))


# ═══════════════════════════════════════════════════════════════════════════════
# Transitions
# ═══════════════════════════════════════════════════════════════════════════════


def validate_line(line: CartLine) -> Result[CartLine, CartRejection]:
    """Shape and stock-bound checks for an incoming line."""
    if not line.product.product_id or not line.product.product_id.strip():
        return Error(InvalidLine("missing product id"))
    if not line.product.name.strip():
        return Error(InvalidLine("missing product name"))
    if line.product.base_price < 0:
        return Error(InvalidLine("negative base price"))
    if isinstance(line.quantity, bool) or not isinstance(line.quantity, int):
        return Error(InvalidLine("quantity must be an integer"))
    if line.quantity <= 0:
        return Error(InvalidLine("quantity must be positive"))

    if line.variant is not None:
        if not line.variant.id:
            return Error(InvalidLine("missing variant id"))
        if line.variant.stock < 0:
            return Error(InvalidLine("negative variant stock"))
        if line.quantity > line.variant.stock:
            return Error(StockExceeded(line.line_id, line.quantity, line.variant.stock))

    return Ok(line)


def _add(state: CartState, line: CartLine) -> Result[CartState, CartRejection]:
    match validate_line(line):
        case Error(e):
            return Error(e)
        case Ok(_):
            pass

    existing = state.find(line.line_id)
    if existing is None:
        return Ok(replace(state, lines=(*state.lines, line)))

    # Merge: re-check against the bound stored on the existing line, all or nothing
    combined = existing.quantity + line.quantity
    bound = existing.stock_bound
    if bound is not None and combined > bound:
        return Error(StockExceeded(existing.line_id, combined, bound))

    return Ok(_replace_line(state, existing.with_quantity(combined)))


def _update(
    state: CartState, line_id: LineId, quantity: int
) -> Result[CartState, CartRejection]:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return Error(InvalidLine("quantity must be an integer"))
    if quantity <= 0:
        return Ok(_remove(state, line_id))

    existing = state.find(line_id)
    if existing is None:
        return Ok(state)

    bound = existing.stock_bound
    if bound is not None and quantity > bound:
        return Error(StockExceeded(line_id, quantity, bound))

    return Ok(_replace_line(state, existing.with_quantity(quantity)))


def _remove(state: CartState, line_id: LineId) -> CartState:
    kept = tuple(line for line in state.lines if line.line_id != line_id)
    if len(kept) == len(state.lines):
        return state
    return replace(state, lines=kept)


def _reconcile(state: CartState, levels: Mapping[LineId, int]) -> CartState:
    lines: list[CartLine] = []
    for line in state.lines:
        if line.line_id not in levels:
            lines.append(line)
            continue

        live = max(int(levels[line.line_id]), 0)
        if live == 0:
            continue

        adjusted = line.with_quantity(min(line.quantity, live))
        if adjusted.variant is not None:
            adjusted = replace(adjusted, variant=replace(adjusted.variant, stock=live))
        lines.append(adjusted)

    return replace(state, lines=tuple(lines))


def _replace_line(state: CartState, updated: CartLine) -> CartState:
    return replace(
        state,
        lines=tuple(
            updated if line.line_id == updated.line_id else line
            for line in state.lines
        ),
    )


__all__ = (
    "reduce",
    "validate_line",
)
