"""
Cart store — the single owned state cell.

Holds exactly one authoritative CartState. Every command reads-then-writes
that value under one lock, so commands issued in quick succession apply in
arrival order and never interleave. After each successful line mutation the
full line sequence is written to storage under the configured key.

    store = CartStore(FileCartStorage(path), settings)
    await store.hydrate()

    unsubscribe = store.subscribe(lambda state: render(state))

    match await store.add(CartLine.of(product, variant, 2)):
        case Ok(state): ...
        case Error(StockExceeded(available=n)): notify(f"only {n} left")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping

from kungfu import Result, Ok, Error

from vitrina._types import LineId
from vitrina.config import Settings
from vitrina.cart._codec import decode_lines, encode_lines
from vitrina.cart._reduce import reduce
from vitrina.cart._storage import CartStorage, MemoryCartStorage
from vitrina.cart._totals import CartTotals, compute_totals
from vitrina.cart._types import (
    EMPTY_CART,
    LINE_COMMANDS,
    AddLine,
    CartCommand,
    CartLine,
    CartRejection,
    CartState,
    ClearCart,
    CloseCart,
    OpenCart,
    ReconcileStock,
    RemoveLine,
    ToggleCart,
    UpdateQuantity,
)

logger = logging.getLogger(__name__)

type Listener = Callable[[CartState], None]


class CartStore:
    def __init__(
        self,
        storage: CartStorage | None = None,
        settings: Settings | None = None,
        initial: CartState = EMPTY_CART,
    ) -> None:
        self._storage = storage if storage is not None else MemoryCartStorage()
        self._settings = settings or Settings()
        self._state = initial
        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return self._state.lines

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def totals(self) -> CartTotals:
        return compute_totals(self._state.lines, self._settings)

    # ═══════════════════════════════════════════════════════════════════════════
    # Subscriptions
    # ═══════════════════════════════════════════════════════════════════════════

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new state. Returns unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ═══════════════════════════════════════════════════════════════════════════
    # Lifecycle
    # ═══════════════════════════════════════════════════════════════════════════

    async def hydrate(self) -> CartState:
        """
        Restore lines from storage.

        Absent, unreadable or corrupt blobs degrade to an empty cart; the
        problem is logged, never raised.
        """
        async with self._lock:
            key = self._settings.storage_key
            match await self._storage.load(key):
                case Ok(None):
                    lines: tuple[CartLine, ...] = ()
                case Ok(blob):
                    match decode_lines(blob):
                        case Ok(decoded):
                            lines = decoded
                        case Error(corrupt):
                            logger.warning(
                                "Discarding corrupt cart blob under %r: %s", key, corrupt.message
                            )
                            lines = ()
                case Error(e):
                    logger.warning("Cart storage unreadable, starting empty: %s", e.message)
                    lines = ()

            self._state = CartState(lines=lines, is_open=self._state.is_open)
            self._notify()
            return self._state

    async def dispatch(self, command: CartCommand) -> Result[CartState, CartRejection]:
        async with self._lock:
            match reduce(self._state, command):
                case Ok(next_state):
                    pass
                case Error(rejection):
                    logger.debug("Cart command %s rejected: %s", command, rejection)
                    return Error(rejection)

            changed = next_state != self._state
            self._state = next_state
            if changed and isinstance(command, LINE_COMMANDS):
                await self._persist()
            if changed:
                self._notify()
            return Ok(next_state)

    # ═══════════════════════════════════════════════════════════════════════════
    # Commands
    # ═══════════════════════════════════════════════════════════════════════════

    async def add(self, line: CartLine) -> Result[CartState, CartRejection]:
        return await self.dispatch(AddLine(line))

    async def update_quantity(
        self, line_id: LineId, quantity: int
    ) -> Result[CartState, CartRejection]:
        return await self.dispatch(UpdateQuantity(line_id, quantity))

    async def remove(self, line_id: LineId) -> Result[CartState, CartRejection]:
        return await self.dispatch(RemoveLine(line_id))

    async def clear(self) -> Result[CartState, CartRejection]:
        return await self.dispatch(ClearCart())

    async def toggle(self) -> Result[CartState, CartRejection]:
        return await self.dispatch(ToggleCart())

    async def open(self) -> Result[CartState, CartRejection]:
        return await self.dispatch(OpenCart())

    async def close(self) -> Result[CartState, CartRejection]:
        return await self.dispatch(CloseCart())

    async def reconcile(
        self, available: Mapping[LineId, int]
    ) -> Result[CartState, CartRejection]:
        return await self.dispatch(ReconcileStock(dict(available)))

    # ═══════════════════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════════════════

    async def _persist(self) -> None:
        key = self._settings.storage_key
        match await self._storage.save(key, encode_lines(self._state.lines)):
            case Ok(_):
                pass
            case Error(e):
                # In-memory state stays authoritative; next mutation retries the write
                logger.warning("Failed to persist cart under %r: %s", key, e.message)

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(self._state)
            except Exception:
                # State is already committed and persisted
                logger.exception("Cart listener %r failed", listener)


__all__ = (
    "CartStore",
    "Listener",
)
