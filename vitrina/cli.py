"""
Interactive storefront shell.

Browse the demo catalog, fill a cart that survives restarts (file-backed),
and walk the checkout flow against simulated payment providers.

┌─────────────────────────────────────────────────────────────────────────┐
│  STAGE        COMMANDS                                                  │
├─────────────────────────────────────────────────────────────────────────┤
│  browse       products, show                                            │
│  cart         add, qty, rm, cart, toggle, open, close, clear            │
│  checkout     checkout, ship, next, back, pay, submit, fix, cancel      │
│  simulate     stock   (another shopper buys units)                      │
└─────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shlex
from pathlib import Path

from kungfu import Ok, Error

from vitrina.cart import CartLine, CartStore, FileCartStorage
from vitrina.catalog import VariantPicker
from vitrina.checkout import (
    CheckoutOrchestrator,
    ShippingDetails,
    StockShortfall,
    ValidationFailed,
)
from vitrina.config import Settings
from vitrina.demo import DEMO_USER, Storefront, seed_storefront

DEFAULT_STORAGE = Path.home() / ".vitrina" / "cart.json"


# ═══════════════════════════════════════════════════════════════════════════════
# Help
# ═══════════════════════════════════════════════════════════════════════════════

HELP_TEXT = """
┌─────────────────────────────────────────────────────────────────────────────┐
│                              COMMANDS                                        │
├─────────────────────────────────────────────────────────────────────────────┤
│  products                   List products                                   │
│  show <product>             Colors and sizes (with stock) of a product      │
│  add <product> [color size] [qty]   Add to cart                             │
│  qty <line#> <n>            Change quantity (0 removes)                     │
│  rm <line#>                 Remove a line                                   │
│  cart                       Show cart and totals                            │
│  toggle | open | close      Show or hide the cart panel                     │
│  clear                      Empty the cart                                  │
├─────────────────────────────────────────────────────────────────────────────┤
│  checkout                   Start checkout as the demo user                 │
│  ship field=value ...       Fill shipping fields                            │
│  next / back                Move between steps                              │
│  pay <stripe|paypal>        Choose payment method                           │
│  submit                     Hand off to the payment provider                │
│  fix                        Clamp short lines to the available stock        │
│  cancel                     Leave checkout (cart is kept)                   │
├─────────────────────────────────────────────────────────────────────────────┤
│  stock <variant> <n>        Simulate a live stock change                    │
│  help                       Show this help                                  │
│  quit                       Exit                                            │
└─────────────────────────────────────────────────────────────────────────────┘

Examples:
  add P1 Azul M 2           → 2x Camiseta Básica, Azul/M
  add P3                    → 1x Gorra Clásica (no variants)
  ship address="Calle 10 # 5-20" city=Bogotá region=Cundinamarca postal_code=110111
"""


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def money(value: object) -> str:
    return f"${value:,.0f}"


# ═══════════════════════════════════════════════════════════════════════════════
# Shell
# ═══════════════════════════════════════════════════════════════════════════════


class Shell:
    def __init__(self, shop: Storefront, store: CartStore) -> None:
        self.shop = shop
        self.store = store
        self.checkout = CheckoutOrchestrator(store, shop.validator, shop.payments, shop.settings)

    # ── browse ────────────────────────────────────────────────────────────────

    def cmd_products(self) -> None:
        print("\n┌────────────────────────────────────────────────┐")
        print("│                  PRODUCTS                       │")
        print("├────────────────────────────────────────────────┤")
        for p in self.shop.catalog.all_products():
            print(f"│  [{p.id:3}] {p.name:24} {money(p.base_price):>12} │")
        print("└────────────────────────────────────────────────┘")

    async def cmd_show(self, product_id: str) -> None:
        match await VariantPicker.load(self.shop.resolver, product_id.upper()):
            case Ok(picker):
                pass
            case Error(e):
                print(f"  ✗ {e.message}")
                return

        print(f"\n  {picker.product.name}: {money(picker.product.base_price)}")
        if not picker.has_variants:
            print("    (no variants)")
            return
        for option in picker.colors:
            await picker.choose_color(option.color)
            sizes = ", ".join(
                f"{s.size}({s.stock})" if s.available else f"{s.size}(agotado)"
                for s in picker.sizes
            )
            print(f"    • {option.color:10} {sizes}")

    # ── cart ──────────────────────────────────────────────────────────────────

    async def cmd_add(self, args: list[str]) -> None:
        if not args:
            print("  Usage: add <product> [color size] [qty]")
            return
        product_id = args[0].upper()
        rest = args[1:]
        quantity = 1
        if rest and rest[-1].isdigit() and len(rest) in (1, 3):
            quantity = int(rest.pop())

        match await VariantPicker.load(self.shop.resolver, product_id):
            case Ok(picker):
                pass
            case Error(e):
                print(f"  ✗ {e.message}")
                return

        if picker.has_variants:
            if len(rest) != 2:
                colors = ", ".join(c.color for c in picker.colors)
                print(f"  ✗ Pick a color and size (colors: {colors})")
                return
            await picker.choose_color(rest[0])
            match await picker.choose_size(rest[1]):
                case Error(e):
                    print(f"  ✗ {e.message}")
                    return
                case Ok(_):
                    pass
            if not picker.can_add_to_cart:
                print("  ✗ Out of stock")
                return

        line = CartLine.of(picker.product, picker.variant, quantity)
        match await self.store.add(line):
            case Ok(_):
                print(f"  ✓ Added {quantity}x {line.label}")
            case Error(rejection):
                print(f"  ✗ {rejection.message}")

    def _line_id(self, index: str) -> str | None:
        lines = self.store.lines
        if index.isdigit() and 1 <= int(index) <= len(lines):
            return lines[int(index) - 1].line_id
        print(f"  ✗ No line #{index}")
        return None

    async def cmd_qty(self, index: str, quantity: str) -> None:
        line_id = self._line_id(index)
        if line_id is None:
            return
        match await self.store.update_quantity(line_id, int(quantity)):
            case Ok(_):
                self.cmd_cart()
            case Error(rejection):
                print(f"  ✗ {rejection.message}")

    async def cmd_rm(self, index: str) -> None:
        line_id = self._line_id(index)
        if line_id is not None:
            await self.store.remove(line_id)
            self.cmd_cart()

    def cmd_cart(self) -> None:
        state = self.store.state
        if state.is_empty:
            print("\n  Cart is empty.")
            return
        totals = self.store.totals
        print("\n┌────────────────────────────────────────────────────────┐")
        print(f"│  CART ({'open' if state.is_open else 'closed'})" + " " * 40 + "│")
        print("├────────────────────────────────────────────────────────┤")
        for i, line in enumerate(state.lines, 1):
            print(f"│  {i}. {line.quantity}x {line.label:32} {money(line.line_total):>12} │")
        print("├────────────────────────────────────────────────────────┤")
        print(f"│  Subtotal: {money(totals.subtotal):>15}" + " " * 29 + "│")
        print(f"│  IVA:      {money(totals.tax):>15}" + " " * 29 + "│")
        print(f"│  Envío:    {money(totals.shipping):>15}" + " " * 29 + "│")
        print(f"│  TOTAL:    {money(totals.total):>15}" + " " * 29 + "│")
        print("└────────────────────────────────────────────────────────┘")
        if not totals.free_shipping:
            print(f"  Add {money(totals.missing_for_free_shipping)} more for free shipping.")

    # ── checkout ──────────────────────────────────────────────────────────────

    def show_step(self) -> None:
        session = self.checkout.session
        if session is None:
            return
        print(f"\n  Step {session.step.value}/3: {session.step.name.title()}")
        ship = session.shipping
        for name in ShippingDetails.field_names():
            print(f"    {name:12} {getattr(ship, name) or '-'}")
        if session.method is not None:
            print(f"    {'payment':12} {session.method.value}")

    def show_error(self) -> None:
        error = self.checkout.last_error
        match error:
            case None:
                return
            case ValidationFailed(errors):
                for e in errors:
                    print(f"  ✗ {e.field}: {e.message}")
            case StockShortfall(report):
                for msg in report.messages():
                    print(f"  ✗ {msg}")
                print("  Type 'fix' to adjust quantities to what is available.")
            case _:
                print(f"  ✗ {error.message}")

    def cmd_checkout(self) -> None:
        match self.checkout.begin(DEMO_USER):
            case Ok(_):
                self.show_step()
            case Error(_):
                self.show_error()

    def cmd_ship(self, pairs: list[str]) -> None:
        changes: dict[str, str] = {}
        for pair in pairs:
            name, sep, value = pair.partition("=")
            if not sep or name not in ShippingDetails.field_names():
                print(f"  ✗ Bad field: {pair}")
                return
            changes[name] = value
        match self.checkout.update_shipping(**changes):
            case Ok(_):
                self.show_step()
            case Error(_):
                self.show_error()

    async def cmd_next(self) -> None:
        match await self.checkout.advance():
            case Ok(_):
                self.show_step()
            case Error(_):
                self.show_error()

    def cmd_back(self) -> None:
        match self.checkout.back():
            case Ok(_):
                self.show_step()
            case Error(_):
                self.show_error()

    def cmd_pay(self, method: str) -> None:
        match self.checkout.select_method(method):
            case Ok(_):
                self.show_step()
            case Error(_):
                self.show_error()

    async def cmd_submit(self) -> None:
        print("  … processing payment")
        match await self.checkout.submit():
            case Ok(redirect):
                print(f"\n  ✓ Redirecting to {redirect.method.value}: {redirect.url}")
                print("  Submitted items removed from the cart.")
            case Error(_):
                self.show_error()

    async def cmd_fix(self) -> None:
        match await self.checkout.apply_available_stock():
            case Ok(_):
                self.cmd_cart()
            case Error(e):
                print(f"  ✗ {e.message}")

    def cmd_stock(self, variant_id: str, stock: str) -> None:
        self.shop.inventory.set_stock(variant_id, int(stock))
        print(f"  ✓ Live stock of {variant_id} is now {stock}")

    # ── loop ──────────────────────────────────────────────────────────────────

    async def handle(self, line: str) -> bool:
        """Run one command line. Returns False to exit."""
        parts = shlex.split(line)
        cmd, args = parts[0].lower(), parts[1:]

        match cmd, args:
            case ("quit" | "exit" | "q"), _:
                return False
            case ("help" | "h" | "?"), _:
                print(HELP_TEXT)
            case "products", _:
                self.cmd_products()
            case "show", [product_id]:
                await self.cmd_show(product_id)
            case "add", _:
                await self.cmd_add(args)
            case "qty", [index, quantity] if quantity.lstrip("-").isdigit():
                await self.cmd_qty(index, quantity)
            case "rm", [index]:
                await self.cmd_rm(index)
            case "cart", _:
                self.cmd_cart()
            case "toggle", _:
                await self.store.toggle()
                print(f"  Cart panel {'open' if self.store.is_open else 'closed'}")
            case "open", _:
                await self.store.open()
                print("  Cart panel open")
            case "close", _:
                await self.store.close()
                print("  Cart panel closed")
            case "clear", _:
                await self.store.clear()
                print("  ✓ Cart cleared")
            case "checkout", _:
                self.cmd_checkout()
            case "ship", _:
                self.cmd_ship(args)
            case "next", _:
                await self.cmd_next()
            case "back", _:
                self.cmd_back()
            case "pay", [method]:
                self.cmd_pay(method)
            case "submit", _:
                await self.cmd_submit()
            case "fix", _:
                await self.cmd_fix()
            case "cancel", _:
                self.checkout.cancel()
                print("  Checkout cancelled; cart kept.")
            case "stock", [variant_id, stock] if stock.isdigit():
                self.cmd_stock(variant_id, stock)
            case _:
                print(f"  ✗ Unknown command or arguments: {line}")
                print("  Type 'help' for available commands.")
        return True


BANNER = """
╔════════════════════════════════════════════════════════════════════════════╗
║                         VITRINA STOREFRONT SHELL                           ║
╠════════════════════════════════════════════════════════════════════════════╣
║  Cart persists between runs. Stock is re-checked before leaving shipping   ║
║  and again right before payment. Use 'stock' to play another shopper.      ║
╚════════════════════════════════════════════════════════════════════════════╝
"""


async def run_cli(storage_path: Path, settings: Settings) -> None:
    shop = seed_storefront(settings)
    store = CartStore(FileCartStorage(storage_path), settings)
    await store.hydrate()
    shell = Shell(shop, store)

    print(BANNER)
    print(HELP_TEXT)
    shell.cmd_products()
    shell.cmd_cart()

    while True:
        try:
            line = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            break

        if not line:
            continue
        try:
            if not await shell.handle(line):
                print("Bye!")
                break
        except ValueError as e:
            print(f"  ✗ {e}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="vitrina", description="Storefront cart & checkout shell")
    parser.add_argument(
        "--storage",
        type=Path,
        default=DEFAULT_STORAGE,
        help=f"cart storage file (default: {DEFAULT_STORAGE})",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    asyncio.run(run_cli(args.storage, Settings.from_env()))


if __name__ == "__main__":
    main()
