"""Shared helpers for tests."""

from decimal import Decimal

from kungfu import Ok, Error

from vitrina.cart import CartLine, ProductSnapshot, VariantRef


def unwrap_ok(result):
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise AssertionError(f"expected Ok, got Error({e!r})")


def unwrap_err(result):
    match result:
        case Error(e):
            return e
        case Ok(value):
            raise AssertionError(f"expected Error, got Ok({value!r})")


def make_line(
    product_id="P1",
    variant_id="P1-AZ-M",
    quantity=1,
    stock=5,
    price="45000",
    delta="0",
    color="Azul",
    size="M",
):
    return CartLine(
        product=ProductSnapshot(product_id, f"Product {product_id}", Decimal(price)),
        variant=(
            VariantRef(variant_id, color, size, stock, Decimal(delta))
            if variant_id is not None
            else None
        ),
        quantity=quantity,
    )
