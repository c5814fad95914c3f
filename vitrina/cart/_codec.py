"""
Cart blob codec — pydantic records for the persisted line sequence.

Blob format: JSON array of CartLineRecord, insertion order.

    blob = encode_lines(state.lines)
    match decode_lines(blob):
        case Ok(lines): ...
        case Error(StorageCorrupt(message)): ...
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from kungfu import Result, Ok, Error
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from vitrina.cart._types import CartLine, ProductSnapshot, StorageCorrupt, VariantRef


class VariantRecord(BaseModel):
    id: str = Field(min_length=1)
    color: str
    size: str
    stock: int = Field(ge=0)
    price_delta: Decimal = Decimal(0)

    @classmethod
    def from_domain(cls, ref: VariantRef) -> VariantRecord:
        return cls(
            id=ref.id,
            color=ref.color,
            size=ref.size,
            stock=ref.stock,
            price_delta=ref.price_delta,
        )

    def to_domain(self) -> VariantRef:
        return VariantRef(
            id=self.id,
            color=self.color,
            size=self.size,
            stock=self.stock,
            price_delta=self.price_delta,
        )


class CartLineRecord(BaseModel):
    product_id: str = Field(min_length=1)
    name: str
    base_price: Decimal = Field(ge=0)
    image: str | None = None
    category: str | None = None
    variant: VariantRecord | None = None
    quantity: int = Field(gt=0)

    @classmethod
    def from_domain(cls, line: CartLine) -> CartLineRecord:
        return cls(
            product_id=line.product.product_id,
            name=line.product.name,
            base_price=line.product.base_price,
            image=line.product.image,
            category=line.product.category,
            variant=VariantRecord.from_domain(line.variant) if line.variant else None,
            quantity=line.quantity,
        )

    def to_domain(self) -> CartLine:
        return CartLine(
            product=ProductSnapshot(
                product_id=self.product_id,
                name=self.name,
                base_price=self.base_price,
                image=self.image,
                category=self.category,
            ),
            variant=self.variant.to_domain() if self.variant else None,
            quantity=self.quantity,
        )


_LINES = TypeAdapter(list[CartLineRecord])


def encode_lines(lines: Iterable[CartLine]) -> str:
    records = [CartLineRecord.from_domain(line) for line in lines]
    return _LINES.dump_json(records).decode()


def decode_lines(blob: str | bytes) -> Result[tuple[CartLine, ...], StorageCorrupt]:
    try:
        records = _LINES.validate_json(blob)
    except ValidationError as e:
        return Error(StorageCorrupt(f"cart blob rejected: {e.error_count()} error(s): {e}"))

    lines = tuple(r.to_domain() for r in records)
    ids = [line.line_id for line in lines]
    if len(set(ids)) != len(ids):
        return Error(StorageCorrupt("cart blob has duplicate lines"))
    return Ok(lines)


__all__ = (
    "VariantRecord",
    "CartLineRecord",
    "encode_lines",
    "decode_lines",
)
