"""
Variant picker — the default selection policy for a product page.

Color and size are not independent axes: size availability is conditioned on
color, so choosing a color resets the size and recomputes the size list.

    match await VariantPicker.load(resolver, "P1"):
        case Ok(picker): ...

    picker.color                      # first color, pre-selected
    await picker.choose_size("M")
    picker.can_add_to_cart            # True only for a resolved, in-stock variant
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from vitrina._types import ProductId
from vitrina.catalog._resolver import VariantResolver
from vitrina.catalog._types import (
    CatalogError,
    ColorOption,
    Product,
    ResolveError,
    SizeOption,
    Variant,
    VariantNotFound,
)


class VariantPicker:
    def __init__(
        self,
        resolver: VariantResolver,
        product: Product,
        colors: list[ColorOption],
    ) -> None:
        self._resolver = resolver
        self.product = product
        self.colors = colors
        self.color: str | None = None
        self.sizes: list[SizeOption] = []
        self.size: str | None = None
        self.resolution: Result[Variant, ResolveError] | None = None

    @classmethod
    async def load(
        cls,
        resolver: VariantResolver,
        product_id: ProductId,
    ) -> Result[VariantPicker, CatalogError]:
        """Fetch the product and its colors; pre-select the first color."""
        match await resolver.product(product_id):
            case Ok(product):
                pass
            case Error(e):
                return Error(e)

        match await resolver.list_colors(product_id):
            case Ok(colors):
                picker = cls(resolver, product, colors)
            case Error(e):
                return Error(e)

        if colors:
            match await picker.choose_color(colors[0].color):
                case Error(e):
                    return Error(e)
                case Ok(_):
                    pass
        return Ok(picker)

    @property
    def has_variants(self) -> bool:
        return bool(self.colors)

    @property
    def variant(self) -> Variant | None:
        match self.resolution:
            case Ok(v):
                return v
            case _:
                return None

    @property
    def image(self) -> str | None:
        """Dedicated image of the selected color, else the product's general image."""
        for option in self.colors:
            if option.color == self.color and option.image:
                return option.image
        return self.product.primary_image

    @property
    def can_add_to_cart(self) -> bool:
        if not self.has_variants:
            # Legacy product without variants: nothing to resolve
            return True
        variant = self.variant
        return variant is not None and variant.in_stock

    async def choose_color(self, color: str) -> Result[list[SizeOption], CatalogError]:
        self.color = color
        self.size = None
        self.resolution = None
        match await self._resolver.list_sizes(self.product.id, color):
            case Ok(sizes):
                self.sizes = sizes
                return Ok(sizes)
            case Error(e):
                self.sizes = []
                return Error(e)

    async def choose_size(self, size: str) -> Result[Variant, ResolveError]:
        self.size = size
        if self.color is None:
            self.resolution = Error(VariantNotFound(self.product.id, "", size))
        else:
            self.resolution = await self._resolver.resolve(self.product.id, self.color, size)
        return self.resolution


__all__ = ("VariantPicker",)
