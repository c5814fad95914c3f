"""
Catalog — variant resolution over the read-only catalog collaborator.

    from vitrina import catalog as CT

    resolver = CT.VariantResolver(CT.MemoryCatalog(products, variants))
    match await resolver.resolve("P1", "Azul", "M"):
        case Ok(variant): ...
        case Error(CT.VariantNotFound()): ...
"""

from vitrina.catalog._types import (
    Product,
    Variant,
    ColorOption,
    SizeOption,
    VariantNotFound,
    ProductNotFound,
    CatalogUnavailable,
    CatalogError,
    ResolveError,
)
from vitrina.catalog._source import CatalogSource, MemoryCatalog
from vitrina.catalog._cache import VariantCache
from vitrina.catalog._resolver import (
    VariantResolver,
    distinct_colors,
    sizes_for,
    size_sort_key,
    APPAREL_SIZES,
)
from vitrina.catalog._selection import VariantPicker

__all__ = (
    # Types
    "Product",
    "Variant",
    "ColorOption",
    "SizeOption",
    # Errors
    "VariantNotFound",
    "ProductNotFound",
    "CatalogUnavailable",
    "CatalogError",
    "ResolveError",
    # Source
    "CatalogSource",
    "MemoryCatalog",
    "VariantCache",
    # Resolver
    "VariantResolver",
    "VariantPicker",
    "distinct_colors",
    "sizes_for",
    "size_sort_key",
    "APPAREL_SIZES",
)
