"""
Shipping form rules.

All fields are required and trimmed; minimum lengths follow the storefront form.
"""

from __future__ import annotations

from dataclasses import replace

from kungfu import Result, Ok, Error

from vitrina.checkout._types import FieldError, ShippingDetails, ValidationFailed
from vitrina.payment import EMAIL_RE

MIN_LENGTHS: dict[str, int] = {
    "name": 2,
    "phone": 10,
    "address": 5,
    "city": 2,
    "region": 2,
    "postal_code": 4,
    "country": 2,
}

LABELS: dict[str, str] = {
    "name": "Name",
    "email": "Email",
    "phone": "Phone",
    "address": "Address",
    "city": "City",
    "region": "Region",
    "postal_code": "Postal code",
    "country": "Country",
}


def validate_shipping(details: ShippingDetails) -> Result[ShippingDetails, ValidationFailed]:
    """Return the trimmed details, or every field error at once."""
    cleaned = replace(details, **{
        name: getattr(details, name).strip() for name in ShippingDetails.field_names()
    })

    errors: list[FieldError] = []
    for name in ShippingDetails.field_names():
        value: str = getattr(cleaned, name)
        label = LABELS[name]
        if not value:
            errors.append(FieldError(name, f"{label} is required"))
        elif name == "email":
            if not EMAIL_RE.match(value):
                errors.append(FieldError(name, "Email is not valid"))
        elif len(value) < MIN_LENGTHS[name]:
            errors.append(FieldError(
                name, f"{label} must be at least {MIN_LENGTHS[name]} characters"
            ))

    if errors:
        return Error(ValidationFailed(tuple(errors)))
    return Ok(cleaned)


__all__ = (
    "validate_shipping",
    "MIN_LENGTHS",
)
