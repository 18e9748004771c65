"""
Input validation for checkout details.

Address checks are structural and report every failing field by name;
scalar checks return Result so they compose with the rest of the checkout.
"""

from __future__ import annotations

import dataclasses
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError, field_validator

from shopsaga._types import Result, Ok, Error

# ═══════════════════════════════════════════════════════════════════════════════
# Shipping Address
# ═══════════════════════════════════════════════════════════════════════════════

_ZIP_PATTERN = re.compile(r"^[\d\-\s]+$")
ADDRESS_FIELDS = ("street", "city", "zip", "country")


def _bounded(value: str, low: int, high: int) -> str:
    if len(value.strip()) < low or len(value) > high:
        raise ValueError(f"length must be between {low} and {high}")
    return value


class ShippingAddressModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    street: StrictStr
    city: StrictStr
    zip: StrictStr
    country: StrictStr
    state: StrictStr | None = None

    @field_validator("street")
    @classmethod
    def _street(cls, v: str) -> str:
        return _bounded(v, 5, 200)

    @field_validator("city")
    @classmethod
    def _city(cls, v: str) -> str:
        return _bounded(v, 2, 100)

    @field_validator("zip")
    @classmethod
    def _zip(cls, v: str) -> str:
        code = v.strip()
        if not 5 <= len(code) <= 10 or not _ZIP_PATTERN.match(code):
            raise ValueError("zip must be 5-10 digits, dashes or spaces")
        return v

    @field_validator("country")
    @classmethod
    def _country(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("country is too short")
        return v


@dataclass(frozen=True, slots=True)
class AddressCheck:
    valid: bool
    errors: tuple[str, ...] = ()
    address: ShippingAddressModel | None = None


def validate_address(address: object) -> AddressCheck:
    """
    Validate a shipping address mapping (or dataclass instance).

    errors holds the names of the failing fields in a stable order:
        validate_address({"street": "1 Main St", "city": "X", ...})
        -> AddressCheck(valid=False, errors=("city",))
    """
    if dataclasses.is_dataclass(address) and not isinstance(address, type):
        address = dataclasses.asdict(address)
    if not isinstance(address, Mapping):
        return AddressCheck(valid=False, errors=("Address is required",))

    try:
        model = ShippingAddressModel.model_validate(dict(address))
    except ValidationError as e:
        failed = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
        ordered = tuple(f for f in (*ADDRESS_FIELDS, "state") if f in failed)
        return AddressCheck(valid=False, errors=ordered)

    return AddressCheck(valid=True, address=model)


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Method
# ═══════════════════════════════════════════════════════════════════════════════

PAYMENT_METHODS = frozenset({
    "credit_card",
    "debit_card",
    "paypal",
    "cash_on_delivery",
    "bank_transfer",
})


def validate_payment_method(method: object) -> bool:
    return isinstance(method, str) and method.lower() in PAYMENT_METHODS


# ═══════════════════════════════════════════════════════════════════════════════
# Scalars
# ═══════════════════════════════════════════════════════════════════════════════


def validate_quantity(
    value: object,
    *,
    minimum: int = 1,
    maximum: int = 1000,
) -> Result[int, str]:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return Error("Quantity must be a number")
    if not math.isfinite(value):
        return Error("Quantity is invalid")
    if isinstance(value, float) and not value.is_integer():
        return Error("Quantity must be a whole number")
    if value < minimum:
        return Error(f"Quantity must be at least {minimum}")
    if value > maximum:
        return Error(f"Quantity cannot exceed {maximum}")
    return Ok(int(value))


_CODE_PATTERN = re.compile(r"^[A-Z0-9\-]+$")


def validate_discount_code(code: object) -> Result[str, str]:
    """Normalised (trimmed, upper-cased) code, or why it is malformed."""
    if not isinstance(code, str) or not code:
        return Error("Discount code is required")

    normalised = code.strip().upper()
    if len(normalised) < 4:
        return Error("Discount code is too short")
    if len(normalised) > 20:
        return Error("Discount code is too long")
    if not _CODE_PATTERN.match(normalised):
        return Error("Discount code contains invalid characters")
    return Ok(normalised)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ShippingAddressModel",
    "AddressCheck",
    "validate_address",
    "PAYMENT_METHODS",
    "validate_payment_method",
    "validate_quantity",
    "validate_discount_code",
)
