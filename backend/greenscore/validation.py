from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from .errors import InvalidArgumentError

# Maximum unit price: 9,999,999,999.99
MAX_PRICE = Decimal("9999999999.99")
CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    """Round to whole cents, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def require_id(value: Any, field: str) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgumentError(f"{field} is required")
    return str(value).strip()


def _to_int(value: Any, field: str) -> int:
    # bool is an int subclass; never accept it as a quantity
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise InvalidArgumentError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e3") and decimals (e.g., "12.5")
        if "e" in stripped.lower() or "." in stripped:
            raise InvalidArgumentError(f"{field} must be a plain integer")
        try:
            return int(stripped)
        except ValueError:
            raise InvalidArgumentError(f"{field} must be an integer")
    if isinstance(value, float):
        raise InvalidArgumentError(f"{field} must be an integer, not a decimal")
    raise InvalidArgumentError(f"{field} must be an integer")


def require_positive_int(value: Any, field: str) -> int:
    n = _to_int(value, field)
    if n <= 0:
        raise InvalidArgumentError(f"{field} must be greater than 0")
    return n


def require_non_negative_int(value: Any, field: str) -> int:
    n = _to_int(value, field)
    if n < 0:
        raise InvalidArgumentError(f"{field} cannot be negative")
    return n


def to_money(value: Any, field: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError(f"{field} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidArgumentError(f"{field} must be a number")
    if not amount.is_finite():
        raise InvalidArgumentError(f"{field} must be a finite number")
    if amount < 0:
        raise InvalidArgumentError(f"{field} cannot be negative")
    if amount > MAX_PRICE:
        raise InvalidArgumentError(f"{field} exceeds maximum of {MAX_PRICE}")
    return quantize_money(amount)


def coerce_enum(enum_cls, value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidArgumentError(f"{field} must be one of: {allowed}")


def to_measure(value: Any, field: str) -> float | None:
    """Optional non-negative physical measure (e.g. weight); blank means unset."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{field} must be a number")
    try:
        number = float(str(value).strip())
    except ValueError:
        raise InvalidArgumentError(f"{field} must be a number")
    if not math.isfinite(number):
        raise InvalidArgumentError(f"{field} must be a finite number")
    if number < 0:
        raise InvalidArgumentError(f"{field} cannot be negative")
    return number
