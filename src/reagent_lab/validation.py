"""Name, quantity, and container normalization."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import math
import numbers
from typing import Any, Optional

from reagent_lab.errors import (
    InvalidInputError,
    InvalidNameError,
    InvalidQuantityError,
)


def normalize_name(value: Any) -> Optional[str]:
    """Return the canonical form of a substance name, or None if malformed."""
    if not isinstance(value, str):
        return None
    normalized = value.strip().casefold()
    return normalized or None


def require_name(value: Any, label: str = "substance name") -> str:
    normalized = normalize_name(value)
    if normalized is None:
        raise InvalidNameError(f"Invalid {label}: {value!r}")
    return normalized


def normalize_quantity(value: Any, label: str = "Quantity") -> float:
    """Return ``value`` as a float, rejecting non-numbers, NaN/inf and negatives."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidQuantityError(f"{label} must be a finite number: {value!r}")
    quantity = float(value)
    if not math.isfinite(quantity):
        raise InvalidQuantityError(f"{label} must be a finite number: {value!r}")
    if quantity < 0:
        raise InvalidQuantityError(
            f"{label} cannot be negative. Received: {value!r}"
        )
    return quantity


def require_mapping(value: Any, message: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidInputError(message)
    return value


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(
        value,
        (str, bytes, bytearray),
    )


__all__ = [
    "normalize_name",
    "require_name",
    "normalize_quantity",
    "require_mapping",
    "is_sequence",
]
