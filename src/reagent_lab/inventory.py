"""Stock levels for every known substance."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import logging
import math
from typing import Any

from reagent_lab.errors import (
    DuplicateNameError,
    InvalidQuantityError,
    UnknownSubstanceError,
)
from reagent_lab.validation import normalize_quantity, require_name

logger = logging.getLogger(__name__)

_ROUNDING_SLACK = 1e-9


class Inventory:
    """Mapping of normalized substance name to a non-negative quantity.

    Keys are registered once via :meth:`declare`; afterwards only quantities
    change. Production commits go through :meth:`apply`, which checks the
    whole batch before touching any entry.
    """

    def __init__(self, *, residue_tolerance: float = 0.0) -> None:
        self._levels: dict[str, float] = {}
        self._residue_tolerance = residue_tolerance

    def __contains__(self, name: object) -> bool:
        return name in self._levels

    def __iter__(self) -> Iterator[str]:
        return iter(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def declare(self, name: str) -> None:
        if name in self._levels:
            raise DuplicateNameError(f"Duplicate substance name: {name}")
        self._levels[name] = 0.0

    def resolve(self, name: Any) -> str:
        normalized = require_name(name)
        if normalized not in self._levels:
            raise UnknownSubstanceError(
                f"Unknown substance: {normalized}",
                context={"name": normalized},
            )
        return normalized

    def get(self, name: Any) -> float:
        return self._levels[self.resolve(name)]

    def set(self, name: Any, quantity: Any) -> float:
        normalized = self.resolve(name)
        value = normalize_quantity(quantity)
        self._levels[normalized] = value
        return value

    def add(self, name: Any, amount: Any) -> float:
        normalized = self.resolve(name)
        value = normalize_quantity(amount)
        updated = self._levels[normalized] + value
        if not math.isfinite(updated):
            raise InvalidQuantityError(
                f"Stock of {normalized} would overflow: "
                f"{self._levels[normalized]!r} + {value!r}",
                context={"name": normalized, "amount": value},
            )
        self._levels[normalized] = updated
        return updated

    def level(self, name: str) -> float:
        """Unchecked read for names already known to be normalized."""
        return self._levels[name]

    def apply(self, deltas: Mapping[str, float]) -> None:
        """Commit a batch of signed changes atomically.

        Results within the residue tolerance of zero are stored as 0.0. A
        result that goes negative by more than rounding error aborts the
        whole batch; smaller negative residues are clamped to 0.0.
        """
        tolerance = self._residue_tolerance
        updates: dict[str, float] = {}
        for name, delta in deltas.items():
            value = self._levels[name] + delta
            if not math.isfinite(value):
                raise InvalidQuantityError(
                    f"Non-finite stock for {name} after production: {value!r}"
                )
            if abs(value) < tolerance:
                value = 0.0
            if value < 0:
                # Rounding slack scales with the size of the change.
                if value < -max(tolerance, _ROUNDING_SLACK * abs(delta)):
                    raise InvalidQuantityError(
                        f"Production would leave negative stock of {name}: {value!r}",
                        context={"name": name, "delta": delta},
                    )
                logger.debug("Clamping residue %r of %s to zero", value, name)
                value = 0.0
            updates[name] = value
        self._levels.update(updates)

    def snapshot(self) -> dict[str, float]:
        return dict(self._levels)


__all__ = ["Inventory"]
