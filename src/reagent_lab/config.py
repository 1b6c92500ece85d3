"""Numeric tolerances for a Laboratory."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
import math
import numbers
from typing import Any, Optional, Union

import numpy as np

from reagent_lab.errors import ConfigError

DEFAULT_RESIDUE_TOLERANCE = 1e-12
DEFAULT_PIVOT_TOLERANCE = float(np.finfo(float).eps)


@dataclass(frozen=True)
class LabConfig:
    # Stock values with magnitude below this are stored as exactly 0.
    residue_tolerance: float = DEFAULT_RESIDUE_TOLERANCE
    # Gauss-Jordan pivots smaller than this mark a component as singular.
    pivot_tolerance: float = DEFAULT_PIVOT_TOLERANCE


_FIELD_NAMES = tuple(item.name for item in fields(LabConfig))


def _coerce_float(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigError(f"config.{key} must be a number, got {value!r}.")
    number = float(value)
    if not math.isfinite(number):
        raise ConfigError(f"config.{key} must be finite, got {value!r}.")
    return number


def load_config(
    payload: Optional[Union[LabConfig, Mapping[str, Any]]] = None,
) -> LabConfig:
    """Build a validated LabConfig from a mapping (or pass one through)."""
    if payload is None:
        return LabConfig()
    if isinstance(payload, LabConfig):
        values = {name: getattr(payload, name) for name in _FIELD_NAMES}
    elif isinstance(payload, Mapping):
        unknown = sorted(str(key) for key in payload if key not in _FIELD_NAMES)
        if unknown:
            raise ConfigError(f"Unknown config keys: {unknown}.")
        values = dict(payload)
    else:
        raise ConfigError("config must be a mapping or LabConfig.")

    residue = _coerce_float(
        "residue_tolerance",
        values.get("residue_tolerance", DEFAULT_RESIDUE_TOLERANCE),
    )
    if residue < 0:
        raise ConfigError("config.residue_tolerance must be >= 0.")
    pivot = _coerce_float(
        "pivot_tolerance",
        values.get("pivot_tolerance", DEFAULT_PIVOT_TOLERANCE),
    )
    if pivot <= 0:
        raise ConfigError("config.pivot_tolerance must be > 0.")
    return LabConfig(residue_tolerance=residue, pivot_tolerance=pivot)


__all__ = [
    "DEFAULT_PIVOT_TOLERANCE",
    "DEFAULT_RESIDUE_TOLERANCE",
    "LabConfig",
    "load_config",
]
