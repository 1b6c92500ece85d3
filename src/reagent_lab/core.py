"""Canonical hashing of laboratory structure (components and inverses)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, is_dataclass
import hashlib
import json
from typing import Any, Optional

import numpy as np


def canonicalize(obj: Any) -> Any:
    """Reduce components, matrices and containers to JSON-ready values.

    Mapping keys are sorted; tuples become lists; arrays keep dtype and shape
    next to their values so a 1x4 and a 2x2 inverse never hash alike.
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if isinstance(obj, np.ndarray):
        return {
            "__ndarray__": canonicalize(obj.tolist()),
            "dtype": str(obj.dtype),
            "shape": list(obj.shape),
        }
    if isinstance(obj, np.generic):
        return canonicalize(obj.item())

    if is_dataclass(obj) and not isinstance(obj, type):
        return canonicalize(asdict(obj))

    if isinstance(obj, Mapping):
        return {str(key): canonicalize(obj[key]) for key in sorted(obj, key=str)}

    if isinstance(obj, Sequence):
        return [canonicalize(item) for item in obj]

    raise TypeError(f"Unsupported type for canonicalize: {type(obj)!r}")


def stable_hash(obj: Any, *, length: Optional[int] = 16) -> str:
    payload = json.dumps(
        canonicalize(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
    )
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    if length is None:
        return digest
    if length <= 0:
        raise ValueError("length must be a positive integer or None.")
    return digest[:length]


__all__ = ["canonicalize", "stable_hash"]
