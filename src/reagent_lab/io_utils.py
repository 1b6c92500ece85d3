"""Shared JSON/YAML I/O helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Type

import yaml


def read_yaml_payload(
    path: Path,
    *,
    error_message: Optional[str] = None,
    error_cls: Type[Exception] = ValueError,
) -> Any:
    """Load YAML (a superset of JSON) from ``path``."""
    with path.open("r", encoding="utf-8") as handle:
        text = handle.read()
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        if error_message:
            raise error_cls(f"{error_message}: {exc}") from exc
        raise


def dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=True) + "\n"


__all__ = ["dump_json", "read_yaml_payload"]
