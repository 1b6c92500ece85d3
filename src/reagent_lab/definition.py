"""Laboratory definition files (YAML or JSON)."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from reagent_lab.errors import ConfigError
from reagent_lab.io_utils import read_yaml_payload
from reagent_lab.laboratory import Laboratory

_ALLOWED_KEYS = {"substances", "stock", "recipes", "config"}


def load_definition(path: str | Path) -> dict[str, Any]:
    def_path = Path(path)
    try:
        payload = read_yaml_payload(
            def_path,
            error_message=f"Failed to parse lab definition {def_path}",
            error_cls=ConfigError,
        )
    except OSError as exc:
        raise ConfigError(f"Failed to read lab definition {def_path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Lab definition {def_path} must be a mapping.")
    return dict(payload)


def build_laboratory(payload: Mapping[str, Any]) -> Laboratory:
    """Construct a Laboratory from a parsed definition mapping.

    Expected keys: ``substances`` (list), optional ``stock`` (mapping),
    ``recipes`` (product -> list of ``[coefficient, name]``) and ``config``.
    """
    if not isinstance(payload, Mapping):
        raise ConfigError("Lab definition must be a mapping.")
    unknown = sorted(str(key) for key in payload if key not in _ALLOWED_KEYS)
    if unknown:
        raise ConfigError(f"Unknown keys in lab definition: {unknown}.")
    if "substances" not in payload:
        raise ConfigError("Lab definition must list its substances.")
    # Empty YAML sections parse as None.
    stock = payload.get("stock") or {}
    recipes = payload.get("recipes") or {}
    return Laboratory(
        payload["substances"],
        stock,
        recipes,
        config=payload.get("config"),
    )


def load_laboratory(path: str | Path) -> Laboratory:
    return build_laboratory(load_definition(path))


__all__ = ["build_laboratory", "load_definition", "load_laboratory"]
