from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    src_root = Path(__file__).resolve().parents[1] / "src"
    src_path = str(src_root)
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


@pytest.fixture
def write_definition(tmp_path):
    def _write(payload, name: str = "lab.json") -> Path:
        path = tmp_path / name
        if isinstance(payload, str):
            path.write_text(payload, encoding="utf-8")
        else:
            path.write_text(json.dumps(payload) + "\n", encoding="utf-8")
        return path

    return _write
