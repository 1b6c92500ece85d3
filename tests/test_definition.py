import pytest

from reagent_lab import ConfigError, Laboratory
from reagent_lab.definition import build_laboratory, load_definition, load_laboratory

YAML_DEFINITION = """\
substances:
  - stardust
  - moonwater
stock:
  stardust: 10
  moonwater: 5
recipes:
  elixir:
    - [2, stardust]
    - [1, moonwater]
  potion:
    - [1, elixir]
config:
  residue_tolerance: 1.0e-12
"""


def test_load_yaml_definition(write_definition) -> None:
    path = write_definition(YAML_DEFINITION, name="lab.yaml")
    lab = load_laboratory(path)

    assert isinstance(lab, Laboratory)
    assert lab.products == ("elixir", "potion")
    assert lab.get_quantity("stardust") == 10
    assert lab.make("potion", 2) == 2
    assert lab.get_quantity("moonwater") == 3


def test_load_json_definition(write_definition) -> None:
    path = write_definition(
        {
            "substances": ["raw"],
            "stock": {"raw": 4},
            "recipes": {"a": [[1, "raw"], [0.5, "b"]], "b": [[1, "a"]]},
        }
    )
    lab = load_laboratory(path)

    assert lab.make("a", 1) == pytest.approx(1)
    assert lab.get_quantity("raw") == pytest.approx(2)


def test_empty_sections_are_allowed(write_definition) -> None:
    path = write_definition("substances: [ore]\nstock:\nrecipes:\n", name="lab.yaml")
    lab = load_laboratory(path)

    assert lab.snapshot() == {"ore": 0.0}


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigError) as exc:
        build_laboratory({"substances": ["ore"], "reactions": {}})
    assert "reactions" in str(exc.value)


def test_missing_substances_are_rejected() -> None:
    with pytest.raises(ConfigError):
        build_laboratory({"stock": {}})


def test_non_mapping_files_are_rejected(write_definition) -> None:
    path = write_definition("- ore\n- coal\n", name="lab.yaml")
    with pytest.raises(ConfigError):
        load_definition(path)


def test_missing_and_malformed_files(tmp_path, write_definition) -> None:
    with pytest.raises(ConfigError):
        load_definition(tmp_path / "missing.yaml")
    path = write_definition("substances: [ore\n", name="broken.yaml")
    with pytest.raises(ConfigError):
        load_definition(path)
