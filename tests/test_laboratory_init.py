import pytest

from reagent_lab import (
    DuplicateNameError,
    EmptyListError,
    InvalidInputError,
    InvalidListError,
    InvalidNameError,
    InvalidQuantityError,
    Laboratory,
    UnknownSubstanceError,
)


def test_starts_with_zero_quantity_for_each_substance() -> None:
    lab = Laboratory(["stardust", "moonwater"])
    assert lab.get_quantity("stardust") == 0
    assert lab.get_quantity("moonwater") == 0


def test_initial_stock_accepts_decimals() -> None:
    lab = Laboratory(["stardust", "moonwater"], {"stardust": 1.25})
    assert lab.get_quantity("stardust") == 1.25
    assert lab.get_quantity("moonwater") == 0


def test_names_are_trimmed_and_case_insensitive() -> None:
    lab = Laboratory(["  StarDust "], {"STARDUST": 2})
    assert lab.substances == ("stardust",)
    assert lab.get_quantity(" stardust") == 2


def test_rejects_non_list_substances() -> None:
    with pytest.raises(InvalidListError):
        Laboratory("stardust")
    with pytest.raises(TypeError):
        Laboratory(None)


def test_rejects_empty_substance_list() -> None:
    with pytest.raises(EmptyListError):
        Laboratory([])


def test_rejects_invalid_substance_names() -> None:
    with pytest.raises(InvalidNameError):
        Laboratory(["", "moonwater"])
    with pytest.raises(TypeError):
        Laboratory(["stardust", 3])


def test_rejects_duplicate_substance_names() -> None:
    with pytest.raises(DuplicateNameError):
        Laboratory(["stardust", "Stardust"])


def test_rejects_unknown_initial_stock() -> None:
    with pytest.raises(UnknownSubstanceError):
        Laboratory(["stardust"], {"moonwater": 1})


def test_rejects_invalid_initial_stock_quantities() -> None:
    with pytest.raises(InvalidQuantityError):
        Laboratory(["stardust"], {"stardust": -1})
    with pytest.raises(InvalidQuantityError):
        Laboratory(["stardust"], {"stardust": float("nan")})
    with pytest.raises(InvalidQuantityError):
        Laboratory(["stardust"], {"stardust": True})


def test_rejects_non_mapping_initial_stock() -> None:
    with pytest.raises(InvalidInputError):
        Laboratory(["stardust"], [("stardust", 1)])


def test_registers_products_at_zero() -> None:
    lab = Laboratory(
        ["stardust", "moonwater"],
        {},
        {"elixir": [(1.5, "stardust"), (0.25, "moonwater")]},
    )
    assert lab.get_quantity("elixir") == 0
    assert lab.products == ("elixir",)
    assert lab.recipe("Elixir").reagents[0].coefficient == 1.5


def test_initial_stock_may_target_products() -> None:
    lab = Laboratory(["stardust"], {"elixir": 2}, {"elixir": [[1, "stardust"]]})
    assert lab.get_quantity("elixir") == 2


def test_rejects_invalid_recipe_containers() -> None:
    with pytest.raises(InvalidInputError):
        Laboratory(["stardust"], {}, None)
    with pytest.raises(InvalidInputError):
        Laboratory(["stardust"], {}, [])


def test_rejects_product_colliding_with_substance() -> None:
    with pytest.raises(DuplicateNameError):
        Laboratory(["stardust"], {}, {"stardust": [[1, "stardust"]]})
    with pytest.raises(DuplicateNameError):
        Laboratory(["stardust"], {}, {"gem": [[1, "stardust"]], " GEM": [[2, "stardust"]]})


def test_rejects_recipes_with_unknown_reagents() -> None:
    with pytest.raises(UnknownSubstanceError):
        Laboratory(["stardust"], {}, {"elixir": [[1, "moonwater"]]})


def test_rejects_invalid_reagent_definitions() -> None:
    with pytest.raises(InvalidQuantityError):
        Laboratory(["stardust"], {}, {"elixir": [["not-a-number", "stardust"]]})
    with pytest.raises(InvalidQuantityError):
        Laboratory(["stardust"], {}, {"elixir": [[-1, "stardust"]]})
    with pytest.raises(InvalidInputError):
        Laboratory(["stardust"], {}, {"elixir": [[1, "stardust", 2]]})
    with pytest.raises(InvalidInputError):
        Laboratory(["stardust"], {}, {"elixir": []})
    with pytest.raises(InvalidNameError):
        Laboratory(["stardust"], {}, {"elixir": [[1, 42]]})


def test_recipes_may_reference_products_declared_later() -> None:
    lab = Laboratory(
        ["stardust"],
        {"stardust": 3},
        {"potion": [[1, "elixir"]], "elixir": [[1, "stardust"]]},
    )
    assert lab.make("potion", 2) == 2
    assert lab.get_quantity("stardust") == 1


def test_unknown_component_lookup_raises() -> None:
    lab = Laboratory(["stardust"], {}, {"gem": [[2, "stardust"]]})
    with pytest.raises(UnknownSubstanceError):
        lab.component_of("stardust")
    with pytest.raises(UnknownSubstanceError):
        lab.inverse_for(0)
