import numpy as np
import pytest

from reagent_lab.errors import SingularSystemError
from reagent_lab.graph import partition_products
from reagent_lab.inventory import Inventory
from reagent_lab.linalg import (
    build_component_matrix,
    invert_matrix,
    solve_cyclic_components,
)
from reagent_lab.recipes import build_recipe_table


def test_invert_matches_numpy() -> None:
    rng = np.random.default_rng(7)
    matrix = rng.normal(size=(6, 6)) + 6 * np.eye(6)

    np.testing.assert_allclose(invert_matrix(matrix), np.linalg.inv(matrix), atol=1e-10)


def test_invert_pivots_past_zero_diagonal() -> None:
    matrix = np.array([[0.0, 1.0], [2.0, 0.0]])

    np.testing.assert_allclose(invert_matrix(matrix), [[0.0, 0.5], [1.0, 0.0]])


def test_invert_does_not_modify_input() -> None:
    matrix = np.array([[4.0, 1.0], [2.0, 3.0]])
    original = matrix.copy()
    invert_matrix(matrix)

    np.testing.assert_array_equal(matrix, original)


def test_singular_matrix_raises() -> None:
    with pytest.raises(SingularSystemError) as exc:
        invert_matrix(np.array([[1.0, 2.0], [2.0, 4.0]]))
    assert exc.value.context["column"] == 1


def test_pivot_tolerance_is_configurable() -> None:
    matrix = np.array([[1e-6, 0.0], [0.0, 1.0]])

    assert invert_matrix(matrix)[0, 0] == pytest.approx(1e6)
    with pytest.raises(SingularSystemError):
        invert_matrix(matrix, pivot_tolerance=1e-3)


def test_non_square_input_is_rejected() -> None:
    with pytest.raises(ValueError):
        invert_matrix(np.zeros((2, 3)))


def test_component_matrix_ignores_external_reagents() -> None:
    inventory = Inventory()
    inventory.declare("raw")
    table = build_recipe_table(
        {"a": [[1, "raw"], [0.5, "b"]], "b": [[1, "a"], [3, "raw"]]},
        inventory,
    )
    partition = partition_products(table)
    component = partition.component_of("a")

    np.testing.assert_array_equal(
        build_component_matrix(component, table),
        [[0.0, 1.0], [0.5, 0.0]],
    )
    systems = solve_cyclic_components(partition, table)
    assert list(systems) == [component.id]
    assert systems[component.id].productive
    np.testing.assert_allclose(systems[component.id].gross_production("a", 1.0), [2.0, 1.0])
