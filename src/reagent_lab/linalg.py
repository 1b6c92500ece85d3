"""Linear systems for cyclic groups of recipes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from types import MappingProxyType

import numpy as np

from reagent_lab.config import DEFAULT_PIVOT_TOLERANCE
from reagent_lab.errors import SingularSystemError
from reagent_lab.graph import Component, ComponentPartition
from reagent_lab.recipes import RecipeTable

logger = logging.getLogger(__name__)

_NEGATIVE_SLACK = 1e-9


@dataclass(frozen=True, eq=False)
class ComponentSystem:
    component: Component
    matrix: np.ndarray
    inverse: np.ndarray

    @property
    def productive(self) -> bool:
        """Whether the cycle can net a positive output of its members.

        For a non-negative M, (I - M)^-1 is entrywise non-negative exactly when
        the recirculation gain (spectral radius of M) is below 1.
        """
        scale = max(1.0, float(np.abs(self.inverse).max(initial=0.0)))
        return bool(np.all(self.inverse >= -_NEGATIVE_SLACK * scale))

    def gross_production(self, product: str, quantity: float) -> np.ndarray:
        """Total output per member needed to net ``quantity`` of ``product``."""
        demand = np.zeros(len(self.component.members))
        demand[self.component.index_of(product)] = quantity
        return self.inverse @ demand


def build_component_matrix(component: Component, recipes: RecipeTable) -> np.ndarray:
    """M[row, col]: units of member ``row`` consumed per unit of member ``col``."""
    size = len(component.members)
    position = {member: idx for idx, member in enumerate(component.members)}
    matrix = np.zeros((size, size))
    for col, product in enumerate(component.members):
        for substance, coefficient in recipes.requirements(product).items():
            row = position.get(substance)
            if row is not None:
                matrix[row, col] = coefficient
    return matrix


def invert_matrix(
    matrix: np.ndarray,
    *,
    pivot_tolerance: float = DEFAULT_PIVOT_TOLERANCE,
) -> np.ndarray:
    """Gauss-Jordan inversion with partial pivoting.

    Raises SingularSystemError when the best available pivot of a column has
    magnitude below ``pivot_tolerance``.
    """
    work = np.array(matrix, dtype=float)
    if work.ndim != 2 or work.shape[0] != work.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {work.shape}.")
    size = work.shape[0]
    augmented = np.hstack([work, np.eye(size)])

    for col in range(size):
        # argmax keeps the first row on ties.
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        pivot = augmented[pivot_row, col]
        if abs(pivot) < pivot_tolerance:
            raise SingularSystemError(
                f"Matrix is singular at column {col} (pivot {pivot!r}).",
                context={"column": col, "pivot": float(pivot)},
            )
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]
        augmented[col] /= augmented[col, col]
        for row in range(size):
            if row == col:
                continue
            factor = augmented[row, col]
            if factor != 0.0:
                augmented[row] -= factor * augmented[col]

    return augmented[:, size:].copy()


def solve_component(
    component: Component,
    recipes: RecipeTable,
    *,
    pivot_tolerance: float = DEFAULT_PIVOT_TOLERANCE,
) -> ComponentSystem:
    matrix = build_component_matrix(component, recipes)
    system = np.eye(len(component.members)) - matrix
    try:
        inverse = invert_matrix(system, pivot_tolerance=pivot_tolerance)
    except SingularSystemError as exc:
        raise SingularSystemError(
            "Recipes for "
            + ", ".join(component.members)
            + " form a degenerate cycle with no net production.",
            context={"component": list(component.members), **exc.context},
        ) from exc
    matrix.setflags(write=False)
    inverse.setflags(write=False)
    return ComponentSystem(component=component, matrix=matrix, inverse=inverse)


def solve_cyclic_components(
    partition: ComponentPartition,
    recipes: RecipeTable,
    *,
    pivot_tolerance: float = DEFAULT_PIVOT_TOLERANCE,
) -> Mapping[int, ComponentSystem]:
    """Invert every cyclic component once; keyed by component id."""
    systems: dict[int, ComponentSystem] = {}
    for component in partition.cyclic_components():
        systems[component.id] = solve_component(
            component,
            recipes,
            pivot_tolerance=pivot_tolerance,
        )
        if not systems[component.id].productive:
            logger.warning(
                "Component %d (%s) consumes more of itself than it produces; "
                "it will never yield output.",
                component.id,
                ", ".join(component.members),
            )
        logger.debug(
            "Inverted %dx%d system for component %d: %s",
            len(component.members),
            len(component.members),
            component.id,
            ", ".join(component.members),
        )
    return MappingProxyType(systems)


__all__ = [
    "ComponentSystem",
    "build_component_matrix",
    "invert_matrix",
    "solve_component",
    "solve_cyclic_components",
]
