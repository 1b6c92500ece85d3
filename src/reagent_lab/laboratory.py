"""Laboratory facade: inventory, recipes, and production."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
from types import MappingProxyType
from typing import Any, Optional, Union

import numpy as np

from reagent_lab.config import LabConfig, load_config
from reagent_lab.core import stable_hash
from reagent_lab.engine import ProductionEngine
from reagent_lab.errors import (
    DuplicateNameError,
    EmptyListError,
    InvalidListError,
    InvalidNameError,
    UnknownSubstanceError,
)
from reagent_lab.graph import Component, partition_products
from reagent_lab.inventory import Inventory
from reagent_lab.linalg import solve_cyclic_components
from reagent_lab.recipes import Recipe, build_recipe_table
from reagent_lab.validation import (
    is_sequence,
    normalize_name,
    normalize_quantity,
    require_mapping,
    require_name,
)

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class Laboratory:
    """Stock of substances plus the recipes that turn them into products.

    Construction validates, in order, the known substances, the recipes and
    the initial stock. The recipe dependency graph is partitioned into
    strongly connected components and every cyclic component's production
    matrix is inverted before any initial stock is applied; none of that is
    recomputed afterwards.

    Names are case-insensitive and surrounding whitespace is ignored.
    """

    def __init__(
        self,
        substances: Sequence[str],
        initial_stock: Mapping[str, Any] = _EMPTY,
        recipes: Mapping[str, Any] = _EMPTY,
        *,
        config: Optional[Union[LabConfig, Mapping[str, Any]]] = None,
    ) -> None:
        self._config = load_config(config)
        inventory = Inventory(residue_tolerance=self._config.residue_tolerance)
        self._raw = self._declare_substances(inventory, substances)
        self._recipes = build_recipe_table(recipes, inventory)
        self._partition = partition_products(self._recipes)
        self._systems = solve_cyclic_components(
            self._partition,
            self._recipes,
            pivot_tolerance=self._config.pivot_tolerance,
        )
        self._apply_initial_stock(inventory, initial_stock)
        self._inventory = inventory
        self._engine = ProductionEngine(
            inventory,
            self._recipes,
            self._partition,
            self._systems,
        )
        logger.info(
            "Laboratory ready: %d substances, %d products, %d cyclic components",
            len(self._raw),
            len(self._recipes),
            len(self._systems),
        )

    @staticmethod
    def _declare_substances(inventory: Inventory, substances: Any) -> tuple[str, ...]:
        if not is_sequence(substances):
            raise InvalidListError("Laboratory expects a list of known substances")
        if len(substances) == 0:
            raise EmptyListError("At least one substance must be provided")
        declared: list[str] = []
        for index, name in enumerate(substances):
            normalized = normalize_name(name)
            if normalized is None:
                raise InvalidNameError(
                    f"Invalid substance name at index {index}: {name!r}"
                )
            if normalized in inventory:
                raise DuplicateNameError(f"Duplicate substance name: {normalized}")
            inventory.declare(normalized)
            declared.append(normalized)
        return tuple(declared)

    @staticmethod
    def _apply_initial_stock(inventory: Inventory, initial_stock: Any) -> None:
        payload = require_mapping(
            initial_stock,
            "Initial stock must be provided as a mapping",
        )
        levels: dict[str, float] = {}
        for name, quantity in payload.items():
            normalized = require_name(name, "substance name in initial stock")
            if normalized not in inventory:
                raise UnknownSubstanceError(
                    f"Initial stock references unknown substance: {normalized}",
                    context={"name": normalized},
                )
            levels[normalized] = normalize_quantity(
                quantity, f"Initial stock of {normalized}"
            )
        for name, quantity in levels.items():
            inventory.set(name, quantity)

    @property
    def config(self) -> LabConfig:
        return self._config

    @property
    def substances(self) -> tuple[str, ...]:
        """Raw substances, in declaration order."""
        return self._raw

    @property
    def products(self) -> tuple[str, ...]:
        return tuple(self._recipes)

    @property
    def components(self) -> tuple[Component, ...]:
        """Strongly connected components of products, sinks first."""
        return self._partition.components

    def recipe(self, product: str) -> Recipe:
        name = require_name(product)
        if name not in self._recipes:
            raise UnknownSubstanceError(f"No recipe for: {name}", context={"name": name})
        return self._recipes[name]

    def component_of(self, product: str) -> Component:
        name = require_name(product)
        if name not in self._recipes:
            raise UnknownSubstanceError(f"No recipe for: {name}", context={"name": name})
        return self._partition.component_of(name)

    def inverse_for(self, component_id: int) -> np.ndarray:
        """Cached (I - M)^-1 of a cyclic component (read-only array)."""
        try:
            return self._systems[component_id].inverse
        except KeyError:
            raise UnknownSubstanceError(
                f"Component {component_id} is not cyclic or does not exist.",
                context={"component_id": component_id},
            ) from None

    def get_quantity(self, name: str) -> float:
        return self._inventory.get(name)

    def add(self, name: str, amount: float) -> float:
        """Increase stock of ``name`` by ``amount`` and return the new total."""
        return self._inventory.add(name, amount)

    def make(self, product: str, desired_quantity: float) -> float:
        """Produce up to ``desired_quantity`` of ``product`` from current stock.

        Missing reagents that have recipes of their own are produced first.
        Returns the quantity actually produced, which may be smaller than
        requested, or 0 when nothing can be made or ``product`` has no
        recipe. Raises InvalidNameError / InvalidQuantityError for malformed
        requests; shortages never raise.
        """
        name = require_name(product)
        quantity = normalize_quantity(desired_quantity)
        return self._engine.make(name, quantity)

    def snapshot(self) -> dict[str, float]:
        return self._inventory.snapshot()

    def structure_fingerprint(self) -> str:
        """Hash of the SCC partition and cached inverses."""
        payload = {
            "components": self._partition.components,
            "inverses": {
                str(component_id): system.inverse
                for component_id, system in self._systems.items()
            },
        }
        return stable_hash(payload)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(substances={len(self._raw)}, "
            f"products={len(self._recipes)})"
        )


__all__ = ["Laboratory"]
