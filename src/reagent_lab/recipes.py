"""Recipe table: product name to ordered reagent requirements."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from reagent_lab.errors import (
    DuplicateNameError,
    InvalidInputError,
    InvalidNameError,
    UnknownSubstanceError,
)
from reagent_lab.inventory import Inventory
from reagent_lab.validation import (
    is_sequence,
    normalize_name,
    normalize_quantity,
    require_mapping,
)


@dataclass(frozen=True)
class Reagent:
    coefficient: float
    substance: str


@dataclass(frozen=True)
class Recipe:
    product: str
    reagents: tuple[Reagent, ...]

    def requirements(self) -> dict[str, float]:
        """Per-reagent coefficient, merging repeated entries in first-seen order."""
        merged: dict[str, float] = {}
        for reagent in self.reagents:
            merged[reagent.substance] = (
                merged.get(reagent.substance, 0.0) + reagent.coefficient
            )
        return merged


class RecipeTable(Mapping[str, Recipe]):
    """Immutable mapping of product name to :class:`Recipe`."""

    def __init__(self, recipes: Mapping[str, Recipe]) -> None:
        self._recipes = dict(recipes)
        self._requirements = {
            name: recipe.requirements() for name, recipe in self._recipes.items()
        }

    def __getitem__(self, product: str) -> Recipe:
        return self._recipes[product]

    def __iter__(self) -> Iterator[str]:
        return iter(self._recipes)

    def __len__(self) -> int:
        return len(self._recipes)

    def requirements(self, product: str) -> dict[str, float]:
        return self._requirements[product]


def _normalize_reagents(
    product: str,
    reagents: Any,
    inventory: Inventory,
) -> tuple[Reagent, ...]:
    if not is_sequence(reagents) or len(reagents) == 0:
        raise InvalidInputError(
            f"Recipe for {product} must be a non-empty list of reagents"
        )
    normalized: list[Reagent] = []
    for index, entry in enumerate(reagents):
        if not is_sequence(entry) or len(entry) != 2:
            raise InvalidInputError(
                f"Invalid reagent definition at index {index} for {product}"
            )
        coefficient, substance = entry
        name = normalize_name(substance)
        if name is None:
            raise InvalidNameError(
                f"Invalid substance name in recipe for {product}: {substance!r}"
            )
        if name not in inventory:
            raise UnknownSubstanceError(
                f"Recipe for {product} references unknown substance: {name}",
                context={"product": product, "reagent": name},
            )
        normalized.append(
            Reagent(
                coefficient=normalize_quantity(
                    coefficient, f"Coefficient of {name} in {product}"
                ),
                substance=name,
            )
        )
    return tuple(normalized)


def build_recipe_table(recipes: Any, inventory: Inventory) -> RecipeTable:
    """Validate ``recipes`` and register every product in ``inventory``.

    Product names are all declared before any reagent list is checked, so a
    recipe may reference a product declared later in the same mapping.
    """
    payload = require_mapping(recipes, "Recipes must be provided as a mapping")
    products: list[tuple[str, Any]] = []
    for product_name, reagents in payload.items():
        product = normalize_name(product_name)
        if product is None:
            raise InvalidNameError(
                f"Invalid product name in recipes: {product_name!r}"
            )
        if product in inventory:
            raise DuplicateNameError(f"Duplicate substance name: {product}")
        inventory.declare(product)
        products.append((product, reagents))

    table: dict[str, Recipe] = {}
    for product, reagents in products:
        table[product] = Recipe(
            product=product,
            reagents=_normalize_reagents(product, reagents, inventory),
        )
    return RecipeTable(table)


__all__ = ["Reagent", "Recipe", "RecipeTable", "build_recipe_table"]
