"""Production engine: acyclic and steady-state cyclic resolution."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Generator, Mapping
import logging
import math
from typing import Optional

from reagent_lab.errors import CircularDependencyError
from reagent_lab.graph import Component, ComponentPartition
from reagent_lab.inventory import Inventory
from reagent_lab.linalg import ComponentSystem
from reagent_lab.recipes import RecipeTable

logger = logging.getLogger(__name__)

# A resolution step yields (substance, shortfall) requests and returns the
# quantity it produced.
Resolution = Generator[tuple[str, float], Optional[float], float]


class ProductionEngine:
    """Resolve production requests against an inventory.

    Each request is driven by an explicit stack of resolution steps, so the
    depth of a recipe chain is not bounded by Python's recursion limit. A
    step suspends whenever one of its reagents is short and producible; the
    shortfall is pushed as a new step and the suspended one resumes once it
    finishes. A fresh in-flight set is created per request and passed to
    every step: products enter it while their reagents are being topped up
    and leave it before their step returns.
    """

    def __init__(
        self,
        inventory: Inventory,
        recipes: RecipeTable,
        partition: ComponentPartition,
        systems: Mapping[int, ComponentSystem],
    ) -> None:
        self._inventory = inventory
        self._recipes = recipes
        self._partition = partition
        self._systems = systems

    def make(self, product: str, quantity: float) -> float:
        """Produce up to ``quantity`` of an already-normalized product."""
        if quantity == 0 or product not in self._recipes:
            return 0.0
        in_flight: set[str] = set()
        stack: list[Resolution] = [self._step(product, quantity, in_flight)]
        produced: Optional[float] = None
        while stack:
            try:
                substance, missing = stack[-1].send(produced)
            except StopIteration as done:
                stack.pop()
                produced = done.value
                continue
            produced = None
            stack.append(self._step(substance, missing, in_flight))
        logger.debug("make(%s, %r) -> %r", product, quantity, produced)
        return produced or 0.0

    def _step(self, product: str, quantity: float, in_flight: set[str]) -> Resolution:
        component = self._partition.component_of(product)
        if component.cyclic:
            return self._make_cyclic(component, product, quantity, in_flight)
        return self._make_acyclic(product, quantity, in_flight)

    def _shortfall(self, substance: str, required: float) -> float:
        """Amount of ``substance`` still needed, or 0 when it cannot be made."""
        missing = required - self._inventory.level(substance)
        if missing <= 0 or substance not in self._recipes:
            return 0.0
        return missing

    def _make_acyclic(
        self,
        product: str,
        quantity: float,
        in_flight: set[str],
    ) -> Resolution:
        if product in in_flight:
            raise CircularDependencyError(
                f"Circular recipe detected while producing: {product}",
                context={"product": product, "in_flight": sorted(in_flight)},
            )
        requirements = self._recipes.requirements(product)
        in_flight.add(product)
        try:
            for substance, coefficient in requirements.items():
                missing = self._shortfall(substance, coefficient * quantity)
                if missing > 0:
                    yield substance, missing
        finally:
            in_flight.discard(product)

        achievable = quantity
        for substance, coefficient in requirements.items():
            if coefficient == 0:
                continue
            achievable = min(achievable, self._inventory.level(substance) / coefficient)
        if achievable <= 0 or not math.isfinite(achievable):
            return 0.0

        deltas: defaultdict[str, float] = defaultdict(float)
        for substance, coefficient in requirements.items():
            deltas[substance] -= coefficient * achievable
        deltas[product] += achievable
        self._inventory.apply(deltas)
        return achievable

    def _plan_cycle(
        self,
        system: ComponentSystem,
        product: str,
        quantity: float,
    ) -> dict[str, float]:
        component = system.component
        gross = system.gross_production(product, quantity)
        target = component.index_of(product)
        planned: dict[str, float] = {}
        for idx, member in enumerate(component.members):
            required = max(float(gross[idx]), 0.0)
            stock = self._inventory.level(member)
            if idx == target:
                # Stock only offsets what the cycle eats internally.
                internal = max(required - quantity, 0.0)
                amount = quantity + max(internal - stock, 0.0)
            else:
                amount = max(required - stock, 0.0)
            if amount > 0:
                planned[member] = amount
        return planned

    def _make_cyclic(
        self,
        component: Component,
        product: str,
        quantity: float,
        in_flight: set[str],
    ) -> Resolution:
        members = component.members
        reentered = [member for member in members if member in in_flight]
        if reentered:
            raise CircularDependencyError(
                f"Circular recipe detected while producing: {product}",
                context={"product": product, "in_flight": sorted(in_flight)},
            )
        system = self._systems[component.id]
        if not system.productive:
            logger.debug("Component %d cannot net output of %s", component.id, product)
            return 0.0

        planned = self._plan_cycle(system, product, quantity)
        member_set = set(members)
        external: dict[str, float] = {}
        for member, amount in planned.items():
            for substance, coefficient in self._recipes.requirements(member).items():
                if substance in member_set:
                    continue
                need = coefficient * amount
                if need > 0:
                    external[substance] = external.get(substance, 0.0) + need
        if not external:
            return 0.0

        in_flight.update(members)
        try:
            for substance, required in external.items():
                missing = self._shortfall(substance, required)
                if missing > 0:
                    yield substance, missing
        finally:
            in_flight.difference_update(members)

        scale = 1.0
        for substance, required in external.items():
            available = self._inventory.level(substance)
            if available <= 0:
                scale = 0.0
                break
            scale = min(scale, available / required)
        if scale <= 0 or not math.isfinite(scale):
            return 0.0

        deltas: defaultdict[str, float] = defaultdict(float)
        for member, amount in planned.items():
            produced = amount * scale
            deltas[member] += produced
            for substance, coefficient in self._recipes.requirements(member).items():
                deltas[substance] -= coefficient * produced
        self._inventory.apply(deltas)
        logger.debug(
            "Cycle %d produced %s at scale %r",
            component.id,
            {member: amount * scale for member, amount in planned.items()},
            scale,
        )
        return quantity * scale


__all__ = ["ProductionEngine"]
