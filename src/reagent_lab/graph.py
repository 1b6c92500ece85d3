"""Product dependency graph and strongly connected components."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import logging

from reagent_lab.recipes import RecipeTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Component:
    id: int
    members: tuple[str, ...]
    cyclic: bool

    def index_of(self, product: str) -> int:
        return self.members.index(product)


@dataclass(frozen=True)
class ComponentPartition:
    components: tuple[Component, ...]
    membership: Mapping[str, int]

    def component_of(self, product: str) -> Component:
        return self.components[self.membership[product]]

    def is_cyclic(self, product: str) -> bool:
        return self.component_of(product).cyclic

    def cyclic_components(self) -> list[Component]:
        return [component for component in self.components if component.cyclic]


def build_dependency_graph(recipes: RecipeTable) -> dict[str, list[str]]:
    """Edges product -> reagent for every reagent that has its own recipe."""
    adjacency: dict[str, list[str]] = {}
    for product in recipes:
        targets: list[str] = []
        for reagent in recipes[product].reagents:
            if reagent.substance in recipes and reagent.substance not in targets:
                targets.append(reagent.substance)
        adjacency[product] = targets
    return adjacency


def _strongly_connected_components(
    nodes: Sequence[str],
    adjacency: Mapping[str, Sequence[str]],
) -> list[list[str]]:
    # Tarjan's algorithm driven by an explicit work stack of (node, next edge).
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    components: list[list[str]] = []
    counter = 0

    for root in nodes:
        if root in index:
            continue
        work: list[tuple[str, int]] = [(root, 0)]
        while work:
            node, edge = work.pop()
            if edge == 0:
                index[node] = counter
                lowlink[node] = counter
                counter += 1
                stack.append(node)
                on_stack.add(node)
            neighbors = adjacency.get(node, ())
            descended = False
            while edge < len(neighbors):
                neighbor = neighbors[edge]
                edge += 1
                if neighbor not in index:
                    work.append((node, edge))
                    work.append((neighbor, 0))
                    descended = True
                    break
                if neighbor in on_stack:
                    lowlink[node] = min(lowlink[node], index[neighbor])
            if descended:
                continue
            if lowlink[node] == index[node]:
                component: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(component)
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])
    return components


def partition_products(recipes: RecipeTable) -> ComponentPartition:
    """Split products into SCCs, sinks first (reverse topological order)."""
    adjacency = build_dependency_graph(recipes)
    order = {product: position for position, product in enumerate(recipes)}
    raw_components = _strongly_connected_components(list(recipes), adjacency)

    components: list[Component] = []
    membership: dict[str, int] = {}
    for component_id, raw in enumerate(raw_components):
        members = tuple(sorted(raw, key=order.__getitem__))
        if len(members) > 1:
            cyclic = True
        else:
            product = members[0]
            cyclic = recipes.requirements(product).get(product, 0.0) > 0
        components.append(Component(id=component_id, members=members, cyclic=cyclic))
        for member in members:
            membership[member] = component_id

    logger.debug(
        "Partitioned %d products into %d components (%d cyclic)",
        len(order),
        len(components),
        sum(1 for component in components if component.cyclic),
    )
    return ComponentPartition(components=tuple(components), membership=membership)


__all__ = [
    "Component",
    "ComponentPartition",
    "build_dependency_graph",
    "partition_products",
]
