"""Strategies for choosing which graph topics to search channels for."""

from typing import Protocol

from scout.graph.types import TopicGraph, TopicNode


class TopicSelector(Protocol):
    def select(self, graph: TopicGraph, limit: int) -> list[TopicNode]: ...


class ItemCountSelector:
    """Topics with the most items first, ties by name."""

    def select(self, graph: TopicGraph, limit: int) -> list[TopicNode]:
        ranked = sorted(graph.nodes, key=lambda node: (-node.item_count, node.name))
        return ranked[:limit]


class CategorySelector:
    """Detected category topics first, then the rest by item count."""

    def select(self, graph: TopicGraph, limit: int) -> list[TopicNode]:
        ranked = sorted(
            graph.nodes,
            key=lambda node: (not node.is_category, -node.item_count, node.name),
        )
        return ranked[:limit]


class MultiplierSelector:
    """Topics that lift engagement the most first, ties by item count then name."""

    def select(self, graph: TopicGraph, limit: int) -> list[TopicNode]:
        ranked = sorted(
            graph.nodes,
            key=lambda node: (-node.multiplier, -node.item_count, node.name),
        )
        return ranked[:limit]


SELECTORS: dict[str, type[TopicSelector]] = {
    "item_count": ItemCountSelector,
    "categories": CategorySelector,
    "multiplier": MultiplierSelector,
}


def get_selector(name: str) -> TopicSelector:
    """Look up a selector by config name."""
    try:
        return SELECTORS[name]()
    except KeyError:
        raise ValueError(f"Unknown topic selector: {name}") from None
