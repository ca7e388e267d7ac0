"""Value types for the topic engagement graph.

The graph is index-based: nodes live in one list ordered by name, and edges
refer to nodes by position, so a serialized graph has no object cycles.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from scout.config import GraphConfig
from scout.core.datetime_utils import to_iso


@dataclass(frozen=True)
class ItemStats:
    """Engagement facts about one item, as read from the content store."""

    id: str
    channel_id: str
    title: str = ""
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    duration_seconds: int | None = None
    published_at: datetime | None = None


@dataclass(frozen=True)
class TopicMembership:
    """A topic and the ids of every item tagged with it (any provenance)."""

    topic_id: int
    name: str
    item_ids: frozenset[str]


@dataclass
class GraphInput:
    """Point-in-time snapshot the builder works from."""

    items: list[ItemStats] = field(default_factory=list)
    topics: list[TopicMembership] = field(default_factory=list)


@dataclass(frozen=True)
class GraphParams:
    """Tunable inputs of a graph build."""

    regularization_weight: float = 10.0
    minimum_sample_size: int = 1
    max_nodes: int | None = None
    exemplar_count: int = 3
    max_connections: int = 5
    include_duration: bool = True
    include_likes_comments: bool = True
    like_weight: float = 150.0
    comment_weight: float = 500.0
    category_threshold: float = 0.5
    category_min_incoming: int = 2

    @classmethod
    def from_config(cls, config: GraphConfig) -> "GraphParams":
        return cls(
            regularization_weight=float(config.regularization_weight),
            minimum_sample_size=int(config.minimum_sample_size),
            max_nodes=config.max_nodes,
            exemplar_count=int(config.exemplar_count),
            max_connections=int(config.max_connections),
            include_duration=bool(config.include_duration),
            include_likes_comments=bool(config.include_likes_comments),
            like_weight=float(config.like_weight),
            comment_weight=float(config.comment_weight),
            category_threshold=float(config.category_threshold),
            category_min_incoming=int(config.category_min_incoming),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Exemplar:
    """One of a topic's highest raw-engagement items."""

    id: str
    title: str
    view_count: int
    like_count: int
    comment_count: int
    published_at: str | None
    score: float


@dataclass
class TopicNode:
    topic_id: int
    name: str
    item_count: int
    multiplier: float
    exemplars: list[Exemplar] = field(default_factory=list)
    is_category: bool = False


@dataclass(frozen=True)
class TopicEdge:
    """Directed edge: weight = share of source's items that also carry target."""

    source: int
    target: int
    weight: float


@dataclass(frozen=True)
class Relationship:
    """Undirected view of a node pair for display."""

    source: int
    target: int
    forward_strength: float
    reverse_strength: float
    max_strength: float
    label: str


@dataclass
class TopicGraph:
    nodes: list[TopicNode] = field(default_factory=list)
    edges: list[TopicEdge] = field(default_factory=list)
    params: GraphParams = field(default_factory=GraphParams)

    def node_index(self, name: str) -> int | None:
        for index, node in enumerate(self.nodes):
            if node.name == name:
                return index
        return None

    def outgoing(self, index: int) -> list[TopicEdge]:
        return [edge for edge in self.edges if edge.source == index]

    def incoming(self, index: int) -> list[TopicEdge]:
        return [edge for edge in self.edges if edge.target == index]

    def weight(self, source: int, target: int) -> float:
        """Kept edge weight from source to target, 0.0 when pruned or absent."""
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge.weight
        return 0.0

    def relationships(self) -> list[Relationship]:
        """
        One entry per connected node pair, in edge order.

        The pair is keyed by its first appearance; the reverse strength is the
        kept edge in the other direction, or 0.0 if that edge was pruned.
        """
        seen: set[tuple[int, int]] = set()
        result: list[Relationship] = []
        for edge in self.edges:
            key = (min(edge.source, edge.target), max(edge.source, edge.target))
            if key in seen:
                continue
            seen.add(key)
            reverse = self.weight(edge.target, edge.source)
            result.append(
                Relationship(
                    source=edge.source,
                    target=edge.target,
                    forward_strength=edge.weight,
                    reverse_strength=reverse,
                    max_strength=max(edge.weight, reverse),
                    label=f"{self.nodes[edge.source].name} - {self.nodes[edge.target].name}",
                )
            )
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [asdict(node) for node in self.nodes],
            "edges": [asdict(edge) for edge in self.edges],
            "params": self.params.to_dict(),
        }

    def to_json(self) -> str:
        """Canonical JSON: identical graphs serialize to identical bytes."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TopicGraph":
        nodes = [
            TopicNode(
                topic_id=node["topic_id"],
                name=node["name"],
                item_count=node["item_count"],
                multiplier=node["multiplier"],
                exemplars=[Exemplar(**exemplar) for exemplar in node.get("exemplars", [])],
                is_category=node.get("is_category", False),
            )
            for node in data.get("nodes", [])
        ]
        edges = [TopicEdge(**edge) for edge in data.get("edges", [])]
        params = GraphParams(**data.get("params", {}))
        return cls(nodes=nodes, edges=edges, params=params)

    @classmethod
    def from_json(cls, payload: str) -> "TopicGraph":
        return cls.from_dict(json.loads(payload))


def exemplar_from(item: ItemStats, score: float) -> Exemplar:
    return Exemplar(
        id=item.id,
        title=item.title,
        view_count=item.view_count,
        like_count=item.like_count,
        comment_count=item.comment_count,
        published_at=to_iso(item.published_at),
        score=score,
    )
