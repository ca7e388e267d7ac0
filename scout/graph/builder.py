"""Topic engagement graph builder.

Turns a snapshot of items and their topics into per-topic engagement
multipliers and a directed co-occurrence graph:

1. Raw engagement score per item.
2. Normalize each score by its channel's mean, so a channel's typical item
   scores 1.0 regardless of audience size.
3. Per topic with enough items, a regularized multiplier: the mean normalized
   score with `regularization_weight` virtual items at 1.0 blended in, so
   small samples stay close to baseline.
4. Top exemplars by raw score.
5. Directed co-occurrence weights from an item/topic incidence matrix,
   pruned to the strongest few per topic.
6. Category flags (see scout.graph.categories).

The build is a pure function of its input; identical snapshots give
identical graphs (nodes by name, sums order-independent, ties broken by
name or id).
"""

import math
from collections import defaultdict

import numpy as np

from scout.core.logging import get_logger
from scout.graph.categories import detect_categories
from scout.graph.types import (
    GraphInput,
    GraphParams,
    ItemStats,
    TopicEdge,
    TopicGraph,
    TopicNode,
    exemplar_from,
)
from scout.metrics.engagement import calculate_engagement_score

logger = get_logger(__name__)

# Upper bound when raising the sample floor to respect max_nodes
MAX_SAMPLE_FLOOR = 100


def raw_scores(items: list[ItemStats], params: GraphParams) -> dict[str, float]:
    """Raw engagement score per item id."""
    return {
        item.id: calculate_engagement_score(
            item.view_count,
            item.like_count,
            item.comment_count,
            item.duration_seconds,
            like_weight=params.like_weight,
            comment_weight=params.comment_weight,
            include_duration=params.include_duration,
            include_likes_comments=params.include_likes_comments,
        )
        for item in items
    }


def normalize_by_channel(items: list[ItemStats], scores: dict[str, float]) -> dict[str, float]:
    """
    Divide each score by its channel's mean score.

    A channel whose mean is zero (no engagement recorded at all) gives every
    item 1.0, i.e. exactly baseline.
    """
    by_channel: dict[str, list[float]] = defaultdict(list)
    for item in items:
        by_channel[item.channel_id].append(scores[item.id])

    means = {
        channel_id: math.fsum(values) / len(values) for channel_id, values in by_channel.items()
    }

    normalized: dict[str, float] = {}
    for item in items:
        mean = means[item.channel_id]
        normalized[item.id] = scores[item.id] / mean if mean > 0 else 1.0
    return normalized


def effective_sample_floor(counts: list[int], params: GraphParams) -> int:
    """
    Minimum item count a topic needs to become a node.

    Starts at minimum_sample_size (never below 1, a topic with no items has
    no defined co-occurrence). With max_nodes set, the floor is raised until
    at most max_nodes topics qualify or MAX_SAMPLE_FLOOR is passed.
    """
    floor = max(params.minimum_sample_size, 1)
    if params.max_nodes is None:
        return floor
    while sum(1 for count in counts if count >= floor) > params.max_nodes:
        floor += 1
        if floor > MAX_SAMPLE_FLOOR:
            break
    return floor


def regularized_multiplier(normalized: list[float], regularization_weight: float) -> float:
    """(sum of normalized scores + rw * 1.0) / (n + rw)."""
    total = math.fsum(normalized) + regularization_weight * 1.0
    return total / (len(normalized) + regularization_weight)


def build_topic_graph(data: GraphInput, params: GraphParams | None = None) -> TopicGraph:
    """
    Build the topic engagement graph from a snapshot.

    Args:
        data: Items and topic memberships to build from
        params: Build parameters, defaults if not provided

    Returns:
        TopicGraph with nodes ordered by name and directed edges by index
    """
    params = params or GraphParams()

    items = sorted(data.items, key=lambda item: item.id)
    items_by_id = {item.id: item for item in items}
    scores = raw_scores(items, params)
    normalized = normalize_by_channel(items, scores)

    # Memberships restricted to items present in the snapshot, ids sorted
    topics = sorted(data.topics, key=lambda topic: (topic.name, topic.topic_id))
    members = [sorted(i for i in topic.item_ids if i in items_by_id) for topic in topics]

    floor = effective_sample_floor([len(m) for m in members], params)
    kept = [k for k, item_ids in enumerate(members) if len(item_ids) >= floor]

    nodes: list[TopicNode] = []
    for k in kept:
        item_ids = members[k]
        ranked = sorted(item_ids, key=lambda i: (-scores[i], i))
        nodes.append(
            TopicNode(
                topic_id=topics[k].topic_id,
                name=topics[k].name,
                item_count=len(item_ids),
                multiplier=regularized_multiplier(
                    [normalized[i] for i in item_ids], params.regularization_weight
                ),
                exemplars=[
                    exemplar_from(items_by_id[i], scores[i])
                    for i in ranked[: params.exemplar_count]
                ],
            )
        )

    weights = co_occurrence_weights([members[k] for k in kept], [item.id for item in items])
    edges = prune_edges(nodes, weights, params.max_connections)

    graph = TopicGraph(nodes=nodes, edges=edges, params=params)
    for index in detect_categories(nodes, weights, params):
        nodes[index].is_category = True

    logger.bind(
        items=len(items),
        topics=len(topics),
        nodes=len(nodes),
        edges=len(edges),
        sample_floor=floor,
    ).info("topic_graph_built")
    return graph


def co_occurrence_weights(node_members: list[list[str]], item_ids: list[str]) -> np.ndarray:
    """
    Directed co-occurrence matrix: W[a, b] = |items(a) & items(b)| / |items(a)|.

    Computed from an integer incidence matrix so shared counts are exact.
    The diagonal is zeroed.
    """
    n = len(node_members)
    if n == 0:
        return np.zeros((0, 0), dtype=np.float64)

    column = {item_id: j for j, item_id in enumerate(item_ids)}
    incidence = np.zeros((n, len(item_ids)), dtype=np.int64)
    for a, ids in enumerate(node_members):
        for item_id in ids:
            incidence[a, column[item_id]] = 1

    shared = incidence @ incidence.T
    counts = np.diag(shared).astype(np.float64)
    weights = shared.astype(np.float64) / counts[:, np.newaxis]
    np.fill_diagonal(weights, 0.0)
    return weights


def prune_edges(nodes: list[TopicNode], weights: np.ndarray, max_connections: int) -> list[TopicEdge]:
    """Keep each node's strongest non-zero edges, ties broken by target name."""
    edges: list[TopicEdge] = []
    for a in range(len(nodes)):
        candidates = [
            (float(weights[a, b]), b) for b in range(len(nodes)) if b != a and weights[a, b] > 0
        ]
        candidates.sort(key=lambda c: (-c[0], nodes[c[1]].name))
        for weight, b in candidates[:max_connections]:
            edges.append(TopicEdge(source=a, target=b, weight=weight))
    return edges
