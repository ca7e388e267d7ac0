from scout.graph.builder import build_topic_graph
from scout.graph.types import GraphInput, GraphParams, ItemStats, TopicGraph, TopicMembership

__all__ = [
    "build_topic_graph",
    "GraphInput",
    "GraphParams",
    "ItemStats",
    "TopicGraph",
    "TopicMembership",
]
