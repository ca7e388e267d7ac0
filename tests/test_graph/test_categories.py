"""Tests for category detection."""

from scout.graph.builder import build_topic_graph
from scout.graph.types import GraphParams


class TestDetectCategories:
    """Tests for category flags on built graphs."""

    def test_hub_with_strong_incoming_edges_is_category(self, make_graph_input):
        """Should flag a topic that several narrower topics mostly co-occur with."""
        data = make_graph_input(
            items={f"i{n}": ("c1", 1) for n in range(1, 7)},
            topics={
                "fitness": ["i1", "i2", "i3", "i4", "i5", "i6"],
                "yoga": ["i1", "i2"],
                "running": ["i3", "i4"],
            },
        )
        graph = build_topic_graph(data, GraphParams())

        flags = {node.name: node.is_category for node in graph.nodes}
        assert flags == {"fitness": True, "running": False, "yoga": False}

    def test_needs_minimum_incoming(self, make_graph_input):
        """Should not flag a topic with a single strong incoming edge."""
        data = make_graph_input(
            items={f"i{n}": ("c1", 1) for n in range(1, 5)},
            topics={"fitness": ["i1", "i2", "i3", "i4"], "yoga": ["i1", "i2"]},
        )
        graph = build_topic_graph(data, GraphParams(category_min_incoming=2))

        assert not any(node.is_category for node in graph.nodes)

    def test_linked_candidates_keep_larger(self, make_graph_input):
        """Should keep only the bigger of two strongly linked candidates."""
        data = make_graph_input(
            items={f"i{n}": ("c1", 1) for n in range(1, 5)},
            topics={
                "fitness": ["i1", "i2", "i3", "i4"],
                "health": ["i1", "i2", "i3"],
                "yoga": ["i1"],
                "gym": ["i2"],
            },
        )
        graph = build_topic_graph(data, GraphParams(category_threshold=0.5))

        categories = [node.name for node in graph.nodes if node.is_category]
        assert categories == ["fitness"]
