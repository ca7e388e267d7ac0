"""Tests for topic selection strategies."""

import pytest

from scout.graph.types import TopicGraph, TopicNode
from scout.suggest.selectors import (
    CategorySelector,
    ItemCountSelector,
    MultiplierSelector,
    get_selector,
)


@pytest.fixture
def graph() -> TopicGraph:
    return TopicGraph(
        nodes=[
            TopicNode(topic_id=1, name="baking", item_count=3, multiplier=1.4),
            TopicNode(topic_id=2, name="cooking", item_count=9, multiplier=0.9, is_category=True),
            TopicNode(topic_id=3, name="desserts", item_count=3, multiplier=1.1),
            TopicNode(topic_id=4, name="pasta", item_count=5, multiplier=1.4),
        ]
    )


class TestSelectors:
    """Tests for the pluggable top-K selectors."""

    def test_item_count(self, graph):
        """Should rank by item count, ties by name."""
        names = [n.name for n in ItemCountSelector().select(graph, 3)]
        assert names == ["cooking", "pasta", "baking"]

    def test_categories_first(self, graph):
        """Should put detected categories ahead of other topics."""
        names = [n.name for n in CategorySelector().select(graph, 2)]
        assert names == ["cooking", "pasta"]

    def test_multiplier(self, graph):
        """Should rank by multiplier, ties by item count."""
        names = [n.name for n in MultiplierSelector().select(graph, 2)]
        assert names == ["pasta", "baking"]

    def test_get_selector(self):
        """Should resolve config names and reject unknown ones."""
        assert isinstance(get_selector("categories"), CategorySelector)
        with pytest.raises(ValueError):
            get_selector("random")
