"""Tests for the raw engagement score."""

import pytest

from scout.metrics.engagement import calculate_engagement_score, score_item


class TestCalculateEngagementScore:
    """Tests for calculate_engagement_score."""

    def test_full_formula(self):
        """Should scale views by minutes and add weighted likes and comments."""
        # 1000 * (120 / 60) + 150 * 10 + 500 * 2 = 4500
        assert calculate_engagement_score(1000, 10, 2, 120) == pytest.approx(4500.0)

    def test_without_duration(self):
        """Should use plain views when duration is excluded."""
        score = calculate_engagement_score(1000, 10, 2, 120, include_duration=False)
        assert score == pytest.approx(1000 + 1500 + 1000)

    def test_without_likes_and_comments(self):
        """Should drop the like and comment terms."""
        score = calculate_engagement_score(1000, 10, 2, 30, include_likes_comments=False)
        assert score == pytest.approx(500.0)

    def test_missing_values_count_as_zero(self):
        """Should treat None counts and duration as zero."""
        assert calculate_engagement_score(None, None, None, None) == 0.0
        assert calculate_engagement_score(1000, 0, 0, None) == 0.0

    def test_score_item_reads_attributes(self, make_item):
        """Should score any object with the standard count attributes."""
        item = make_item("a", view_count=60, like_count=1, comment_count=0, duration_seconds=60)
        assert score_item(item, like_weight=10) == pytest.approx(70.0)
