"""Shared engagement calculation utilities.

Single source of truth for the raw engagement score used by the topic graph
and by item rankings.
"""

from typing import Any

DEFAULT_LIKE_WEIGHT = 150.0
DEFAULT_COMMENT_WEIGHT = 500.0


def calculate_engagement_score(
    view_count: int | None,
    like_count: int | None,
    comment_count: int | None,
    duration_seconds: int | None,
    like_weight: float = DEFAULT_LIKE_WEIGHT,
    comment_weight: float = DEFAULT_COMMENT_WEIGHT,
    include_duration: bool = True,
    include_likes_comments: bool = True,
) -> float:
    """
    Calculate the raw engagement score of one item.

    Formula:
        views * (duration_seconds / 60) + like_weight * likes + comment_weight * comments

    With include_duration off the view term is plain views; with
    include_likes_comments off the like and comment terms are dropped.
    Missing counts and durations count as zero, so an item without a known
    duration scores nothing for its views when duration is included.

    Args:
        view_count: Views (or plays)
        like_count: Likes
        comment_count: Comments
        duration_seconds: Media duration in seconds
        like_weight: Weight per like
        comment_weight: Weight per comment
        include_duration: Scale views by watch length in minutes
        include_likes_comments: Add weighted likes and comments

    Returns:
        Raw engagement score as float
    """
    views = float(view_count or 0)
    likes = float(like_count or 0)
    comments = float(comment_count or 0)
    duration = float(duration_seconds or 0)

    score = views * (duration / 60.0) if include_duration else views
    if include_likes_comments:
        score += like_weight * likes + comment_weight * comments
    return score


def score_item(item: Any, **weights: Any) -> float:
    """Engagement score for any object with the standard count attributes."""
    return calculate_engagement_score(
        getattr(item, "view_count", 0),
        getattr(item, "like_count", 0),
        getattr(item, "comment_count", 0),
        getattr(item, "duration_seconds", None),
        **weights,
    )
