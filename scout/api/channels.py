"""Tracked channel and item API endpoints."""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import select

from scout.config import get_config
from scout.dependencies import DBSession
from scout.metrics.engagement import score_item
from scout.models import Channel, ContentItem

router = APIRouter()


class ChannelResponse(BaseModel):
    """Response model for a tracked channel."""

    id: str
    tenant_id: str
    handle: str
    platform: str
    title: str
    follower_count: int | None
    posts_count: int | None
    thumbnail_url: str | None
    is_active: bool
    initial_scrape_running: bool

    model_config = {"from_attributes": True}


class ItemResponse(BaseModel):
    """Response model for a content item with its engagement score."""

    id: str
    channel_id: str
    platform: str
    title: str
    published_at: datetime | None
    view_count: int
    like_count: int
    comment_count: int
    duration_seconds: int | None
    transcription_status: str
    local_image_path: str | None
    engagement_score: float


def _item_response(item: ContentItem, score: float) -> ItemResponse:
    return ItemResponse(
        id=item.id,
        channel_id=item.channel_id,
        platform=item.platform,
        title=item.title,
        published_at=item.published_at,
        view_count=item.view_count,
        like_count=item.like_count,
        comment_count=item.comment_count,
        duration_seconds=item.duration_seconds,
        transcription_status=item.transcription_status.value,
        local_image_path=item.local_image_path,
        engagement_score=score,
    )


@router.get("/channels", response_model=list[ChannelResponse])
async def list_channels(
    db: DBSession,
    tenant_id: str | None = Query(default=None),
) -> list[ChannelResponse]:
    """List tracked channels."""
    query = select(Channel).order_by(Channel.title)
    if tenant_id:
        query = query.where(Channel.tenant_id == tenant_id)
    result = await db.execute(query)
    return [ChannelResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/channels/{channel_id}/items", response_model=list[ItemResponse])
async def list_channel_items(
    channel_id: str,
    db: DBSession,
    limit: int = Query(default=50, ge=1, le=500),
) -> list[ItemResponse]:
    """List a channel's items, newest first."""
    channel = await db.get(Channel, channel_id)
    if channel is None:
        raise HTTPException(status_code=404, detail="Channel not found")

    result = await db.execute(
        select(ContentItem)
        .where(ContentItem.channel_id == channel_id)
        .order_by(ContentItem.published_at.desc())
        .limit(limit)
    )
    weights = _score_weights()
    return [_item_response(item, score_item(item, **weights)) for item in result.scalars().all()]


@router.get("/items/top", response_model=list[ItemResponse])
async def top_items(
    db: DBSession,
    tenant_id: str | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=200),
) -> list[ItemResponse]:
    """Items ranked by raw engagement score, highest first."""
    query = select(ContentItem)
    if tenant_id:
        query = query.join(Channel, Channel.id == ContentItem.channel_id).where(
            Channel.tenant_id == tenant_id
        )
    result = await db.execute(query)
    weights = _score_weights()
    scored = [(score_item(item, **weights), item) for item in result.scalars().all()]
    scored.sort(key=lambda pair: (-pair[0], pair[1].id))
    return [_item_response(item, score) for score, item in scored[:limit]]


def _score_weights() -> dict[str, object]:
    graph = get_config().graph
    return {
        "like_weight": graph.like_weight,
        "comment_weight": graph.comment_weight,
        "include_duration": graph.include_duration,
        "include_likes_comments": graph.include_likes_comments,
    }
