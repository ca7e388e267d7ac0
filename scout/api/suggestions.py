"""Channel suggestion API endpoints."""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from scout.dependencies import ServicesDep

router = APIRouter()


class SuggestedChannelResponse(BaseModel):
    """Response model for a suggested channel."""

    id: str
    platform: str
    username: str
    full_name: str | None
    follower_count: int | None
    follows_count: int | None
    posts_count: int | None
    verified: bool
    biography: str | None
    external_url: str | None
    profile_pic_url: str | None
    search_term: str
    category_topic_id: int | None
    found_at: datetime

    model_config = {"from_attributes": True}


@router.get("/suggested-channels", response_model=list[SuggestedChannelResponse])
async def list_suggested_channels(
    services: ServicesDep,
    tenant_id: str = Query(default="default"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> list[SuggestedChannelResponse]:
    """List suggestions for a tenant, newest first."""
    suggestions = await services.suggestions.list_suggestions(tenant_id, limit, offset)
    return [SuggestedChannelResponse.model_validate(s) for s in suggestions]


@router.post("/suggestions/run")
async def run_suggestions(
    services: ServicesDep,
    tenant_id: str = Query(default="default"),
) -> dict[str, int]:
    """Run one discovery pass over the tenant's current graph."""
    stats = await services.run_suggestions(tenant_id)
    if stats is None:
        raise HTTPException(status_code=503, detail="Channel suggestions are not configured")
    return stats.to_dict()
