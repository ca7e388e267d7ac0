"""Persistence for channel suggestions and searched-topic markers."""

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scout.core.database import AsyncSessionLocal
from scout.core.datetime_utils import utc_now
from scout.models import SearchedTopic, SuggestedChannel


class SuggestionRecord(BaseModel):
    """A discovered channel ready to be stored as a suggestion."""

    id: str
    platform: str
    username: str
    full_name: str | None = None
    follower_count: int | None = None
    follows_count: int | None = None
    posts_count: int | None = None
    verified: bool = False
    biography: str | None = None
    external_url: str | None = None
    profile_pic_url: str | None = None
    search_term: str
    category_topic_id: int | None = None


class SuggestionStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory = session_factory or AsyncSessionLocal

    async def is_suggested(self, tenant_id: str, suggestion_id: str) -> bool:
        async with self.session_factory() as db:
            existing = await db.get(SuggestedChannel, (suggestion_id, tenant_id))
            return existing is not None

    async def add_suggestion(self, tenant_id: str, record: SuggestionRecord) -> bool:
        """
        Store a suggestion unless the tenant already has it.

        Returns:
            True if a new suggestion was stored
        """
        async with self.session_factory() as db:
            if await db.get(SuggestedChannel, (record.id, tenant_id)) is not None:
                return False
            db.add(SuggestedChannel(tenant_id=tenant_id, **record.model_dump()))
            await db.commit()
            return True

    async def list_suggestions(
        self, tenant_id: str, limit: int = 100, offset: int = 0
    ) -> list[SuggestedChannel]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(SuggestedChannel)
                .where(SuggestedChannel.tenant_id == tenant_id)
                .order_by(SuggestedChannel.found_at.desc(), SuggestedChannel.id)
                .limit(limit)
                .offset(offset)
            )
            return list(result.scalars().all())

    async def is_topic_searched(self, tenant_id: str, topic_id: int) -> bool:
        async with self.session_factory() as db:
            return await db.get(SearchedTopic, (tenant_id, topic_id)) is not None

    async def mark_topic_searched(self, tenant_id: str, topic_id: int) -> None:
        async with self.session_factory() as db:
            marker = await db.get(SearchedTopic, (tenant_id, topic_id))
            if marker is None:
                db.add(SearchedTopic(tenant_id=tenant_id, topic_id=topic_id))
            else:
                marker.searched_at = utc_now()
            await db.commit()
