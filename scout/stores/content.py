"""Persistence for items, channels, topics and graph snapshots."""

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scout.core.database import AsyncSessionLocal
from scout.core.datetime_utils import utc_now
from scout.core.logging import get_logger
from scout.graph.types import GraphInput, ItemStats, TopicGraph, TopicMembership
from scout.ingest.base import ChannelProfile, ItemCore
from scout.ingest.normalizer import normalize_topic_name
from scout.models import (
    Channel,
    ContentItem,
    ItemTopic,
    Topic,
    TopicGraphSnapshot,
    TopicSource,
)

logger = get_logger(__name__)

# Keeps IN (...) lists under SQLite's bound parameter limit
LOOKUP_CHUNK_SIZE = 500


class ContentStore:
    """Data access for the content side of the system."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory = session_factory or AsyncSessionLocal

    # -- items -------------------------------------------------------------

    async def exists_batch(self, ids: Iterable[str]) -> set[str]:
        """Return the subset of ids already stored, in one lookup per chunk."""
        unique = sorted(set(ids))
        found: set[str] = set()
        async with self.session_factory() as db:
            for start in range(0, len(unique), LOOKUP_CHUNK_SIZE):
                chunk = unique[start : start + LOOKUP_CHUNK_SIZE]
                result = await db.execute(select(ContentItem.id).where(ContentItem.id.in_(chunk)))
                found.update(result.scalars().all())
        return found

    async def upsert_items(self, records: list[dict[str, Any]]) -> int:
        """
        Insert or update items by id.

        Each record holds ContentItem column values and must include "id".
        An existing row is updated in place; a second row is never created.

        Returns:
            Number of records written
        """
        if not records:
            return 0
        async with self.session_factory() as db:
            for record in records:
                item = await db.get(ContentItem, record["id"])
                if item is None:
                    db.add(ContentItem(**record))
                else:
                    for name, value in record.items():
                        if name != "id":
                            setattr(item, name, value)
            await db.commit()
        return len(records)

    async def get_item(self, item_id: str) -> ContentItem | None:
        async with self.session_factory() as db:
            return await db.get(ContentItem, item_id)

    async def update_metrics(self, items: list[ItemCore]) -> int:
        """
        Refresh engagement counts and last_synced_at for known items.

        Enrichment fields (transcription, topics, media) are left untouched.

        Returns:
            Number of rows updated
        """
        if not items:
            return 0
        now = utc_now()
        updated = 0
        async with self.session_factory() as db:
            for item in items:
                result = await db.execute(
                    update(ContentItem)
                    .where(ContentItem.id == item.id)
                    .values(
                        view_count=item.view_count,
                        like_count=item.like_count,
                        comment_count=item.comment_count,
                        last_synced_at=now,
                    )
                )
                updated += result.rowcount or 0
            await db.commit()
        return updated

    async def list_items(
        self, channel_id: str | None = None, limit: int = 100
    ) -> list[ContentItem]:
        async with self.session_factory() as db:
            query = select(ContentItem)
            if channel_id:
                query = query.where(ContentItem.channel_id == channel_id)
            result = await db.execute(
                query.order_by(ContentItem.published_at.desc(), ContentItem.id).limit(limit)
            )
            return list(result.scalars().all())

    # -- channels ----------------------------------------------------------

    async def upsert_channel(
        self,
        profile: ChannelProfile,
        tenant_id: str,
        initial_scrape_running: bool | None = None,
    ) -> Channel:
        """
        Insert or refresh a channel from its fetched profile.

        The tenant that first stores a channel owns it; later syncs from other
        tenants refresh the profile fields but never change the owner.
        """
        async with self.session_factory() as db:
            channel = await db.get(Channel, profile.id)
            if channel is None:
                channel = Channel(id=profile.id, tenant_id=tenant_id, is_active=True)
                db.add(channel)
            channel.handle = profile.handle
            channel.platform = profile.platform
            channel.title = profile.title
            channel.follower_count = profile.follower_count
            channel.follows_count = profile.follows_count
            channel.posts_count = profile.posts_count
            channel.thumbnail_url = profile.thumbnail_url
            channel.biography = profile.biography
            channel.verified = profile.verified
            channel.external_urls = list(profile.external_urls)
            if initial_scrape_running is not None:
                channel.initial_scrape_running = initial_scrape_running
            await db.commit()
            return channel

    async def set_initial_scrape_running(self, channel_id: str, running: bool) -> None:
        async with self.session_factory() as db:
            await db.execute(
                update(Channel)
                .where(Channel.id == channel_id)
                .values(initial_scrape_running=running)
            )
            await db.commit()

    async def get_channel(self, channel_id: str) -> Channel | None:
        async with self.session_factory() as db:
            return await db.get(Channel, channel_id)

    async def list_channels(
        self, tenant_id: str | None = None, active_only: bool = False
    ) -> list[Channel]:
        async with self.session_factory() as db:
            query = select(Channel)
            if tenant_id:
                query = query.where(Channel.tenant_id == tenant_id)
            if active_only:
                query = query.where(Channel.is_active.is_(True))
            result = await db.execute(query.order_by(Channel.tenant_id, Channel.id))
            return list(result.scalars().all())

    async def is_tracked(self, platform: str, handle: str) -> bool:
        """Whether a channel with this handle (or qualified id) is already stored."""
        qualified = f"ig_{handle.lower()}" if platform == "instagram" else handle
        async with self.session_factory() as db:
            result = await db.execute(
                select(Channel.id)
                .where(
                    (Channel.id == qualified)
                    | ((Channel.platform == platform) & (func.lower(Channel.handle) == handle.lower()))
                )
                .limit(1)
            )
            return result.scalar_one_or_none() is not None

    # -- topics ------------------------------------------------------------

    async def _topic_ids(self, db: AsyncSession, names: list[str]) -> dict[str, int]:
        """Resolve names to topic ids, creating missing topics."""
        result = await db.execute(select(Topic).where(Topic.name.in_(names)))
        ids = {topic.name: topic.id for topic in result.scalars().all()}
        for name in names:
            if name not in ids:
                topic = Topic(name=name)
                db.add(topic)
                await db.flush()
                ids[name] = topic.id
        return ids

    async def upsert_topic(self, name: str) -> int:
        """Return the id of the normalized topic, creating it if needed."""
        normalized = normalize_topic_name(name)
        if not normalized:
            raise ValueError("Topic name is empty after normalization")
        async with self.session_factory() as db:
            ids = await self._topic_ids(db, [normalized])
            await db.commit()
            return ids[normalized]

    async def set_topic_associations(
        self, item_id: str, source: TopicSource, names: Iterable[str]
    ) -> list[str]:
        """
        Replace an item's topics for one provenance.

        Existing associations for exactly (item_id, source) are removed first;
        associations under the other source are untouched. Names are
        normalized and de-duplicated.

        Returns:
            The normalized names now associated
        """
        normalized: list[str] = []
        for name in names:
            clean = normalize_topic_name(name)
            if clean and clean not in normalized:
                normalized.append(clean)

        async with self.session_factory() as db:
            await db.execute(
                delete(ItemTopic).where(ItemTopic.item_id == item_id, ItemTopic.source == source)
            )
            if normalized:
                ids = await self._topic_ids(db, normalized)
                for name in normalized:
                    db.add(ItemTopic(item_id=item_id, topic_id=ids[name], source=source))
            await db.commit()
        return normalized

    async def get_item_topics(self, item_id: str) -> dict[str, list[str]]:
        """Topic names of an item grouped by source value."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(ItemTopic.source, Topic.name)
                .join(Topic, Topic.id == ItemTopic.topic_id)
                .where(ItemTopic.item_id == item_id)
                .order_by(Topic.name)
            )
            grouped: dict[str, list[str]] = defaultdict(list)
            for source, name in result.all():
                grouped[source.value].append(name)
            return dict(grouped)

    async def get_all_items_and_topics(self, tenant_id: str | None = None) -> GraphInput:
        """
        Snapshot of every item's engagement and topic memberships.

        With tenant_id, only items from channels owned by that tenant are
        included. A topic's items are the union over both provenances.
        """
        async with self.session_factory() as db:
            item_query = select(
                ContentItem.id,
                ContentItem.channel_id,
                ContentItem.title,
                ContentItem.view_count,
                ContentItem.like_count,
                ContentItem.comment_count,
                ContentItem.duration_seconds,
                ContentItem.published_at,
            )
            if tenant_id:
                item_query = item_query.join(Channel, Channel.id == ContentItem.channel_id).where(
                    Channel.tenant_id == tenant_id
                )
            rows = (await db.execute(item_query)).all()
            items = [
                ItemStats(
                    id=row.id,
                    channel_id=row.channel_id,
                    title=row.title or "",
                    view_count=row.view_count or 0,
                    like_count=row.like_count or 0,
                    comment_count=row.comment_count or 0,
                    duration_seconds=row.duration_seconds,
                    published_at=row.published_at,
                )
                for row in rows
            ]
            known = {item.id for item in items}

            links = (
                await db.execute(
                    select(Topic.id, Topic.name, ItemTopic.item_id).join(
                        ItemTopic, ItemTopic.topic_id == Topic.id
                    )
                )
            ).all()

        members: dict[tuple[int, str], set[str]] = defaultdict(set)
        for topic_id, name, item_id in links:
            if item_id in known:
                members[(topic_id, name)].add(item_id)

        topics = [
            TopicMembership(topic_id=topic_id, name=name, item_ids=frozenset(ids))
            for (topic_id, name), ids in members.items()
        ]
        return GraphInput(items=items, topics=topics)

    # -- graph snapshots ---------------------------------------------------

    async def save_graph(self, tenant_id: str, graph: TopicGraph) -> int:
        """Store a graph as the tenant's newest snapshot (one atomic insert)."""
        async with self.session_factory() as db:
            snapshot = TopicGraphSnapshot(
                tenant_id=tenant_id,
                params_json=graph.params.to_dict(),
                graph_json=graph.to_json(),
                node_count=len(graph.nodes),
                edge_count=len(graph.edges),
            )
            db.add(snapshot)
            await db.commit()
            return snapshot.id

    async def latest_graph(self, tenant_id: str) -> TopicGraph | None:
        """The tenant's current graph, or None before the first build."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(TopicGraphSnapshot)
                .where(TopicGraphSnapshot.tenant_id == tenant_id)
                .order_by(TopicGraphSnapshot.created_at.desc(), TopicGraphSnapshot.id.desc())
                .limit(1)
            )
            snapshot = result.scalar_one_or_none()
        if snapshot is None:
            return None
        return TopicGraph.from_json(snapshot.graph_json)

    async def tenants(self) -> list[str]:
        """Tenants owning at least one channel, ascending."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(Channel.tenant_id).distinct().order_by(Channel.tenant_id)
            )
            return list(result.scalars().all())
