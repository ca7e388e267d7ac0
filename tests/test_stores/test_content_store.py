"""Tests for item, channel, topic and graph snapshot persistence."""

import pytest

from scout.graph.builder import build_topic_graph
from scout.models import TopicSource

pytestmark = pytest.mark.asyncio


def record(item_id: str, channel_id: str = "UCchannel", **fields) -> dict:
    return {"id": item_id, "channel_id": channel_id, "platform": "youtube", "title": item_id} | fields


class TestItems:
    """Tests for item upserts and lookups."""

    async def test_exists_batch(self, content_store):
        """Should return only stored ids."""
        await content_store.upsert_items([record("yt_a"), record("yt_b")])

        assert await content_store.exists_batch(["yt_a", "yt_c", "yt_b", "yt_a"]) == {"yt_a", "yt_b"}
        assert await content_store.exists_batch([]) == set()

    async def test_upsert_updates_in_place(self, content_store):
        """Should keep a single row and apply the latest values."""
        await content_store.upsert_items([record("yt_a", view_count=1)])
        await content_store.upsert_items([record("yt_a", view_count=2, title="Renamed")])

        items = await content_store.list_items()
        assert len(items) == 1
        assert items[0].view_count == 2
        assert items[0].title == "Renamed"

    async def test_update_metrics_leaves_enrichment(self, content_store, make_item):
        """Should refresh counts without touching the transcript."""
        await content_store.upsert_items([record("yt_a", transcription="hello", view_count=1)])

        updated = await content_store.update_metrics([make_item("a", view_count=77)])

        item = await content_store.get_item("yt_a")
        assert updated == 1
        assert item.view_count == 77
        assert item.transcription == "hello"


class TestChannels:
    """Tests for channel upserts."""

    async def test_first_tenant_owns_channel(self, content_store, make_profile):
        """Should keep the original tenant when another tenant syncs the channel."""
        await content_store.upsert_channel(make_profile(title="Old"), "acme")
        channel = await content_store.upsert_channel(make_profile(title="New"), "globex")

        assert channel.tenant_id == "acme"
        assert channel.title == "New"
        assert await content_store.tenants() == ["acme"]

    async def test_initial_scrape_flag(self, content_store, make_profile):
        """Should set and clear the initial scrape flag."""
        channel = await content_store.upsert_channel(
            make_profile(), "default", initial_scrape_running=True
        )
        assert channel.initial_scrape_running is True

        await content_store.set_initial_scrape_running(channel.id, False)
        assert (await content_store.get_channel(channel.id)).initial_scrape_running is False

    async def test_is_tracked(self, content_store, make_profile):
        """Should match Instagram handles case-insensitively and YouTube ids exactly."""
        await content_store.upsert_channel(
            make_profile("ig_chef.anna", "chef.anna", "instagram"), "default"
        )
        await content_store.upsert_channel(make_profile("UCabc", "creator"), "default")

        assert await content_store.is_tracked("instagram", "Chef.Anna")
        assert await content_store.is_tracked("youtube", "UCabc")
        assert await content_store.is_tracked("youtube", "Creator")
        assert not await content_store.is_tracked("instagram", "someone")


class TestTopicAssociations:
    """Tests for per-source topic replacement."""

    async def test_replaces_only_same_source(self, content_store):
        """Should replace AI topics without touching author topics."""
        await content_store.upsert_items([record("yt_a")])
        await content_store.set_topic_associations("yt_a", TopicSource.AUTHOR, ["#Gym"])
        await content_store.set_topic_associations("yt_a", TopicSource.AI, ["Fitness", "Diet"])

        await content_store.set_topic_associations("yt_a", TopicSource.AI, ["Travel"])

        assert await content_store.get_item_topics("yt_a") == {
            "ai": ["travel"],
            "author": ["gym"],
        }

    async def test_normalizes_and_dedupes(self, content_store):
        """Should store normalized unique names."""
        await content_store.upsert_items([record("yt_a")])

        names = await content_store.set_topic_associations(
            "yt_a", TopicSource.AI, ["Fitness", " fitness ", "#FITNESS", "", "Yoga"]
        )

        assert names == ["fitness", "yoga"]

    async def test_upsert_topic_is_stable(self, content_store):
        """Should return the same id for equivalent names."""
        first = await content_store.upsert_topic("Cooking")
        second = await content_store.upsert_topic("#cooking")

        assert first == second


class TestGraphSnapshots:
    """Tests for graph input snapshots and stored graphs."""

    async def test_graph_input_scoped_to_tenant(self, content_store, make_profile):
        """Should only include items from the tenant's channels."""
        await content_store.upsert_channel(make_profile("UC1"), "acme")
        await content_store.upsert_channel(make_profile("UC2", "other"), "globex")
        await content_store.upsert_items([record("yt_a", "UC1"), record("yt_b", "UC2")])
        await content_store.set_topic_associations("yt_a", TopicSource.AUTHOR, ["gym"])
        await content_store.set_topic_associations("yt_b", TopicSource.AUTHOR, ["gym"])
        await content_store.set_topic_associations("yt_a", TopicSource.AI, ["gym", "diet"])

        data = await content_store.get_all_items_and_topics("acme")

        assert [item.id for item in data.items] == ["yt_a"]
        members = {topic.name: topic.item_ids for topic in data.topics}
        assert members == {"gym": frozenset({"yt_a"}), "diet": frozenset({"yt_a"})}

    async def test_latest_graph_wins(self, content_store, make_graph_input):
        """Should return the newest stored graph for the tenant."""
        assert await content_store.latest_graph("default") is None

        old = build_topic_graph(make_graph_input({"i1": ("c", 1)}, {"old": ["i1"]}))
        new = build_topic_graph(make_graph_input({"i1": ("c", 1)}, {"new": ["i1"]}))
        await content_store.save_graph("default", old)
        await content_store.save_graph("default", new)

        latest = await content_store.latest_graph("default")
        assert [node.name for node in latest.nodes] == ["new"]
        assert await content_store.latest_graph("other") is None
