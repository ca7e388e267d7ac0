"""Tests for topic graph and suggestion endpoints."""

import pytest
from httpx import AsyncClient

from scout.models import TopicSource
from scout.stores.suggestions import SuggestionRecord

pytestmark = pytest.mark.asyncio


async def seed_content(services, make_profile):
    content = services.content
    await content.upsert_channel(make_profile("UC1"), "acme")
    await content.upsert_items(
        [
            {
                "id": f"yt_{n}",
                "channel_id": "UC1",
                "platform": "youtube",
                "title": f"v{n}",
                "view_count": 100 * n,
                "duration_seconds": 60,
            }
            for n in range(1, 6)
        ]
    )
    for n in range(1, 6):
        await content.set_topic_associations(f"yt_{n}", TopicSource.AI, ["fitness"])
    for n in (1, 2):
        await content.set_topic_associations(f"yt_{n}", TopicSource.AUTHOR, ["yoga"])


class TestTopicGraph:
    """Tests for /api/topics/graph."""

    async def test_no_graph_yet(self, client: AsyncClient):
        """Should return 404 before the first build."""
        response = await client.get("/api/topics/graph", params={"tenant_id": "acme"})

        assert response.status_code == 404

    async def test_rebuild_then_read(self, client: AsyncClient, services, make_profile):
        """Should build, store and serve the tenant's graph."""
        await seed_content(services, make_profile)

        rebuild = await client.post("/api/topics/graph/rebuild", params={"tenant_id": "acme"})
        assert rebuild.status_code == 200
        assert rebuild.json()["nodes"] == 2

        response = await client.get("/api/topics/graph", params={"tenant_id": "acme"})
        assert response.status_code == 200
        data = response.json()
        assert [node["name"] for node in data["nodes"]] == ["fitness", "yoga"]
        assert data["nodes"][0]["item_count"] == 5
        weights = {(e["source"], e["target"]): e["weight"] for e in data["edges"]}
        assert weights[(0, 1)] == pytest.approx(0.4)
        assert weights[(1, 0)] == pytest.approx(1.0)
        assert data["relationships"][0]["label"] == "fitness - yoga"


class TestSuggestions:
    """Tests for suggestion endpoints."""

    async def test_list_suggested_channels(self, client: AsyncClient, services):
        """Should list the tenant's stored suggestions."""
        await services.suggestions.add_suggestion(
            "acme",
            SuggestionRecord(
                id="ig_coach", platform="instagram", username="coach", search_term="home workouts"
            ),
        )

        response = await client.get("/api/suggested-channels", params={"tenant_id": "acme"})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["username"] == "coach"
        assert data[0]["search_term"] == "home workouts"

    async def test_run_without_llm_key(self, client: AsyncClient):
        """Should return 503 when no text generation key is configured."""
        response = await client.post("/api/suggestions/run", params={"tenant_id": "acme"})

        assert response.status_code == 503


class TestChannels:
    """Tests for channel and item listings."""

    async def test_channels_and_top_items(self, client: AsyncClient, services, make_profile):
        """Should list channels and rank items by engagement score."""
        await seed_content(services, make_profile)

        channels = await client.get("/api/channels", params={"tenant_id": "acme"})
        assert [c["id"] for c in channels.json()] == ["UC1"]

        top = await client.get("/api/items/top", params={"tenant_id": "acme", "limit": 2})
        assert top.status_code == 200
        assert [item["id"] for item in top.json()] == ["yt_5", "yt_4"]
        assert top.json()[0]["engagement_score"] == pytest.approx(500.0)

    async def test_unknown_channel_items(self, client: AsyncClient):
        """Should return 404 for an unknown channel."""
        response = await client.get("/api/channels/UCnope/items")

        assert response.status_code == 404
