"""Tests for the periodic scheduled jobs."""

import pytest

from scout.core import scheduler
from scout.models import JobStatus, TopicSource


@pytest.fixture
def patched_services(services, monkeypatch):
    monkeypatch.setattr("scout.worker.factory.get_services", lambda: services)
    return services


class TestResyncChannelsJob:
    """Tests for resync_channels_job."""

    async def test_enqueues_lookback_sync_per_active_channel(
        self, patched_services, make_profile
    ):
        """Should queue one non-initial sync per active channel."""
        content = patched_services.content
        await content.upsert_channel(make_profile("UC1", "one"), "acme")
        await content.upsert_channel(make_profile("ig_two", "two", "instagram"), "globex")

        result = await scheduler.resync_channels_job()

        assert result == {"enqueued": 2}
        jobs = await patched_services.jobs.list_jobs()
        assert {(j.handle, j.platform, j.tenant_id) for j in jobs} == {
            ("one", "youtube", "acme"),
            ("two", "instagram", "globex"),
        }
        lookback = patched_services.config.schedules.resync_lookback_days
        assert all(j.lookback_days == lookback for j in jobs)
        assert all(not j.is_initial_scrape and j.status == JobStatus.PENDING for j in jobs)


class TestRebuildGraphsJob:
    """Tests for rebuild_graphs_job."""

    async def test_rebuilds_every_tenant(self, patched_services, make_profile):
        """Should store a fresh graph for each tenant owning channels."""
        content = patched_services.content
        await content.upsert_channel(make_profile("UC1"), "acme")
        await content.upsert_items(
            [{"id": "yt_1", "channel_id": "UC1", "platform": "youtube", "title": "v1"}]
        )
        await content.set_topic_associations("yt_1", TopicSource.AUTHOR, ["gym"])

        result = await scheduler.rebuild_graphs_job()

        assert result == {"rebuilt": 1}
        graph = await content.latest_graph("acme")
        assert [node.name for node in graph.nodes] == ["gym"]


class TestParseTime:
    """Tests for HH:MM parsing."""

    def test_parse_time(self):
        """Should parse valid times and fall back to 04:00."""
        assert scheduler._parse_time("06:30") == (6, 30)
        assert scheduler._parse_time("bogus") == (4, 0)
