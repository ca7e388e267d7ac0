"""Tests for new-vs-existing routing of fetched batches."""

import pytest
import pytest_asyncio

from scout.enrichment.pipeline import EnrichmentPipeline
from scout.ingest.orchestrator import IngestionOrchestrator, dedupe_items, partition_items
from scout.models import TranscriptionStatus


@pytest.fixture
def pipeline(content_store, fake_media, fake_transcriber, fake_inferrer, tmp_path):
    return EnrichmentPipeline(
        store=content_store,
        media=fake_media,
        transcriber=fake_transcriber,
        inferrer=fake_inferrer,
        temp_dir=tmp_path,
    )


@pytest.fixture
def orchestrator(content_store, pipeline):
    return IngestionOrchestrator(content_store, pipeline)


@pytest_asyncio.fixture
async def channel(content_store, make_profile):
    return await content_store.upsert_channel(make_profile(), "default")


class TestPartitionItems:
    """Tests for the pure partition helpers."""

    def test_partition_is_complete_and_disjoint(self, make_item):
        """Should split every item into exactly one of new or existing."""
        items = [make_item(str(n)) for n in range(8)]
        existing = {"yt_1", "yt_4", "yt_7", "yt_unknown"}

        new, known = partition_items(items, existing)

        new_ids = {i.id for i in new}
        known_ids = {i.id for i in known}
        assert new_ids | known_ids == {i.id for i in items}
        assert new_ids & known_ids == set()
        assert known_ids == {"yt_1", "yt_4", "yt_7"}

    def test_dedupe_keeps_last_occurrence(self, make_item):
        """Should keep one item per id with the latest values."""
        items = [make_item("a", view_count=1), make_item("b"), make_item("a", view_count=9)]

        deduped = dedupe_items(items)

        assert [i.id for i in deduped] == ["yt_a", "yt_b"]
        assert deduped[0].view_count == 9


class TestIngestItems:
    """Tests for IngestionOrchestrator.ingest_items."""

    async def test_empty_batch(self, orchestrator):
        """Should do nothing for an empty batch."""
        result = await orchestrator.ingest_items([], "youtube")

        assert (result.new_count, result.updated_count, result.processed_count) == (0, 0, 0)

    async def test_idempotent_upsert(self, orchestrator, content_store, channel, make_item):
        """Should keep exactly one row per id, reflecting the latest counts."""
        await orchestrator.ingest_items([make_item("v1", view_count=100)], "youtube")
        result = await orchestrator.ingest_items([make_item("v1", view_count=250)], "youtube")

        items = await content_store.list_items(channel.id)
        assert [i.id for i in items] == ["yt_v1"]
        assert items[0].view_count == 250
        assert result.new_count == 0
        assert result.updated_count == 1

    async def test_enrichment_runs_once(
        self, orchestrator, content_store, channel, make_item, fake_transcriber, fake_inferrer
    ):
        """Should never re-enrich a known id, even after a failed first pass."""
        fake_transcriber.fail = True

        await orchestrator.ingest_items([make_item("v1")], "youtube")
        await orchestrator.ingest_items([make_item("v1")], "youtube")
        await orchestrator.ingest_items([make_item("v1")], "youtube")

        assert fake_transcriber.calls == 1
        assert fake_inferrer.calls == 1
        stored = await content_store.get_item("yt_v1")
        assert stored.transcription is None
        assert stored.transcription_status == TranscriptionStatus.AUDIO_READY

    async def test_end_to_end_new_and_existing(
        self, orchestrator, content_store, channel, make_item, fake_transcriber, fake_inferrer
    ):
        """Should enrich only the 10 new items and refresh all 13 sync timestamps."""
        existing = [make_item(f"old{n}", view_count=10) for n in range(3)]
        await content_store.upsert_items(
            [
                {
                    "id": item.id,
                    "channel_id": item.channel_id,
                    "platform": "youtube",
                    "title": item.title,
                    "view_count": item.view_count,
                }
                for item in existing
            ]
        )
        before = {i.id: i.last_synced_at for i in await content_store.list_items(channel.id)}
        fake_transcriber.calls = 0
        fake_inferrer.calls = 0

        batch = [make_item(f"new{n}") for n in range(10)] + [
            make_item(f"old{n}", view_count=999) for n in range(3)
        ]
        result = await orchestrator.ingest_items(batch, "youtube")

        assert result.new_count == 10
        assert result.updated_count == 3
        assert result.processed_count == 13
        assert fake_transcriber.calls == 10
        assert fake_inferrer.calls == 10

        stored = {i.id: i for i in await content_store.list_items(channel.id)}
        assert len(stored) == 13
        for n in range(3):
            old = stored[f"yt_old{n}"]
            assert old.view_count == 999
            assert old.last_synced_at >= before[old.id]
            assert old.transcription is None
            assert await content_store.get_item_topics(old.id) == {}
        for n in range(10):
            new = stored[f"yt_new{n}"]
            assert new.transcription_status == TranscriptionStatus.COMPLETED
            assert new.transcription
            assert "ai" in await content_store.get_item_topics(new.id)

    async def test_reports_progress(self, orchestrator, channel, make_item):
        """Should report per-item enrichment progress."""
        steps = []

        def report(step, current=None, total=None):
            steps.append((step, current, total))

        await orchestrator.ingest_items([make_item("a"), make_item("b")], "youtube", report)

        assert ("Enriching new items", 1, 2) in steps
        assert ("Enriching new items", 2, 2) in steps
