"""Tests for the per-item enrichment pipeline."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from scout.core.exceptions import TransientExternalError
from scout.enrichment.pipeline import EnrichmentPipeline
from scout.models import TranscriptionStatus

pytestmark = pytest.mark.asyncio

MEDIA_URL = "https://www.youtube.com/watch?v=x"


@pytest_asyncio.fixture
async def channel(content_store, make_profile):
    return await content_store.upsert_channel(make_profile(), "default")


@pytest.fixture
def work_root(tmp_path):
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def pipeline(content_store, fake_media, fake_transcriber, fake_inferrer, work_root):
    return EnrichmentPipeline(
        store=content_store,
        media=fake_media,
        transcriber=fake_transcriber,
        inferrer=fake_inferrer,
        temp_dir=work_root,
    )


class TestEnrichItem:
    """Tests for EnrichmentPipeline.enrich_item."""

    async def test_full_success(self, pipeline, content_store, channel, make_item):
        """Should store transcript, author topics and AI topics."""
        item = make_item("v1", title="Leg day #Fitness #gym")

        outcome = await pipeline.enrich_item(item)

        assert outcome.persisted
        stored = await content_store.get_item("yt_v1")
        assert stored.transcription_status == TranscriptionStatus.COMPLETED
        assert stored.transcription.startswith("today we talk")
        topics = await content_store.get_item_topics("yt_v1")
        assert topics["author"] == ["fitness", "gym"]
        assert topics["ai"] == ["fitness", "nutrition"]

    async def test_workdir_removed_on_success(
        self, pipeline, channel, make_item, fake_media, work_root
    ):
        """Should delete downloaded media and audio once the item is done."""
        await pipeline.enrich_item(make_item("v1"))

        assert len(fake_media.workdirs) == 1
        assert not fake_media.workdirs[0].exists()
        assert list(work_root.iterdir()) == []

    async def test_workdir_removed_on_failure(
        self, pipeline, content_store, channel, make_item, fake_media, work_root
    ):
        """Should delete the work directory when a stage fails."""
        fake_media.fail_download.add(MEDIA_URL)

        outcome = await pipeline.enrich_item(make_item("v1"))

        assert outcome.persisted
        assert outcome.status == TranscriptionStatus.ERROR
        assert not fake_media.workdirs[0].exists()
        assert list(work_root.iterdir()) == []

    async def test_transcription_failure_keeps_audio_ready(
        self, pipeline, content_store, channel, make_item, fake_transcriber, fake_inferrer
    ):
        """Should persist partial data and still infer topics from the title."""
        fake_transcriber.fail = True

        outcome = await pipeline.enrich_item(make_item("v1"))

        assert outcome.persisted
        stored = await content_store.get_item("yt_v1")
        assert stored.transcription is None
        assert stored.transcription_status == TranscriptionStatus.AUDIO_READY
        assert fake_inferrer.calls == 1
        assert (await content_store.get_item_topics("yt_v1"))["ai"] == ["fitness", "nutrition"]

    async def test_no_audio_stream(self, pipeline, content_store, channel, make_item, fake_media):
        """Should mark media without an audio track as error."""
        fake_media.no_audio.add(MEDIA_URL)

        outcome = await pipeline.enrich_item(make_item("v1"))

        assert outcome.status == TranscriptionStatus.ERROR
        assert (await content_store.get_item("yt_v1")).transcription_status == (
            TranscriptionStatus.ERROR
        )

    async def test_inference_failure_leaves_ai_topics_empty(
        self, pipeline, content_store, channel, make_item, fake_inferrer
    ):
        """Should keep author topics when inference fails."""
        fake_inferrer.fail = True

        outcome = await pipeline.enrich_item(make_item("v1", description="#travel vlog"))

        assert outcome.persisted
        assert outcome.ai_topics is None
        assert await content_store.get_item_topics("yt_v1") == {"author": ["travel"]}

    async def test_item_without_media_skips_transcription(
        self, pipeline, content_store, channel, make_item, fake_media, fake_transcriber
    ):
        """Should not download anything when the item has no media url."""
        await pipeline.enrich_item(make_item("v1", media_url=None))

        assert fake_media.downloads == []
        assert fake_transcriber.calls == 0
        stored = await content_store.get_item("yt_v1")
        assert stored.transcription_status == TranscriptionStatus.PENDING

    async def test_image_download(self, content_store, channel, make_item):
        """Should record the local image path returned by the asset fetcher."""
        assets = AsyncMock()
        assets.fetch.return_value = "/data/images/yt_v1.jpg"
        pipeline = EnrichmentPipeline(store=content_store, assets=assets)

        await pipeline.enrich_item(make_item("v1", display_url="https://img.example/1.jpg"))

        assets.fetch.assert_awaited_once_with("https://img.example/1.jpg", "yt_v1")
        assert (await content_store.get_item("yt_v1")).local_image_path == (
            "/data/images/yt_v1.jpg"
        )


class TestRun:
    """Tests for EnrichmentPipeline.run."""

    async def test_one_failure_does_not_stop_batch(
        self, content_store, channel, make_item, fake_media, fake_transcriber
    ):
        """Should enrich later items after an earlier item fails."""
        fake_media.fail_download.add("https://media.example/bad")
        inferrer = AsyncMock()
        inferrer.infer.side_effect = [TransientExternalError("boom"), ["cooking"], ["travel"]]
        pipeline = EnrichmentPipeline(
            store=content_store,
            media=fake_media,
            transcriber=fake_transcriber,
            inferrer=inferrer,
        )
        items = [
            make_item("a", media_url="https://media.example/bad"),
            make_item("b"),
            make_item("c"),
        ]

        stats = await pipeline.run(items)

        assert stats.processed == 3
        assert stats.failed == 0
        assert stats.transcribed == 2
        assert stats.topics_inferred == 2
        for item in items:
            assert await content_store.get_item(item.id) is not None

    async def test_image_failure_does_not_stop_batch(self, content_store, channel, make_item):
        """Should persist every item when the image fetch raises for one of them."""
        assets = AsyncMock()
        assets.fetch.side_effect = [IsADirectoryError("yt_a.jpg"), "/data/images/yt_b.jpg"]
        pipeline = EnrichmentPipeline(store=content_store, assets=assets)
        items = [
            make_item("a", display_url="https://img.example/a.jpg"),
            make_item("b", display_url="https://img.example/b.jpg"),
        ]

        stats = await pipeline.run(items)

        assert stats.processed == 2
        assert stats.failed == 0
        assert stats.images_downloaded == 1
        first = await content_store.get_item("yt_a")
        assert first is not None
        assert first.local_image_path is None
        assert (await content_store.get_item("yt_b")).local_image_path == "/data/images/yt_b.jpg"

    async def test_persist_failure_is_counted(self, make_item):
        """Should count an item whose persistence fails and keep going."""
        store = AsyncMock()
        store.upsert_items.side_effect = [RuntimeError("db down"), 1]
        pipeline = EnrichmentPipeline(store=store)

        stats = await pipeline.run([make_item("a"), make_item("b")])

        assert stats.processed == 2
        assert stats.failed == 1
        assert store.upsert_items.await_count == 2
