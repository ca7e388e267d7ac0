"""Full enrichment of newly seen items.

Each new item goes through, in order: display image download, media download,
audio extraction, transcription, topic inference and persistence. Stages are
best-effort per item: whatever succeeded is stored, failures are logged, and
one item's failure never stops the batch. Transient media for an item lives in
its own temporary directory, removed before the next item starts.
"""

import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Protocol

from scout.core.datetime_utils import utc_now
from scout.core.exceptions import NoAudioStreamError
from scout.core.logging import get_logger
from scout.core.progress import ProgressCallback, noop_progress
from scout.ingest.base import ItemCore
from scout.models import TopicSource, TranscriptionStatus
from scout.stores.content import ContentStore

logger = get_logger(__name__)


class MediaTools(Protocol):
    async def download_media(self, url: str, workdir: Path) -> Path: ...

    async def extract_audio(self, media_path: Path, workdir: Path) -> Path: ...


class Transcriber(Protocol):
    async def transcribe(self, audio_path: Path) -> str: ...


class TopicInferrer(Protocol):
    async def infer(
        self, transcript: str | None, title: str, description: str | None, platform: str
    ) -> list[str]: ...


class AssetFetcher(Protocol):
    async def fetch(self, url: str, item_id: str) -> str | None: ...


@dataclass
class EnrichmentStats:
    processed: int = 0
    images_downloaded: int = 0
    audio_extracted: int = 0
    transcribed: int = 0
    topics_inferred: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class ItemOutcome:
    """What enrichment produced for one item."""

    local_image_path: str | None = None
    transcription: str | None = None
    status: TranscriptionStatus = TranscriptionStatus.PENDING
    ai_topics: list[str] | None = None  # None when inference did not run or failed
    persisted: bool = False


def item_record(item: ItemCore, outcome: ItemOutcome) -> dict[str, Any]:
    """Column values for storing an enriched item."""
    return {
        "id": item.id,
        "channel_id": item.channel_id,
        "platform": item.platform,
        "title": item.title,
        "description": item.description,
        "published_at": item.published_at,
        "view_count": item.view_count,
        "like_count": item.like_count,
        "comment_count": item.comment_count,
        "duration_seconds": item.duration_seconds,
        "media_url": item.media_url,
        "display_url": item.display_url,
        "local_image_path": outcome.local_image_path,
        "transcription": outcome.transcription,
        "transcription_status": outcome.status,
        "last_synced_at": utc_now(),
        "raw": item.raw,
    }


class EnrichmentPipeline:
    """Runs full enrichment for items the store has never seen."""

    def __init__(
        self,
        store: ContentStore,
        media: MediaTools | None = None,
        transcriber: Transcriber | None = None,
        inferrer: TopicInferrer | None = None,
        assets: AssetFetcher | None = None,
        temp_dir: str | Path | None = None,
    ) -> None:
        self.store = store
        self.media = media
        self.transcriber = transcriber
        self.inferrer = inferrer
        self.assets = assets
        self.temp_dir = str(temp_dir) if temp_dir else None

    async def run(
        self, items: list[ItemCore], progress: ProgressCallback | None = None
    ) -> EnrichmentStats:
        """
        Enrich and persist each item sequentially.

        Args:
            items: New items only; callers route known items elsewhere
            progress: Optional progress sink(step, current, total)

        Returns:
            Counters for the batch
        """
        progress = progress or noop_progress
        stats = EnrichmentStats()

        for index, item in enumerate(items, 1):
            progress("Enriching new items", index, len(items))
            outcome = await self.enrich_item(item)

            stats.processed += 1
            stats.images_downloaded += int(outcome.local_image_path is not None)
            stats.audio_extracted += int(
                outcome.status in (TranscriptionStatus.AUDIO_READY, TranscriptionStatus.COMPLETED)
            )
            stats.transcribed += int(outcome.status == TranscriptionStatus.COMPLETED)
            stats.topics_inferred += int(bool(outcome.ai_topics))
            stats.failed += int(not outcome.persisted)

        logger.bind(**stats.to_dict()).info("enrichment_batch_completed")
        return stats

    async def enrich_item(self, item: ItemCore) -> ItemOutcome:
        """Run every stage for one item and persist the result."""
        outcome = ItemOutcome()
        log = logger.bind(item_id=item.id)

        if self.assets and item.display_url:
            try:
                outcome.local_image_path = await self.assets.fetch(item.display_url, item.id)
            except Exception as e:
                log.bind(error=str(e)).warning("image_download_failed")

        if item.media_url and self.media and self.transcriber:
            await self._transcribe(item, outcome, self.media, self.transcriber)

        if self.inferrer and (outcome.transcription or item.title or item.description):
            try:
                outcome.ai_topics = await self.inferrer.infer(
                    outcome.transcription,
                    item.title,
                    item.description,
                    item.platform,
                )
            except Exception as e:
                log.bind(error=str(e)).warning("topic_inference_failed")

        try:
            await self.store.upsert_items([item_record(item, outcome)])
            await self.store.set_topic_associations(
                item.id, TopicSource.AUTHOR, item.author_topics()
            )
            if outcome.ai_topics is not None:
                await self.store.set_topic_associations(item.id, TopicSource.AI, outcome.ai_topics)
            outcome.persisted = True
        except Exception as e:
            log.bind(error=str(e)).error("item_persist_failed")

        log.bind(
            status=outcome.status.value,
            ai_topics=len(outcome.ai_topics or []),
            persisted=outcome.persisted,
        ).debug("item_enriched")
        return outcome

    async def _transcribe(
        self,
        item: ItemCore,
        outcome: ItemOutcome,
        media: MediaTools,
        transcriber: Transcriber,
    ) -> None:
        """Download, extract and transcribe inside a per-item temporary directory."""
        log = logger.bind(item_id=item.id)

        with tempfile.TemporaryDirectory(prefix=f"scout-{item.id}-", dir=self.temp_dir) as workdir:
            work_path = Path(workdir)
            try:
                media_path = await media.download_media(item.media_url or "", work_path)
                audio_path = await media.extract_audio(media_path, work_path)
                outcome.status = TranscriptionStatus.AUDIO_READY
                outcome.transcription = await transcriber.transcribe(audio_path)
                outcome.status = TranscriptionStatus.COMPLETED
            except NoAudioStreamError as e:
                outcome.status = TranscriptionStatus.ERROR
                log.bind(error=str(e)).info("item_has_no_audio")
            except Exception as e:
                if outcome.status != TranscriptionStatus.AUDIO_READY:
                    outcome.status = TranscriptionStatus.ERROR
                log.bind(error=str(e)).warning("item_transcription_failed")
