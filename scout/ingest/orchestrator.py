"""New-vs-existing routing for fetched item batches.

One batched existence lookup splits a batch into items the store has never
seen, which get full enrichment, and known items, which only get their
engagement counts refreshed. An id is enriched at most once: after its first
successful persistence every later batch routes it to the metrics refresh.
"""

from dataclasses import dataclass, field
from typing import TypeVar

from scout.core.logging import get_logger
from scout.core.progress import ProgressCallback, noop_progress
from scout.enrichment.pipeline import EnrichmentPipeline, EnrichmentStats
from scout.ingest.base import ItemCore
from scout.stores.content import ContentStore

logger = get_logger(__name__)

T = TypeVar("T", bound=ItemCore)


@dataclass
class IngestResult:
    new_count: int = 0
    updated_count: int = 0
    processed_count: int = 0
    enrichment: EnrichmentStats = field(default_factory=EnrichmentStats)


def dedupe_items(items: list[T]) -> list[T]:
    """Collapse repeated ids, keeping the last occurrence at the first position."""
    by_id: dict[str, T] = {}
    for item in items:
        by_id[item.id] = item
    return list(by_id.values())


def partition_items(items: list[T], existing_ids: set[str]) -> tuple[list[T], list[T]]:
    """
    Split items into (new, existing) by id membership.

    The two lists are disjoint and together contain every input item.
    """
    new = [item for item in items if item.id not in existing_ids]
    existing = [item for item in items if item.id in existing_ids]
    return new, existing


class IngestionOrchestrator:
    """Routes a fetched batch to enrichment or metrics refresh."""

    def __init__(self, store: ContentStore, pipeline: EnrichmentPipeline) -> None:
        self.store = store
        self.pipeline = pipeline

    async def ingest_items(
        self,
        items: list[ItemCore],
        platform: str,
        progress: ProgressCallback | None = None,
    ) -> IngestResult:
        """
        Ingest one batch of fetched items.

        Args:
            items: Items from a platform fetch (may contain repeats)
            platform: Platform the batch came from, for logging
            progress: Optional progress sink(step, current, total)

        Returns:
            IngestResult with new, updated and processed counts
        """
        progress = progress or noop_progress
        if not items:
            return IngestResult()

        batch = dedupe_items(items)
        existing_ids = await self.store.exists_batch(item.id for item in batch)
        new_items, known_items = partition_items(batch, existing_ids)

        logger.bind(
            platform=platform, new=len(new_items), existing=len(known_items)
        ).info("ingest_batch_partitioned")

        result = IngestResult(
            new_count=len(new_items),
            updated_count=len(known_items),
            processed_count=len(batch),
        )

        if new_items:
            result.enrichment = await self.pipeline.run(new_items, progress)

        if known_items:
            progress("Updating engagement metrics")
            await self.store.update_metrics(known_items)

        logger.bind(
            platform=platform,
            new=result.new_count,
            updated=result.updated_count,
            processed=result.processed_count,
        ).info("ingest_batch_completed")
        return result
