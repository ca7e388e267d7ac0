"""Wiring of stores, clients and loops from settings and config.yml."""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scout.config import AppConfig, get_config
from scout.core.database import AsyncSessionLocal
from scout.core.logging import get_logger
from scout.core.progress import ProgressTracker
from scout.enrichment.assets import ImageDownloader
from scout.enrichment.media import MediaProcessor
from scout.enrichment.pipeline import EnrichmentPipeline
from scout.enrichment.topics import OpenAITopicInferrer
from scout.enrichment.transcription import OpenAITranscriber
from scout.graph.service import rebuild_graph
from scout.graph.types import GraphParams, TopicGraph
from scout.ingest.base import PlatformFetcher
from scout.ingest.instagram import InstagramFetcher
from scout.ingest.orchestrator import IngestionOrchestrator
from scout.ingest.youtube import YouTubeFetcher
from scout.stores.content import ContentStore
from scout.stores.jobs import JobStore
from scout.stores.suggestions import SuggestionStore
from scout.suggest.discovery import create_discovery
from scout.suggest.loop import SuggestionLoop, SuggestionStats
from scout.suggest.queries import OpenAIQueryGenerator
from scout.suggest.selectors import get_selector
from scout.worker.loop import SyncWorker

logger = get_logger(__name__)


@dataclass
class Services:
    """Everything the API, CLI and schedules share within one process."""

    config: AppConfig
    jobs: JobStore
    content: ContentStore
    suggestions: SuggestionStore
    progress: ProgressTracker
    orchestrator: IngestionOrchestrator
    suggestion_loop: SuggestionLoop | None
    worker: SyncWorker

    @property
    def graph_params(self) -> GraphParams:
        return GraphParams.from_config(self.config.graph)

    async def rebuild_graph(self, tenant_id: str) -> TopicGraph:
        return await rebuild_graph(self.content, tenant_id, self.graph_params)

    async def run_suggestions(self, tenant_id: str) -> SuggestionStats | None:
        """Run discovery over the tenant's current graph (None if unavailable)."""
        if self.suggestion_loop is None:
            logger.bind(tenant_id=tenant_id).warning("suggestions_not_configured")
            return None
        graph = await self.content.latest_graph(tenant_id)
        if graph is None:
            graph = await self.rebuild_graph(tenant_id)
        return await self.suggestion_loop.run(tenant_id, graph)

    async def after_initial_scrape(self, tenant_id: str) -> None:
        await self.rebuild_graph(tenant_id)
        if self.config.worker.suggest_after_initial_scrape:
            await self.run_suggestions(tenant_id)


def build_services(
    config: AppConfig | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> Services:
    config = config or get_config()
    settings = config.settings
    session_factory = session_factory or AsyncSessionLocal

    jobs = JobStore(session_factory)
    content = ContentStore(session_factory)
    suggestions = SuggestionStore(session_factory)
    progress = ProgressTracker()

    openai_client = AsyncOpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None
    enrichment = config.enrichment

    pipeline = EnrichmentPipeline(
        store=content,
        media=MediaProcessor(enrichment.download_timeout_seconds) if enrichment.transcribe else None,
        transcriber=(
            OpenAITranscriber(openai_client, settings.transcription_model)
            if openai_client and enrichment.transcribe
            else None
        ),
        inferrer=(
            OpenAITopicInferrer(openai_client, settings.llm_model, enrichment.max_topics)
            if openai_client and enrichment.infer_topics
            else None
        ),
        assets=ImageDownloader(Path(settings.image_dir)) if enrichment.download_images else None,
        temp_dir=settings.temp_dir or None,
    )
    orchestrator = IngestionOrchestrator(content, pipeline)

    max_items = config.worker.max_items_per_sync
    fetchers: dict[str, PlatformFetcher] = {
        "youtube": YouTubeFetcher(settings.youtube_api_key, max_items=max_items),
        "instagram": InstagramFetcher(settings.apify_api_token, max_items=max_items),
    }

    suggestion_config = config.suggestions
    suggestion_loop = None
    if openai_client:
        suggestion_loop = SuggestionLoop(
            content=content,
            suggestions=suggestions,
            generator=OpenAIQueryGenerator(openai_client, settings.llm_model),
            discovery=create_discovery(
                suggestion_config.platform, settings.apify_api_token, settings.youtube_api_key
            ),
            selector=get_selector(suggestion_config.selector),
            max_topics=suggestion_config.max_topics,
            queries_per_topic=suggestion_config.queries_per_topic,
            results_per_query=suggestion_config.results_per_query,
            profile_delay_seconds=suggestion_config.profile_delay_seconds,
            search_delay_seconds=suggestion_config.search_delay_seconds,
        )

    async def after_initial_scrape(tenant_id: str) -> None:
        await services.after_initial_scrape(tenant_id)

    worker = SyncWorker(
        jobs=jobs,
        content=content,
        orchestrator=orchestrator,
        fetchers=fetchers,
        progress=progress,
        tenants=config.worker.tenants,
        poll_interval_seconds=config.worker.poll_interval_seconds,
        post_job_delay_seconds=config.worker.post_job_delay_seconds,
        after_initial_scrape=after_initial_scrape,
    )
    services = Services(
        config=config,
        jobs=jobs,
        content=content,
        suggestions=suggestions,
        progress=progress,
        orchestrator=orchestrator,
        suggestion_loop=suggestion_loop,
        worker=worker,
    )
    return services


@lru_cache
def get_services() -> Services:
    """Get the cached process-wide services."""
    return build_services()
