"""Channel suggestion loop.

For each selected topic a tenant has not searched yet: generate search
queries, run them against the discovery backend, drop candidates that are
already tracked, already suggested or already seen in this run, fetch a
profile for each survivor and store it as a suggestion tied to the topic and
the query that found it. Failures are counted per candidate and never stop
the loop.
"""

import asyncio
from dataclasses import asdict, dataclass
from typing import Protocol

from scout.core.logging import get_logger
from scout.graph.types import TopicGraph, TopicNode
from scout.stores.content import ContentStore
from scout.stores.suggestions import SuggestionRecord, SuggestionStore
from scout.suggest.discovery import ChannelDiscovery
from scout.suggest.selectors import ItemCountSelector, TopicSelector

logger = get_logger(__name__)


class QueryGenerator(Protocol):
    async def generate(self, topic: str, related: list[str], count: int) -> list[str]: ...


@dataclass
class SuggestionStats:
    topics_selected: int = 0
    topics_searched: int = 0
    topics_skipped: int = 0
    queries: int = 0
    candidates: int = 0
    duplicates: int = 0
    stored: int = 0
    failures: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class SuggestionLoop:
    def __init__(
        self,
        content: ContentStore,
        suggestions: SuggestionStore,
        generator: QueryGenerator,
        discovery: ChannelDiscovery,
        selector: TopicSelector | None = None,
        max_topics: int = 5,
        queries_per_topic: int = 3,
        results_per_query: int = 3,
        profile_delay_seconds: float = 0.25,
        search_delay_seconds: float = 1.0,
    ) -> None:
        self.content = content
        self.suggestions = suggestions
        self.generator = generator
        self.discovery = discovery
        self.selector = selector or ItemCountSelector()
        self.max_topics = max_topics
        self.queries_per_topic = queries_per_topic
        self.results_per_query = results_per_query
        self.profile_delay_seconds = profile_delay_seconds
        self.search_delay_seconds = search_delay_seconds

    async def run(self, tenant_id: str, graph: TopicGraph) -> SuggestionStats:
        """
        Run one discovery pass for a tenant over its current graph.

        Args:
            tenant_id: Tenant the suggestions belong to
            graph: The tenant's current topic graph

        Returns:
            Counters for the pass
        """
        stats = SuggestionStats()
        seen: set[str] = set()

        selected = self.selector.select(graph, self.max_topics)
        stats.topics_selected = len(selected)

        for node in selected:
            if await self.suggestions.is_topic_searched(tenant_id, node.topic_id):
                stats.topics_skipped += 1
                continue
            await self._search_topic(tenant_id, graph, node, seen, stats)

        logger.bind(tenant_id=tenant_id, **stats.to_dict()).info("suggestion_loop_completed")
        return stats

    async def _search_topic(
        self,
        tenant_id: str,
        graph: TopicGraph,
        node: TopicNode,
        seen: set[str],
        stats: SuggestionStats,
    ) -> None:
        log = logger.bind(tenant_id=tenant_id, topic=node.name)
        index = graph.node_index(node.name)
        related = (
            [graph.nodes[edge.target].name for edge in graph.outgoing(index)]
            if index is not None
            else []
        )

        try:
            queries = await self.generator.generate(node.name, related, self.queries_per_topic)
        except Exception as e:
            log.bind(error=str(e)).warning("query_generation_failed")
            stats.failures += 1
            return

        await self.suggestions.mark_topic_searched(tenant_id, node.topic_id)
        stats.topics_searched += 1

        for query in queries:
            stats.queries += 1
            try:
                urls = await self.discovery.search(query, self.results_per_query)
            except Exception as e:
                log.bind(query=query, error=str(e)).warning("channel_search_failed")
                stats.failures += 1
                continue

            for url in urls:
                await self._consider(tenant_id, node, query, url, seen, stats)

            if self.search_delay_seconds:
                await asyncio.sleep(self.search_delay_seconds)

    async def _consider(
        self,
        tenant_id: str,
        node: TopicNode,
        query: str,
        url: str,
        seen: set[str],
        stats: SuggestionStats,
    ) -> None:
        """Dedupe one search result and store it as a suggestion."""
        handle = self.discovery.extract_handle(url)
        if not handle:
            stats.failures += 1
            return
        stats.candidates += 1

        suggestion_id = self.discovery.suggestion_id(handle)
        if suggestion_id in seen:
            stats.duplicates += 1
            return
        seen.add(suggestion_id)

        platform = self.discovery.platform
        if await self.content.is_tracked(platform, handle) or await self.suggestions.is_suggested(
            tenant_id, suggestion_id
        ):
            stats.duplicates += 1
            return

        try:
            profile = await self.discovery.fetch_profile(handle)
        except Exception as e:
            logger.bind(handle=handle, error=str(e)).warning("suggestion_profile_failed")
            stats.failures += 1
            return

        record = SuggestionRecord(
            id=suggestion_id,
            platform=platform,
            username=profile.handle or handle,
            full_name=profile.title,
            follower_count=profile.follower_count,
            follows_count=profile.follows_count,
            posts_count=profile.posts_count,
            verified=profile.verified,
            biography=profile.biography,
            external_url=profile.external_urls[0] if profile.external_urls else url,
            profile_pic_url=profile.thumbnail_url,
            search_term=query,
            category_topic_id=node.topic_id,
        )
        if await self.suggestions.add_suggestion(tenant_id, record):
            stats.stored += 1
        else:
            stats.duplicates += 1

        if self.profile_delay_seconds:
            await asyncio.sleep(self.profile_delay_seconds)
