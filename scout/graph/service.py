import asyncio

from scout.core.logging import get_logger
from scout.graph.builder import build_topic_graph
from scout.graph.types import GraphParams, TopicGraph
from scout.stores.content import ContentStore

logger = get_logger(__name__)


async def rebuild_graph(
    store: ContentStore, tenant_id: str, params: GraphParams | None = None
) -> TopicGraph:
    """
    Recompute a tenant's topic graph and store it as the current snapshot.

    The build reads a point-in-time snapshot and runs off the event loop; the
    replacement becomes visible in a single insert, so readers see either the
    previous graph or the new one.
    """
    data = await store.get_all_items_and_topics(tenant_id)
    graph = await asyncio.to_thread(build_topic_graph, data, params)
    snapshot_id = await store.save_graph(tenant_id, graph)
    logger.bind(
        tenant_id=tenant_id, snapshot_id=snapshot_id, nodes=len(graph.nodes)
    ).info("topic_graph_saved")
    return graph
