"""Topic graph API endpoints."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from scout.dependencies import ServicesDep

router = APIRouter()


@router.get("/topics/graph")
async def get_topic_graph(
    services: ServicesDep,
    tenant_id: str = Query(default="default"),
) -> dict[str, Any]:
    """
    Get the tenant's current topic graph.

    Nodes are ordered by name; edges and relationships refer to nodes by index.
    """
    graph = await services.content.latest_graph(tenant_id)
    if graph is None:
        raise HTTPException(status_code=404, detail="No topic graph has been built yet")
    payload = graph.to_dict()
    payload["relationships"] = [asdict(rel) for rel in graph.relationships()]
    return payload


@router.post("/topics/graph/rebuild")
async def rebuild_topic_graph(
    services: ServicesDep,
    tenant_id: str = Query(default="default"),
) -> dict[str, Any]:
    """Recompute the tenant's graph now and return a summary."""
    graph = await services.rebuild_graph(tenant_id)
    return {
        "tenant_id": tenant_id,
        "nodes": len(graph.nodes),
        "edges": len(graph.edges),
        "categories": [node.name for node in graph.nodes if node.is_category],
    }
