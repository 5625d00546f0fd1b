"""
Full route resolve: direct line, cached reuse, then graph search.

Pipeline for one recompute:

1. Clear the per-recompute collision caches.
2. Direct shortcut: an unobstructed origin-target segment is the route.
3. Reuse: try the cached interior waypoints with the new endpoints.
4. Graph: ensure the graph around the origin, link both endpoints,
   run greedy A*, then string-pull the result.
"""

from typing import Optional
import logging

import numpy as np

from route_policies import RouterPolicy
from ...core.graph import NavigationGraph
from ...core.types import FailureKind, RoutePath, RouteResult
from ...spatial.query_cache import CollisionQueries
from ...utils.geometry import as_point
from ..graph_build import GraphManager
from .greedy_astar import greedy_astar
from .linking import link_point
from .reuse import PathCache
from .smoothing import smooth_path

logger = logging.getLogger(__name__)


def _failed(message: str, metadata: dict, nodes_explored: int = 0, warnings=None) -> RouteResult:
    return RouteResult(
        success=False,
        failure=FailureKind.NO_DIRECT_OR_GRAPH_PATH,
        nodes_explored=nodes_explored,
        warnings=list(warnings or []),
        errors=[message],
        metadata=metadata,
    )


def resolve_route(
    origin: np.ndarray,
    target: np.ndarray,
    queries: CollisionQueries,
    policy: Optional[RouterPolicy] = None,
    graph: Optional[NavigationGraph] = None,
    graph_manager: Optional[GraphManager] = None,
    cache: Optional[PathCache] = None,
) -> RouteResult:
    """
    Resolve a route from origin to target.

    Parameters
    ----------
    origin, target : array-like
        Query endpoints
    queries : CollisionQueries
        Collision service wrapper; its caches are cleared first
    policy : RouterPolicy, optional
        Router configuration (profile already applied)
    graph : NavigationGraph, optional
        Fixed graph to search
    graph_manager : GraphManager, optional
        Lazily rebuilt graph around the origin; takes precedence over ``graph``
    cache : PathCache, optional
        Single-entry reuse cache, updated on success

    Returns
    -------
    RouteResult
        ``direct`` path, reused path, searched path, or a failure
    """
    if policy is None:
        policy = RouterPolicy()
    origin = as_point(origin)
    target = as_point(target)
    queries.clear()
    metadata = {}

    if queries.is_segment_clear(origin, target):
        logger.debug("Direct line clear; using straight path")
        return RouteResult(
            success=True,
            path=RoutePath.from_points([origin, target], direct=True),
            metadata=metadata,
        )

    if cache is not None:
        reused, reason = cache.try_reuse(origin, target, queries, policy.reuse)
        if reused is not None:
            logger.debug("Reused cached path")
            return RouteResult(success=True, path=reused, reused=True, metadata=metadata)
        metadata["cache"] = FailureKind.CACHE_REJECTED.value
        metadata["cache_reason"] = reason

    if graph_manager is not None:
        graph = graph_manager.ensure(origin, queries)
    if graph is None or graph.is_empty:
        return _failed("Direct line blocked and navigation graph is empty", metadata)
    metadata["node_count"] = graph.node_count

    origin_links = link_point(origin, target, graph, queries, policy.link)
    target_links = link_point(target, origin, graph, queries, policy.link)
    metadata["origin_links"] = len(origin_links)
    metadata["target_links"] = len(target_links)
    if not origin_links or not target_links:
        which = "origin" if not origin_links else "target"
        return _failed(f"No visible graph node to link the {which}", metadata)

    search = greedy_astar(origin, target, graph, origin_links, target_links, policy.search)
    if not search.success:
        return _failed(
            "No graph path between origin and target",
            metadata,
            nodes_explored=search.nodes_explored,
            warnings=search.warnings,
        )

    points = search.points
    metadata["raw_waypoints"] = len(points)
    if policy.search.smoothing_enabled:
        points = smooth_path(points, queries)

    path = RoutePath.from_points(points, direct=False)
    if cache is not None:
        cache.store(path)
    return RouteResult(
        success=True,
        path=path,
        nodes_explored=search.nodes_explored,
        metadata=metadata,
    )


__all__ = ["resolve_route"]
