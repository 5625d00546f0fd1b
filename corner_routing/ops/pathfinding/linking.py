"""
Dynamic links from query-time endpoints into the static graph.

Origin and target move every query and are never inserted into the
graph. Instead each is linked to a handful of visible graph nodes for the
duration of one search.
"""

from typing import List

import numpy as np

from route_policies import LinkPolicy
from ...core.graph import NavigationGraph
from ...core.types import DynamicLink
from ...spatial.query_cache import CollisionQueries


def link_point(
    point: np.ndarray,
    other_endpoint: np.ndarray,
    graph: NavigationGraph,
    queries: CollisionQueries,
    policy: LinkPolicy,
) -> List[DynamicLink]:
    """
    Link a query point to its best visible graph nodes.

    Every node is scored by ``|node - point| + bias * |node - other_endpoint|``
    so links lean toward nodes heading the right way. The best
    ``limit * multiplier`` candidates are visibility-tested in ascending
    score order until ``limit`` links are found.

    Parameters
    ----------
    point : np.ndarray
        Endpoint to link
    other_endpoint : np.ndarray
        The opposite endpoint of the query
    graph : NavigationGraph
        Static graph
    queries : CollisionQueries
        Cached collision queries
    policy : LinkPolicy
        Link limits and scoring bias

    Returns
    -------
    List[DynamicLink]
        Links in ascending score order (empty if none are visible)
    """
    if graph.is_empty:
        return []

    positions = graph.positions
    to_point = np.linalg.norm(positions - point, axis=1)
    to_other = np.linalg.norm(positions - other_endpoint, axis=1)
    scores = to_point + policy.other_endpoint_bias * to_other

    k = min(policy.candidate_count, len(scores))
    if k < len(scores):
        candidates = np.argpartition(scores, k - 1)[:k]
    else:
        candidates = np.arange(len(scores))
    candidates = candidates[np.argsort(scores[candidates], kind="stable")]

    links: List[DynamicLink] = []
    for idx in candidates:
        idx = int(idx)
        if queries.is_segment_clear(point, positions[idx]):
            links.append(DynamicLink(node_index=idx, score=float(scores[idx]), distance=float(to_point[idx])))
            if len(links) >= policy.dynamic_connection_limit:
                break
    return links


__all__ = ["link_point"]
