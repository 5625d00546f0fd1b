"""
Routing operations: sampling, graph building, path finding and proxy following.
"""

from .sampling import sample_unit_sphere, SphereSampler
from .graph_build import (
    scan_stencil,
    build_random_sample_graph,
    build_reachable_scan_graph,
    build_navigation_graph,
    GraphManager,
)
from .pathfinding import (
    link_point,
    SearchResult,
    greedy_astar,
    smooth_path,
    CachedPath,
    PathCache,
    resolve_route,
)
from .proxy_follow import ProxyFollower, volume_offset_db

__all__ = [
    "sample_unit_sphere",
    "SphereSampler",
    "scan_stencil",
    "build_random_sample_graph",
    "build_reachable_scan_graph",
    "build_navigation_graph",
    "GraphManager",
    "link_point",
    "SearchResult",
    "greedy_astar",
    "smooth_path",
    "CachedPath",
    "PathCache",
    "resolve_route",
    "ProxyFollower",
    "volume_offset_db",
]
