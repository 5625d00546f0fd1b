"""
Corner Routing - corner-aware path routing for audio proxies

When a wall blocks the line between a sound source and the listener, the
sound should appear to come around the nearest corner instead of
through the wall. This package finds that route and moves a proxy
emitter along it.

Main Entry Points:
    - CornerRouter: per-source tick loop (graph, search, reuse, proxy)
    - resolve_route(): one-shot route query against a collision service
    - PrimitiveWorld / MeshWorld: reference collision services

Example:
    >>> from corner_routing import CornerRouter, PrimitiveWorld
    >>> from route_policies import RouterPolicy, NavigationProfile
    >>>
    >>> world = PrimitiveWorld()
    >>> world.add_box((4.9, -100, -100), (5.1, 100, 2))
    >>> router = CornerRouter(
    ...     world,
    ...     origin_provider=lambda: (0, 0, 0),
    ...     target_provider=lambda: (10, 0, 0),
    ...     policy=RouterPolicy(profile=NavigationProfile.OPEN_AREAS),
    ... )
    >>> state = router.tick(0.1)

Units:
    Distances are in meters and time steps in seconds.
"""

__version__ = "0.1.0"

from .core import (
    FailureKind,
    FollowState,
    Hit,
    DynamicLink,
    RoutePath,
    ProxyState,
    RouteResult,
    NavigationGraph,
    RouterEvent,
    EventBus,
    RoutingContext,
    CollisionQueryService,
    AudioProxySink,
    OperationReport,
)
from .spatial import CollisionQueries, PrimitiveWorld, MeshWorld
from .ops import (
    SphereSampler,
    GraphManager,
    build_navigation_graph,
    greedy_astar,
    smooth_path,
    PathCache,
    resolve_route,
    ProxyFollower,
    volume_offset_db,
)
from .api import CornerRouter

__all__ = [
    "FailureKind",
    "FollowState",
    "Hit",
    "DynamicLink",
    "RoutePath",
    "ProxyState",
    "RouteResult",
    "NavigationGraph",
    "RouterEvent",
    "EventBus",
    "RoutingContext",
    "CollisionQueryService",
    "AudioProxySink",
    "OperationReport",
    "CollisionQueries",
    "PrimitiveWorld",
    "MeshWorld",
    "SphereSampler",
    "GraphManager",
    "build_navigation_graph",
    "greedy_astar",
    "smooth_path",
    "PathCache",
    "resolve_route",
    "ProxyFollower",
    "volume_offset_db",
    "CornerRouter",
]
