"""
Core data structures for corner-aware proxy routing.
"""

from .types import (
    START_ID,
    GOAL_ID,
    NODE_ID_OFFSET,
    FailureKind,
    FollowState,
    Hit,
    DynamicLink,
    RoutePath,
    ProxyState,
    RouteResult,
)
from .graph import NavigationGraph
from .events import RouterEvent, EventBus
from .context import RoutingContext
from .interfaces import CollisionQueryService, AudioProxySink, Exclusions
from .report import OperationReport

__all__ = [
    "START_ID",
    "GOAL_ID",
    "NODE_ID_OFFSET",
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
    "Exclusions",
    "OperationReport",
]
