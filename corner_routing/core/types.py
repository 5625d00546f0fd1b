"""
Core data types for corner-aware proxy routing.

UNIT CONVENTIONS
----------------
All geometric values are in METERS.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Hashable, List, Optional, Tuple

import numpy as np

from ..utils.geometry import path_length

# Virtual search ids; real graph node i is searched as i + NODE_ID_OFFSET.
START_ID = 0
GOAL_ID = 1
NODE_ID_OFFSET = 2


class FailureKind(str, Enum):
    """Ways a route query can degrade."""
    NO_TARGET_RESOLVED = "no_target_resolved"
    NO_DIRECT_OR_GRAPH_PATH = "no_direct_or_graph_path"
    CACHE_REJECTED = "cache_rejected"
    GRAPH_BUILD_CAPPED = "graph_build_capped"


class FollowState(str, Enum):
    """Proxy follower states."""
    IDLE = "idle"
    DIRECT = "direct"
    REFLECTED = "reflected"


@dataclass(frozen=True, eq=False)
class Hit:
    """First blocking hit along a segment."""
    position: np.ndarray
    normal: np.ndarray
    collider: Optional[Hashable] = None


@dataclass(frozen=True)
class DynamicLink:
    """Transient edge from a query point to a graph node, valid for one query."""
    node_index: int
    score: float
    distance: float


@dataclass(frozen=True, eq=False)
class RoutePath:
    """
    Ordered points from origin to target, both inclusive.

    ``direct`` marks an unobstructed straight line. Instances are never
    mutated after publication, so readers always see a complete path.
    """
    points: Tuple[np.ndarray, ...]
    direct: bool = False

    @classmethod
    def from_points(cls, points, direct: bool = False) -> "RoutePath":
        return cls(points=tuple(np.array(p, dtype=float) for p in points), direct=direct)

    @property
    def origin(self) -> np.ndarray:
        return self.points[0]

    @property
    def target(self) -> np.ndarray:
        return self.points[-1]

    @property
    def length(self) -> float:
        return path_length(self.points)

    @property
    def interior(self) -> Tuple[np.ndarray, ...]:
        return self.points[1:-1]

    def __len__(self) -> int:
        return len(self.points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [p.tolist() for p in self.points],
            "direct": self.direct,
            "length": self.length,
        }


@dataclass
class ProxyState:
    """Mutable follower state, updated once per tick."""
    position: np.ndarray
    target_position: np.ndarray
    arm_distance: float = 0.0
    backoff_engaged: bool = False
    state: FollowState = FollowState.IDLE


@dataclass
class RouteResult:
    """Result of a single route query."""
    success: bool
    path: Optional[RoutePath] = None
    failure: Optional[FailureKind] = None
    reused: bool = False
    nodes_explored: int = 0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def direct(self) -> bool:
        return self.path is not None and self.path.direct

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "path": self.path.to_dict() if self.path is not None else None,
            "failure": self.failure.value if self.failure is not None else None,
            "reused": self.reused,
            "nodes_explored": self.nodes_explored,
            "warnings": self.warnings,
            "errors": self.errors,
            "metadata": self.metadata,
        }


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
]
