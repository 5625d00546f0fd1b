"""
Single-entry path cache and reuse policy.

The cache keeps the last successful non-direct path: its origin, target,
total length and interior waypoints. Endpoints change every query, so
reuse rebuilds a candidate as ``[new_origin] + interior + [new_target]``
and accepts it only if every check passes. A rejection is silent and the
caller falls through to a full graph search.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

import numpy as np

from route_policies import ReusePolicy
from ...core.types import RoutePath
from ...spatial.query_cache import CollisionQueries
from ...utils.geometry import path_length

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class CachedPath:
    origin: np.ndarray
    target: np.ndarray
    length: float
    interior: Tuple[np.ndarray, ...]


class PathCache:
    """Holds at most one cached path."""

    def __init__(self):
        self.entry: Optional[CachedPath] = None
        self.accepted = 0
        self.rejected = 0

    def __bool__(self) -> bool:
        return self.entry is not None

    def clear(self) -> None:
        self.entry = None

    def store(self, path: RoutePath) -> None:
        """Cache a solved path; direct paths are ignored."""
        if path.direct or len(path) < 3:
            return
        self.entry = CachedPath(
            origin=path.origin.copy(),
            target=path.target.copy(),
            length=path.length,
            interior=tuple(p.copy() for p in path.interior),
        )

    def try_reuse(
        self,
        origin: np.ndarray,
        target: np.ndarray,
        queries: CollisionQueries,
        policy: ReusePolicy,
    ) -> Tuple[Optional[RoutePath], Optional[str]]:
        """
        Validate the cached interior against new endpoints.

        Returns
        -------
        path : RoutePath or None
            The reused path when accepted
        reason : str or None
            Why reuse was rejected, None when accepted
        """
        reason = self._rejection_reason(origin, target, queries, policy)
        if reason is not None:
            self.rejected += 1
            logger.debug(f"Path reuse rejected: {reason}")
            return None, reason
        self.accepted += 1
        return RoutePath.from_points([origin, *self.entry.interior, target], direct=False), None

    def _rejection_reason(
        self,
        origin: np.ndarray,
        target: np.ndarray,
        queries: CollisionQueries,
        policy: ReusePolicy,
    ) -> Optional[str]:
        if not policy.enabled:
            return "disabled"
        entry = self.entry
        if entry is None:
            return "empty"
        if np.linalg.norm(origin - entry.origin) > policy.reuse_origin_tolerance:
            return "origin_moved"
        if np.linalg.norm(target - entry.target) > policy.reuse_target_tolerance:
            return "target_moved"

        candidate = [origin, *entry.interior, target]
        for a, b in zip(candidate[:-1], candidate[1:]):
            if not queries.is_segment_clear(a, b):
                return "segment_blocked"

        length = path_length(candidate)
        if length > policy.cached_length_growth_limit * entry.length:
            return "longer_than_cached"
        direct = float(np.linalg.norm(target - origin))
        if length > policy.reuse_max_detour_ratio * direct:
            return "detour_too_long"
        return None


__all__ = ["CachedPath", "PathCache"]
