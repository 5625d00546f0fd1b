"""
Cached collision queries keyed by quantized points.

Point-clearance and segment-visibility results are memoised per full
recompute. Keys are integer tuples at a fixed precision of
QUANTIZE_DECIMALS decimal places, which avoids float keys that differ
only in noise. Both caches must be cleared before each recompute and
before each graph rebuild; stale collision results are a correctness
bug.
"""

from typing import Any, Dict, Hashable, Iterable, Optional, Tuple

import numpy as np

from ..core.interfaces import CollisionQueryService, Exclusions
from ..core.types import Hit

QUANTIZE_DECIMALS = 2
_QUANTIZE_SCALE = 10 ** QUANTIZE_DECIMALS

PointKey = Tuple[int, int, int]


def quantize_point(point: np.ndarray) -> PointKey:
    """
    Quantize a point to an integer tuple at QUANTIZE_DECIMALS precision.

    Ties round half to even, matching numpy's rounding.

    Examples
    --------
    >>> quantize_point(np.array([1.234, -0.005, 2.0]))
    (123, 0, 200)
    """
    scaled = np.round(np.asarray(point, dtype=float) * _QUANTIZE_SCALE)
    return (int(scaled[0]), int(scaled[1]), int(scaled[2]))


def segment_key(a: np.ndarray, b: np.ndarray) -> Tuple[PointKey, PointKey]:
    """Order-independent key for the segment between two points."""
    ka = quantize_point(a)
    kb = quantize_point(b)
    return (ka, kb) if ka <= kb else (kb, ka)


class CollisionQueries:
    """
    Collision service wrapper holding the query exclusions and result caches.

    Parameters
    ----------
    service : CollisionQueryService
        Host collision implementation
    exclusions : iterable of hashable, optional
        Collider ids ignored by every query
    """

    def __init__(
        self,
        service: CollisionQueryService,
        exclusions: Optional[Iterable[Hashable]] = None,
    ):
        self.service = service
        self.exclusions: Exclusions = frozenset(exclusions or ())
        self._point_cache: Dict[PointKey, bool] = {}
        self._segment_cache: Dict[Tuple[PointKey, PointKey], bool] = {}
        self.hits = 0
        self.misses = 0

    def clear(self) -> None:
        """Drop every cached result."""
        self._point_cache.clear()
        self._segment_cache.clear()

    def set_exclusions(self, exclusions: Iterable[Hashable]) -> None:
        """Replace the exclusion set; cached results are dropped when it changes."""
        new = frozenset(exclusions)
        if new != self.exclusions:
            self.exclusions = new
            self.clear()

    def is_point_clear(self, point: np.ndarray) -> bool:
        key = quantize_point(point)
        cached = self._point_cache.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        clear = bool(self.service.is_point_clear(point, self.exclusions))
        self._point_cache[key] = clear
        return clear

    def is_segment_clear(self, a: np.ndarray, b: np.ndarray) -> bool:
        key = segment_key(a, b)
        cached = self._segment_cache.get(key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        clear = self.service.first_blocking_hit(a, b, self.exclusions) is None
        self._segment_cache[key] = clear
        return clear

    def first_blocking_hit(self, a: np.ndarray, b: np.ndarray) -> Optional[Hit]:
        """Uncached pass-through, for callers that need the hit details."""
        return self.service.first_blocking_hit(a, b, self.exclusions)

    def is_edge_clear(self, a: np.ndarray, b: np.ndarray, checkpoints: int = 0) -> bool:
        """
        Segment visibility plus ``checkpoints`` evenly spaced interior clearance tests.

        Checkpoint i of n sits at t = i / (n + 1).
        """
        if not self.is_segment_clear(a, b):
            return False
        for i in range(1, checkpoints + 1):
            t = i / (checkpoints + 1)
            if not self.is_point_clear(a + (b - a) * t):
                return False
        return True

    def stats(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "cached_points": len(self._point_cache),
            "cached_segments": len(self._segment_cache),
        }


__all__ = [
    "QUANTIZE_DECIMALS",
    "PointKey",
    "quantize_point",
    "segment_key",
    "CollisionQueries",
]
