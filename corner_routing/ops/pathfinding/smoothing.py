"""
String-pulling path smoothing.

From the current anchor point, jump to the furthest later point that is
still directly visible, then repeat from there. The result never has
more waypoints or more length than the input, and smoothing an
already-smoothed path returns it unchanged.
"""

from typing import List, Sequence

import numpy as np

from ...spatial.query_cache import CollisionQueries


def smooth_path(points: Sequence[np.ndarray], queries: CollisionQueries) -> List[np.ndarray]:
    """
    Remove waypoints that a straight visible line can skip.

    Parameters
    ----------
    points : sequence of np.ndarray
        Path from origin to target
    queries : CollisionQueries
        Cached collision queries

    Returns
    -------
    List[np.ndarray]
        Smoothed path; paths of two points or fewer are returned as-is
    """
    if len(points) <= 2:
        return list(points)

    last = len(points) - 1
    smoothed = [points[0]]
    anchor = 0
    while anchor < last:
        nxt = anchor + 1
        # Scan from the end; the first clear line is the furthest one.
        for j in range(last, anchor + 1, -1):
            if queries.is_segment_clear(points[anchor], points[j]):
                nxt = j
                break
        smoothed.append(points[nxt])
        anchor = nxt
    return smoothed


__all__ = ["smooth_path"]
