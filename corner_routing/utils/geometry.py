"""
Canonical geometry utilities for proxy routing.

This module provides the single source of truth for point coercion,
distance metrics and polyline measurements used across the codebase.

UNIT CONVENTIONS
----------------
All geometric values are in METERS.
"""

import numpy as np
from typing import Any, Sequence


def as_point(value: Any) -> np.ndarray:
    """
    Coerce a 3-vector-like value into a float64 array of shape (3,).

    Raises
    ------
    ValueError
        If the value does not hold exactly three finite numbers.
    """
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3D point, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"Point has non-finite components: {arr}")
    return arr


def euclidean(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(b - a))


def manhattan(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.abs(b - a).sum())


def metric_distance(a: np.ndarray, b: np.ndarray, metric: str = "euclidean") -> float:
    """Distance between two points under a named metric."""
    if metric == "euclidean":
        return euclidean(a, b)
    if metric == "manhattan":
        return manhattan(a, b)
    raise ValueError(f"Unknown distance metric: {metric!r}")


def path_length(points: Sequence[np.ndarray]) -> float:
    """Total Euclidean length of a polyline."""
    return float(sum(
        np.linalg.norm(points[i + 1] - points[i])
        for i in range(len(points) - 1)
    ))


def distance_from_end(points: Sequence[np.ndarray], index: int) -> float:
    """Length of the polyline from ``points[index]`` to its last point."""
    index = max(0, min(index, len(points) - 1))
    return path_length(points[index:])


def point_at_distance_from_end(points: Sequence[np.ndarray], distance: float) -> np.ndarray:
    """
    Walk backward from the polyline end and return the point ``distance`` along it.

    Distances beyond the total length clamp to the first point.
    """
    if not points:
        raise ValueError("Cannot sample an empty polyline")
    remaining = max(0.0, float(distance))
    for i in range(len(points) - 1, 0, -1):
        a = points[i]
        b = points[i - 1]
        seg = float(np.linalg.norm(b - a))
        if remaining <= seg:
            if seg <= 0.0:
                return a.copy()
            return lerp(a, b, remaining / seg)
        remaining -= seg
    return np.array(points[0], dtype=float)


def lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Blend from ``a`` toward ``b``; ``t`` is clamped to [0, 1]."""
    t = max(0.0, min(1.0, t))
    return a + (b - a) * t


__all__ = [
    "as_point",
    "euclidean",
    "manhattan",
    "metric_distance",
    "path_length",
    "distance_from_end",
    "point_at_distance_from_end",
    "lerp",
]
