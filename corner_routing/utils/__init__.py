"""
Utility functions for proxy routing.
"""

from .geometry import (
    as_point,
    euclidean,
    manhattan,
    metric_distance,
    path_length,
    distance_from_end,
    point_at_distance_from_end,
    lerp,
)

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
