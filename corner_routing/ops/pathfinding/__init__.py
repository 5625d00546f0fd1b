"""
Route finding over the anchor-centered navigation graph.

Provides dynamic endpoint linking, greedy A*, string-pulling, the
single-entry reuse cache and the combined resolve pipeline.
"""

from .linking import link_point
from .greedy_astar import SearchResult, greedy_astar
from .smoothing import smooth_path
from .reuse import CachedPath, PathCache
from .resolve import resolve_route

__all__ = [
    "link_point",
    "SearchResult",
    "greedy_astar",
    "smooth_path",
    "CachedPath",
    "PathCache",
    "resolve_route",
]
