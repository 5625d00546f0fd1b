"""
Collision query helpers and reference collision worlds.
"""

from .query_cache import (
    QUANTIZE_DECIMALS,
    quantize_point,
    segment_key,
    CollisionQueries,
)
from .primitive_world import PrimitiveWorld
from .mesh_world import MeshWorld, segment_triangle_params

__all__ = [
    "QUANTIZE_DECIMALS",
    "quantize_point",
    "segment_key",
    "CollisionQueries",
    "PrimitiveWorld",
    "MeshWorld",
    "segment_triangle_params",
]
