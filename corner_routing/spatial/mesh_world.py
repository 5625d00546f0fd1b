"""
Triangle-mesh collision world backed by trimesh.

Implements the CollisionQueryService interface over one or more
trimesh.Trimesh colliders. Segment tests run a vectorised ray/triangle
intersection over every triangle; clearance tests use the closest point
on each triangle and, for watertight meshes, an inside test by ray
parity.

UNIT CONVENTIONS
----------------
All geometric values are in METERS.
"""

from typing import Hashable, List, Optional, Sequence, Union
import logging

import numpy as np
import trimesh
from trimesh.triangles import closest_point as closest_point_on_triangles

from ..core.types import Hit

logger = logging.getLogger(__name__)

_EPS = 1e-9


def segment_triangle_params(
    a: np.ndarray,
    d: np.ndarray,
    triangles: np.ndarray,
) -> np.ndarray:
    """
    Moller-Trumbore intersection of segment a + t*d against many triangles.

    Parameters
    ----------
    a : np.ndarray
        Segment start (3,)
    d : np.ndarray
        Segment direction scaled to segment length (3,)
    triangles : np.ndarray
        Triangle vertices (T, 3, 3)

    Returns
    -------
    np.ndarray
        Parameter t per triangle, np.inf where there is no hit in [0, 1]
    """
    v0 = triangles[:, 0]
    e1 = triangles[:, 1] - v0
    e2 = triangles[:, 2] - v0
    p = np.cross(d, e2)
    det = np.einsum("ij,ij->i", e1, p)
    valid = np.abs(det) > _EPS
    inv_det = np.where(valid, 1.0 / np.where(valid, det, 1.0), 0.0)

    s = a - v0
    u = np.einsum("ij,ij->i", s, p) * inv_det
    q = np.cross(s, e1)
    v = (q @ d) * inv_det
    t = np.einsum("ij,ij->i", e2, q) * inv_det

    hit = valid & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t >= 0.0) & (t <= 1.0)
    return np.where(hit, t, np.inf)


class MeshWorld:
    """
    Collision world over trimesh meshes.

    Parameters
    ----------
    meshes : trimesh.Trimesh or sequence of trimesh.Trimesh
        Collider geometry
    probe_radius : float
        Clearance radius used by is_point_clear
    collider_ids : sequence of hashable, optional
        One id per mesh; defaults to the mesh index
    """

    def __init__(
        self,
        meshes: Union[trimesh.Trimesh, Sequence[trimesh.Trimesh]],
        probe_radius: float = 0.25,
        collider_ids: Optional[Sequence[Hashable]] = None,
    ):
        if isinstance(meshes, trimesh.Trimesh):
            meshes = [meshes]
        self.meshes: List[trimesh.Trimesh] = list(meshes)
        self.probe_radius = float(probe_radius)
        if collider_ids is None:
            collider_ids = list(range(len(self.meshes)))
        if len(collider_ids) != len(self.meshes):
            raise ValueError("collider_ids must match the number of meshes")
        self.collider_ids: List[Hashable] = list(collider_ids)

        tris = [np.asarray(m.triangles, dtype=float) for m in self.meshes]
        normals = [np.asarray(m.face_normals, dtype=float) for m in self.meshes]
        owners = [np.full(len(t), i, dtype=int) for i, t in enumerate(tris)]
        self._triangles = np.concatenate(tris) if tris else np.zeros((0, 3, 3))
        self._normals = np.concatenate(normals) if normals else np.zeros((0, 3))
        self._owner = np.concatenate(owners) if owners else np.zeros(0, dtype=int)
        self._watertight = [bool(m.is_watertight) for m in self.meshes]

        if self.meshes:
            bounds = np.vstack([m.bounds for m in self.meshes])
            self._far = float(np.linalg.norm(bounds.max(axis=0) - bounds.min(axis=0))) * 2.0 + 1.0
        else:
            self._far = 1.0

        logger.debug(
            f"MeshWorld with {len(self.meshes)} meshes, {len(self._triangles)} triangles"
        )

    @classmethod
    def from_file(cls, path: str, probe_radius: float = 0.25) -> "MeshWorld":
        """Load a mesh file (any format trimesh reads) as a single collider."""
        mesh = trimesh.load(path, force="mesh")
        return cls(mesh, probe_radius=probe_radius, collider_ids=[str(path)])

    def _active(self, exclusions) -> np.ndarray:
        excluded = [i for i, cid in enumerate(self.collider_ids) if cid in exclusions]
        if not excluded:
            return np.ones(len(self._owner), dtype=bool)
        return ~np.isin(self._owner, excluded)

    def is_point_clear(self, point: np.ndarray, exclusions=frozenset()) -> bool:
        p = np.asarray(point, dtype=float)
        active = self._active(exclusions)
        if not active.any():
            return True
        tris = self._triangles[active]
        closest = closest_point_on_triangles(tris, np.tile(p, (len(tris), 1)))
        if np.min(np.linalg.norm(closest - p, axis=1)) <= self.probe_radius:
            return False
        return not self._inside_any(p, exclusions)

    def _inside_any(self, p: np.ndarray, exclusions) -> bool:
        """Ray-parity inside test against each watertight, non-excluded mesh."""
        direction = np.array([self._far, 0.0, 0.0])
        t = segment_triangle_params(p, direction, self._triangles)
        for i, cid in enumerate(self.collider_ids):
            if cid in exclusions or not self._watertight[i]:
                continue
            crossings = int(np.count_nonzero(np.isfinite(t[self._owner == i])))
            if crossings % 2 == 1:
                return True
        return False

    def first_blocking_hit(self, start: np.ndarray, end: np.ndarray, exclusions=frozenset()) -> Optional[Hit]:
        a = np.asarray(start, dtype=float)
        d = np.asarray(end, dtype=float) - a
        if float(np.linalg.norm(d)) < _EPS or len(self._triangles) == 0:
            return None
        active = self._active(exclusions)
        t = segment_triangle_params(a, d, self._triangles)
        t = np.where(active, t, np.inf)
        idx = int(np.argmin(t))
        if not np.isfinite(t[idx]):
            return None
        normal = self._normals[idx]
        if np.dot(normal, d) > 0.0:
            normal = -normal
        return Hit(
            position=a + d * t[idx],
            normal=normal.copy(),
            collider=self.collider_ids[self._owner[idx]],
        )


__all__ = ["MeshWorld", "segment_triangle_params"]
