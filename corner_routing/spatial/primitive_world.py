"""
Analytic collision world made of axis-aligned boxes and spheres.

Implements the CollisionQueryService interface without a host engine.
Used by the CLI smoke scenes, the scenario tests and anywhere a cheap,
exact collision answer is enough.

UNIT CONVENTIONS
----------------
All geometric values are in METERS.
"""

from typing import Hashable, Iterable, List, Optional

import numpy as np

from ..core.types import Hit
from ..utils.geometry import as_point

_EPS = 1e-12


class PrimitiveWorld:
    """
    Boxes and spheres with collider ids.

    Parameters
    ----------
    probe_radius : float
        Clearance radius used by is_point_clear. A point is clear when a
        sphere of this radius around it touches no non-excluded collider.
    """

    def __init__(self, probe_radius: float = 0.25):
        self.probe_radius = float(probe_radius)
        self._box_min = np.zeros((0, 3))
        self._box_max = np.zeros((0, 3))
        self._box_ids: List[Hashable] = []
        self._sphere_center = np.zeros((0, 3))
        self._sphere_radius = np.zeros(0)
        self._sphere_ids: List[Hashable] = []
        self.query_count = 0

    @property
    def collider_count(self) -> int:
        return len(self._box_ids) + len(self._sphere_ids)

    def add_box(self, minimum, maximum, collider: Optional[Hashable] = None) -> Hashable:
        """Add an axis-aligned box and return its collider id."""
        lo = as_point(minimum)
        hi = as_point(maximum)
        lo, hi = np.minimum(lo, hi), np.maximum(lo, hi)
        if collider is None:
            collider = f"box{len(self._box_ids)}"
        self._box_min = np.vstack([self._box_min, lo])
        self._box_max = np.vstack([self._box_max, hi])
        self._box_ids.append(collider)
        return collider

    def add_sphere(self, center, radius: float, collider: Optional[Hashable] = None) -> Hashable:
        """Add a solid sphere and return its collider id."""
        if collider is None:
            collider = f"sphere{len(self._sphere_ids)}"
        self._sphere_center = np.vstack([self._sphere_center, as_point(center)])
        self._sphere_radius = np.append(self._sphere_radius, float(radius))
        self._sphere_ids.append(collider)
        return collider

    def add_box_shell(
        self,
        minimum,
        maximum,
        thickness: float = 0.2,
        collider_prefix: str = "shell",
    ) -> List[Hashable]:
        """
        Add six walls enclosing the box [minimum, maximum] from outside.

        The interior stays free; nothing inside can see out.
        """
        lo = as_point(minimum)
        hi = as_point(maximum)
        t = float(thickness)
        ids = []
        for axis in range(3):
            for side, label in ((0, "lo"), (1, "hi")):
                wall_lo = lo - t
                wall_hi = hi + t
                if side == 0:
                    wall_hi = wall_hi.copy()
                    wall_hi[axis] = lo[axis]
                else:
                    wall_lo = wall_lo.copy()
                    wall_lo[axis] = hi[axis]
                ids.append(self.add_box(wall_lo, wall_hi, f"{collider_prefix}_{'xyz'[axis]}{label}"))
        return ids

    def _box_mask(self, exclusions: Iterable[Hashable]) -> np.ndarray:
        return np.array([cid not in exclusions for cid in self._box_ids], dtype=bool)

    def _sphere_mask(self, exclusions: Iterable[Hashable]) -> np.ndarray:
        return np.array([cid not in exclusions for cid in self._sphere_ids], dtype=bool)

    def is_point_clear(self, point: np.ndarray, exclusions=frozenset()) -> bool:
        self.query_count += 1
        p = np.asarray(point, dtype=float)
        if self._box_ids:
            mask = self._box_mask(exclusions)
            if mask.any():
                closest = np.clip(p, self._box_min[mask], self._box_max[mask])
                dist = np.linalg.norm(closest - p, axis=1)
                if np.any(dist <= self.probe_radius):
                    return False
        if self._sphere_ids:
            mask = self._sphere_mask(exclusions)
            if mask.any():
                dist = np.linalg.norm(self._sphere_center[mask] - p, axis=1) - self._sphere_radius[mask]
                if np.any(dist <= self.probe_radius):
                    return False
        return True

    def first_blocking_hit(self, start: np.ndarray, end: np.ndarray, exclusions=frozenset()) -> Optional[Hit]:
        self.query_count += 1
        a = np.asarray(start, dtype=float)
        b = np.asarray(end, dtype=float)
        d = b - a
        seg_len = float(np.linalg.norm(d))
        if seg_len < _EPS:
            return None

        best_t = np.inf
        best_normal = None
        best_id = None

        if self._box_ids:
            mask = self._box_mask(exclusions)
            if mask.any():
                t, normals, idx = self._ray_boxes(a, d, self._box_min[mask], self._box_max[mask])
                if t is not None and t < best_t:
                    best_t = t
                    best_normal = normals
                    best_id = [cid for cid, m in zip(self._box_ids, mask) if m][idx]

        if self._sphere_ids:
            mask = self._sphere_mask(exclusions)
            if mask.any():
                t, normal, idx = self._ray_spheres(a, d, self._sphere_center[mask], self._sphere_radius[mask])
                if t is not None and t < best_t:
                    best_t = t
                    best_normal = normal
                    best_id = [cid for cid, m in zip(self._sphere_ids, mask) if m][idx]

        if best_normal is None:
            return None
        return Hit(position=a + d * best_t, normal=best_normal, collider=best_id)

    @staticmethod
    def _ray_boxes(a: np.ndarray, d: np.ndarray, lo: np.ndarray, hi: np.ndarray):
        """Slab test of segment a + t*d, t in [0, 1], against many boxes."""
        parallel = np.abs(d) < _EPS
        safe_d = np.where(parallel, 1.0, d)
        t1 = (lo - a) / safe_d
        t2 = (hi - a) / safe_d
        near = np.minimum(t1, t2)
        far = np.maximum(t1, t2)

        # Parallel axes: either always inside the slab or never.
        inside_slab = (a >= lo) & (a <= hi)
        near = np.where(parallel, np.where(inside_slab, -np.inf, np.inf), near)
        far = np.where(parallel, np.where(inside_slab, np.inf, -np.inf), far)

        t_near = near.max(axis=1)
        t_far = far.min(axis=1)
        hit = (t_far >= np.maximum(t_near, 0.0)) & (t_near <= 1.0)
        if not hit.any():
            return None, None, None

        t_entry = np.where(hit, np.maximum(t_near, 0.0), np.inf)
        idx = int(np.argmin(t_entry))
        if t_near[idx] < 0.0:
            normal = -d / np.linalg.norm(d)
        else:
            axis = int(np.argmax(near[idx]))
            normal = np.zeros(3)
            normal[axis] = -np.sign(d[axis])
        return float(t_entry[idx]), normal, idx

    @staticmethod
    def _ray_spheres(a: np.ndarray, d: np.ndarray, centers: np.ndarray, radii: np.ndarray):
        f = a - centers
        qa = float(np.dot(d, d))
        qb = 2.0 * (f @ d)
        qc = np.einsum("ij,ij->i", f, f) - radii ** 2
        disc = qb ** 2 - 4.0 * qa * qc

        inside = qc <= 0.0
        sqrt_disc = np.sqrt(np.maximum(disc, 0.0))
        t_enter = (-qb - sqrt_disc) / (2.0 * qa)
        t = np.where(inside, 0.0, t_enter)
        hit = inside | ((disc >= 0.0) & (t_enter >= 0.0) & (t_enter <= 1.0))
        if not hit.any():
            return None, None, None

        t = np.where(hit, t, np.inf)
        idx = int(np.argmin(t))
        position = a + d * t[idx]
        normal = position - centers[idx]
        norm = np.linalg.norm(normal)
        normal = normal / norm if norm > _EPS else -d / np.linalg.norm(d)
        return float(t[idx]), normal, idx


__all__ = ["PrimitiveWorld"]
