"""
Candidate point sampling around a graph anchor.

Offsets are drawn once per (seed, count) pair inside the unit sphere and
scaled by the navigation radius at build time, so changing the radius or
moving the anchor does not reshuffle the sample set.

UNIT CONVENTIONS
----------------
All geometric values are in METERS.
"""

from typing import Optional, Tuple
import logging

import numpy as np

logger = logging.getLogger(__name__)


def sample_unit_sphere(count: int, seed: int, batch_size: Optional[int] = None) -> np.ndarray:
    """
    Draw ``count`` points uniformly inside the unit sphere.

    Uses rejection sampling: draw in the cube [-1, 1]^3 and discard points
    outside the sphere. Deterministic for a fixed seed.

    Parameters
    ----------
    count : int
        Number of points to return
    seed : int
        RNG seed
    batch_size : int, optional
        Cube draws per rejection round (defaults to 2 * count)

    Returns
    -------
    np.ndarray
        Offsets of shape (count, 3)
    """
    if count <= 0:
        return np.zeros((0, 3))
    rng = np.random.default_rng(seed)
    batch = batch_size or max(8, 2 * count)
    accepted = []
    total = 0
    while total < count:
        cube = rng.uniform(-1.0, 1.0, size=(batch, 3))
        inside = cube[np.einsum("ij,ij->i", cube, cube) <= 1.0]
        accepted.append(inside)
        total += len(inside)
    return np.concatenate(accepted)[:count]


class SphereSampler:
    """
    Reproducible random-sphere sample set.

    The unit offsets are regenerated only when the sample count or seed
    changes; ``points`` scales them into world space on demand.
    """

    def __init__(self):
        self._key: Optional[Tuple[int, int]] = None
        self._offsets = np.zeros((0, 3))
        self.generation_count = 0

    def offsets(self, count: int, seed: int) -> np.ndarray:
        key = (int(count), int(seed))
        if key != self._key:
            self._offsets = sample_unit_sphere(count, seed)
            self._key = key
            self.generation_count += 1
            logger.debug(f"Regenerated {count} sample offsets (seed={seed})")
        return self._offsets

    def points(self, anchor: np.ndarray, radius: float, count: int, seed: int) -> np.ndarray:
        """World-space candidate points around ``anchor``."""
        return np.asarray(anchor, dtype=float) + self.offsets(count, seed) * float(radius)


__all__ = ["sample_unit_sphere", "SphereSampler"]
