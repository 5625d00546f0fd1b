"""
Unit tests for string-pulling path smoothing.
"""

import numpy as np
import pytest

from corner_routing.ops.pathfinding import smooth_path
from corner_routing.spatial import CollisionQueries, PrimitiveWorld
from corner_routing.utils.geometry import path_length


def wall_queries():
    world = PrimitiveWorld()
    world.add_box((4.9, -100.0, -100.0), (5.1, 100.0, 2.0), collider="wall")
    return world, CollisionQueries(world)


def staircase():
    """A jagged route over the wall at x = 5."""
    return [
        np.array([0.0, 0.0, 0.0]),
        np.array([1.0, 0.0, 1.0]),
        np.array([2.0, 0.0, 2.0]),
        np.array([4.0, 0.0, 3.0]),
        np.array([6.0, 0.0, 3.0]),
        np.array([8.0, 0.0, 1.0]),
        np.array([10.0, 0.0, 0.0]),
    ]


class TestSmoothPath:
    def test_removes_skippable_waypoints(self):
        world, queries = wall_queries()
        points = staircase()
        smoothed = smooth_path(points, queries)

        assert len(smoothed) < len(points)
        np.testing.assert_allclose(smoothed[0], points[0])
        np.testing.assert_allclose(smoothed[-1], points[-1])
        for a, b in zip(smoothed[:-1], smoothed[1:]):
            assert world.first_blocking_hit(a, b) is None

    def test_never_longer_than_input(self):
        _, queries = wall_queries()
        points = staircase()
        assert path_length(smooth_path(points, queries)) <= path_length(points) + 1e-9

    def test_idempotent(self):
        _, queries = wall_queries()
        once = smooth_path(staircase(), queries)
        twice = smooth_path(once, queries)

        assert len(twice) == len(once)
        for a, b in zip(once, twice):
            np.testing.assert_allclose(a, b)

    def test_keeps_required_corner(self):
        """Test that a corner blocking the direct line survives."""
        _, queries = wall_queries()
        points = [np.zeros(3), np.array([5.0, 0.0, 3.0]), np.array([10.0, 0.0, 0.0])]
        smoothed = smooth_path(points, queries)
        assert len(smoothed) == 3

    def test_visible_path_collapses_to_endpoints(self):
        queries = CollisionQueries(PrimitiveWorld())
        points = [np.zeros(3), np.array([1.0, 1.0, 0.0]), np.array([2.0, -1.0, 0.0]), np.array([3.0, 0.0, 0.0])]
        smoothed = smooth_path(points, queries)
        assert len(smoothed) == 2

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_short_paths_unchanged(self, count):
        points = [np.array([float(i), 0.0, 0.0]) for i in range(count)]
        assert len(smooth_path(points, CollisionQueries(PrimitiveWorld()))) == count
