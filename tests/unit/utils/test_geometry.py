"""
Tests for the shared geometry helpers.
"""

import numpy as np
import pytest

from corner_routing.utils.geometry import (
    as_point,
    distance_from_end,
    lerp,
    manhattan,
    metric_distance,
    path_length,
    point_at_distance_from_end,
)


def l_path():
    return [np.array([0.0, 0.0, 0.0]), np.array([3.0, 0.0, 0.0]), np.array([3.0, 4.0, 0.0])]


class TestPointCoercion:
    def test_accepts_sequences(self):
        np.testing.assert_array_equal(as_point((1, 2, 3)), [1.0, 2.0, 3.0])
        assert as_point([1, 2, 3]).dtype == float

    def test_rejects_wrong_shape(self):
        with pytest.raises(ValueError):
            as_point((1.0, 2.0))

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError):
            as_point((0.0, np.nan, 0.0))


class TestDistances:
    def test_metrics(self):
        a = np.zeros(3)
        b = np.array([1.0, 2.0, 2.0])
        assert metric_distance(a, b, "euclidean") == pytest.approx(3.0)
        assert metric_distance(a, b, "manhattan") == pytest.approx(5.0)
        assert manhattan(b, a) == pytest.approx(5.0)

    def test_unknown_metric(self):
        with pytest.raises(ValueError, match="metric"):
            metric_distance(np.zeros(3), np.ones(3), "chebyshev")

    def test_lerp_clamps_blend_factor(self):
        a = np.zeros(3)
        b = np.array([4.0, 0.0, -2.0])
        np.testing.assert_allclose(lerp(a, b, 0.25), [1.0, 0.0, -0.5])
        np.testing.assert_allclose(lerp(a, b, 3.0), b)
        np.testing.assert_allclose(lerp(a, b, -1.0), a)


class TestPolylineWalk:
    """Distances along a polyline measured back from its end."""

    def test_path_length(self):
        assert path_length(l_path()) == pytest.approx(7.0)

    def test_distance_from_end(self):
        points = l_path()
        assert distance_from_end(points, 2) == pytest.approx(0.0)
        assert distance_from_end(points, 1) == pytest.approx(4.0)
        assert distance_from_end(points, 0) == pytest.approx(7.0)
        assert distance_from_end(points, -5) == pytest.approx(7.0)

    def test_point_at_distance_from_end(self):
        points = l_path()
        np.testing.assert_allclose(point_at_distance_from_end(points, 0.0), [3.0, 4.0, 0.0])
        np.testing.assert_allclose(point_at_distance_from_end(points, 1.0), [3.0, 3.0, 0.0])
        np.testing.assert_allclose(point_at_distance_from_end(points, 4.0), [3.0, 0.0, 0.0])
        np.testing.assert_allclose(point_at_distance_from_end(points, 5.0), [2.0, 0.0, 0.0])

    def test_walk_clamps_to_first_point(self):
        points = l_path()
        np.testing.assert_allclose(point_at_distance_from_end(points, 100.0), [0.0, 0.0, 0.0])
        np.testing.assert_allclose(point_at_distance_from_end(points, -1.0), [3.0, 4.0, 0.0])
