"""
Unit tests for quantized collision query caching.

These tests verify that cache keys collapse float noise at two decimal
places, that segment keys ignore direction, and that exclusions and
clears drop stale results.
"""

import numpy as np
import pytest

from corner_routing.spatial.query_cache import (
    CollisionQueries,
    quantize_point,
    segment_key,
)


class CountingService:
    """Collision service stub that records every call."""

    def __init__(self, blocked_points=(), blocked=False):
        self.point_calls = []
        self.segment_calls = []
        self.blocked_points = [np.asarray(p, dtype=float) for p in blocked_points]
        self.blocked = blocked

    def is_point_clear(self, point, exclusions):
        self.point_calls.append((np.array(point, dtype=float), exclusions))
        return not any(np.allclose(point, p) for p in self.blocked_points)

    def first_blocking_hit(self, start, end, exclusions):
        self.segment_calls.append((np.array(start), np.array(end), exclusions))
        return object() if self.blocked else None


class TestQuantization:
    def test_two_decimal_precision(self):
        """Test that keys are integer hundredths."""
        assert quantize_point(np.array([1.234, -0.005, 2.0])) == (123, 0, 200)

    def test_noise_below_precision_shares_a_key(self):
        """Test that sub-centimeter noise maps to the same key."""
        assert quantize_point(np.array([1.001, 0.0, 0.0])) == quantize_point(np.array([1.002, 0.0, 0.0]))
        assert quantize_point(np.array([1.004, 0.0, 0.0])) != quantize_point(np.array([1.006, 0.0, 0.0]))

    def test_segment_key_is_order_independent(self):
        a = np.array([0.0, 1.0, 2.0])
        b = np.array([-3.0, 4.0, 5.0])
        assert segment_key(a, b) == segment_key(b, a)


class TestCollisionQueries:
    def test_point_results_are_cached(self):
        service = CountingService()
        queries = CollisionQueries(service)

        assert queries.is_point_clear(np.array([1.0, 2.0, 3.0])) is True
        assert queries.is_point_clear(np.array([1.001, 2.0, 3.0])) is True

        assert len(service.point_calls) == 1
        assert queries.hits == 1
        assert queries.misses == 1

    def test_reverse_segment_hits_cache(self):
        """Test that a->b and b->a share one visibility query."""
        service = CountingService(blocked=True)
        queries = CollisionQueries(service)
        a = np.zeros(3)
        b = np.array([5.0, 0.0, 0.0])

        assert queries.is_segment_clear(a, b) is False
        assert queries.is_segment_clear(b, a) is False
        assert len(service.segment_calls) == 1

    def test_clear_drops_cached_results(self):
        service = CountingService()
        queries = CollisionQueries(service)
        point = np.array([1.0, 1.0, 1.0])

        queries.is_point_clear(point)
        queries.clear()
        queries.is_point_clear(point)

        assert len(service.point_calls) == 2

    def test_changed_exclusions_clear_cache(self):
        """Test that a new exclusion set is forwarded and invalidates results."""
        service = CountingService()
        queries = CollisionQueries(service, exclusions=["self"])
        point = np.array([1.0, 1.0, 1.0])

        queries.is_point_clear(point)
        queries.set_exclusions(["self"])
        queries.is_point_clear(point)
        assert len(service.point_calls) == 1

        queries.set_exclusions(["self", "listener"])
        queries.is_point_clear(point)
        assert len(service.point_calls) == 2
        assert service.point_calls[-1][1] == frozenset({"self", "listener"})

    def test_edge_checkpoints_are_evenly_spaced(self):
        """Test that n checkpoints sit at i / (n + 1) along the edge."""
        service = CountingService()
        queries = CollisionQueries(service)

        assert queries.is_edge_clear(np.zeros(3), np.array([3.0, 0.0, 0.0]), checkpoints=2) is True
        probed = [call[0] for call in service.point_calls]
        np.testing.assert_allclose(probed, [[1.0, 0.0, 0.0], [2.0, 0.0, 0.0]])

    def test_blocked_checkpoint_rejects_edge(self):
        service = CountingService(blocked_points=[(2.0, 0.0, 0.0)])
        queries = CollisionQueries(service)
        assert queries.is_edge_clear(np.zeros(3), np.array([3.0, 0.0, 0.0]), checkpoints=2) is False
        assert queries.is_edge_clear(np.zeros(3), np.array([3.0, 0.0, 0.0]), checkpoints=0) is True

    def test_first_blocking_hit_is_not_cached(self):
        service = CountingService(blocked=True)
        queries = CollisionQueries(service)
        a = np.zeros(3)
        b = np.ones(3)

        queries.first_blocking_hit(a, b)
        queries.first_blocking_hit(a, b)
        assert len(service.segment_calls) == 2

    def test_stats(self):
        queries = CollisionQueries(CountingService())
        queries.is_point_clear(np.zeros(3))
        queries.is_segment_clear(np.zeros(3), np.ones(3))
        stats = queries.stats()
        assert stats["cached_points"] == 1
        assert stats["cached_segments"] == 1
        assert stats["misses"] == 2
