"""
Unit tests for navigation graph construction.

These tests verify both graph strategies (random samples and flood scan)
and the GraphManager rebuild rules.
"""

import numpy as np
import pytest

from route_policies import GraphPolicy, NavigationProfile, RouterPolicy
from corner_routing.core.graph import NavigationGraph
from corner_routing.ops.graph_build import (
    GraphManager,
    build_navigation_graph,
    build_random_sample_graph,
    build_reachable_scan_graph,
    scan_stencil,
)
from corner_routing.spatial import CollisionQueries, PrimitiveWorld


def open_queries():
    return CollisionQueries(PrimitiveWorld())


def wall_queries():
    world = PrimitiveWorld()
    world.add_box((4.9, -100.0, -100.0), (5.1, 100.0, 2.0), collider="wall")
    return world, CollisionQueries(world)


def assert_symmetric(graph: NavigationGraph):
    for i in range(graph.node_count):
        for j in graph.neighbors(i):
            assert i in graph.neighbors(j), f"edge {i}-{j} is not symmetric"


class TestNavigationGraph:
    def test_add_edge_rejections(self):
        graph = NavigationGraph()
        for x in range(4):
            graph.add_node(np.array([float(x), 0.0, 0.0]))

        assert graph.add_edge(0, 1) is True
        assert graph.add_edge(1, 0) is False
        assert graph.add_edge(2, 2) is False
        assert graph.add_edge(0, 2, max_degree=1) is False
        assert graph.edge_count == 1
        assert graph.has_edge(1, 0)

    def test_networkx_export(self):
        graph = NavigationGraph()
        a = graph.add_node(np.zeros(3))
        b = graph.add_node(np.array([3.0, 4.0, 0.0]))
        graph.add_node(np.array([9.0, 9.0, 9.0]))
        graph.add_edge(a, b)

        g = graph.to_networkx()
        assert g.number_of_nodes() == 3
        assert g.edges[a, b]["length"] == pytest.approx(5.0)
        assert graph.component_count() == 2

    def test_positions_array_tracks_new_nodes(self):
        graph = NavigationGraph()
        graph.add_node(np.zeros(3))
        assert graph.positions.shape == (1, 3)
        graph.add_node(np.ones(3))
        assert graph.positions.shape == (2, 3)


class TestScanStencil:
    @pytest.mark.parametrize("connectivity,size", [(6, 6), (18, 18), (26, 26)])
    def test_stencil_sizes(self, connectivity, size):
        assert len(scan_stencil(connectivity)) == size

    def test_face_offsets_come_first(self):
        stencil = scan_stencil(26)
        steps = [sum(abs(c) for c in offset) for offset in stencil]
        assert steps == sorted(steps)
        assert set(stencil[:6]) == set(scan_stencil(6))

    def test_unsupported_connectivity(self):
        with pytest.raises(ValueError):
            scan_stencil(8)


class TestRandomSampleGraph:
    def test_open_space_keeps_every_sample(self):
        policy = GraphPolicy(sample_point_count=48)
        graph, report = build_random_sample_graph(np.zeros(3), open_queries(), policy)

        assert graph.node_count == 48
        assert report.metrics["strategy"] == "random"
        assert report.metrics["node_count"] == 48

    def test_edges_are_symmetric_bounded_and_short(self):
        """Test degree limit, symmetry and maximum connection distance."""
        policy = GraphPolicy(sample_point_count=96, graph_neighbor_limit=4, max_connection_distance=5.0)
        graph, _ = build_random_sample_graph(np.zeros(3), open_queries(), policy)

        assert graph.edge_count > 0
        assert_symmetric(graph)
        for i in range(graph.node_count):
            assert graph.degree(i) <= 4
        for a, b in graph.edges():
            assert np.linalg.norm(graph.position(a) - graph.position(b)) <= 5.0 + 1e-9

    def test_same_seed_same_graph(self):
        policy = GraphPolicy(sample_point_count=32, seed=4)
        g1, _ = build_random_sample_graph(np.zeros(3), open_queries(), policy)
        g2, _ = build_random_sample_graph(np.zeros(3), open_queries(), policy)

        np.testing.assert_array_equal(g1.positions, g2.positions)
        assert list(g1.edges()) == list(g2.edges())

    def test_nodes_and_edges_respect_obstacles(self):
        world, queries = wall_queries()
        policy = GraphPolicy(sample_point_count=128, navigation_radius=10.0)
        graph, report = build_random_sample_graph(np.array([5.0, 0.0, 0.0]), queries, policy)

        for i in range(graph.node_count):
            assert world.is_point_clear(graph.position(i))
        for a, b in graph.edges():
            assert world.first_blocking_hit(graph.position(a), graph.position(b)) is None
        assert report.metrics["candidate_count"] == 128


class TestReachableScanGraph:
    def test_bounded_cube_is_fully_connected(self):
        """Test that a 3x3x3 scan links every pair of stencil neighbours."""
        policy = GraphPolicy(
            strategy="scan", scan_connectivity=26, scan_max_extent=(1, 1, 1), graph_neighbor_limit=26
        )
        graph, report = build_reachable_scan_graph(np.zeros(3), open_queries(), policy)

        assert graph.node_count == 27
        assert graph.edge_count == 158
        assert report.metrics["capped"] is False
        assert graph.component_count() == 1

    def test_six_connectivity(self):
        policy = GraphPolicy(strategy="scan", scan_connectivity=6, scan_max_extent=(1, 1, 1))
        graph, _ = build_reachable_scan_graph(np.zeros(3), open_queries(), policy)
        assert graph.node_count == 27
        assert graph.edge_count == 54

    def test_degree_limit_keeps_cube_connected(self):
        """Test that a degree-limited scan still reaches every cell of the cube."""
        policy = GraphPolicy(strategy="scan", scan_connectivity=26, scan_max_extent=(1, 1, 1), graph_neighbor_limit=6)
        graph, _ = build_reachable_scan_graph(np.zeros(3), open_queries(), policy)

        assert graph.node_count == 27
        assert max(graph.degree(i) for i in range(graph.node_count)) <= 6
        assert graph.component_count() == 1
        assert_symmetric(graph)

    def test_hallways_profile_respects_neighbor_limit(self):
        policy = RouterPolicy(profile=NavigationProfile.HALLWAYS).effective().graph
        graph, report = build_reachable_scan_graph(np.zeros(3), open_queries(), policy)

        assert graph.node_count == policy.scan_max_cells
        assert report.metrics["capped"] is True
        assert max(graph.degree(i) for i in range(graph.node_count)) <= policy.graph_neighbor_limit
        assert graph.component_count() == 1

    def test_cell_positions_are_anchored(self):
        anchor = np.array([0.5, -1.0, 2.0])
        policy = GraphPolicy(strategy="scan", scan_cell_size=2.0, scan_max_extent=(1, 0, 0))
        graph, _ = build_reachable_scan_graph(anchor, open_queries(), policy)

        xs = sorted(graph.positions[:, 0].tolist())
        assert xs == pytest.approx([-1.5, 0.5, 2.5])
        np.testing.assert_allclose(graph.position(0), anchor)

    def test_cap_truncates_and_reports(self):
        policy = GraphPolicy(strategy="scan", scan_max_cells=10)
        graph, report = build_reachable_scan_graph(np.zeros(3), open_queries(), policy)

        assert graph.node_count == 10
        assert report.metrics["capped"] is True
        assert report.warnings[0].startswith("graph_build_capped")
        assert_symmetric(graph)

    def test_blocked_anchor_gives_empty_graph(self):
        world = PrimitiveWorld()
        world.add_sphere((0.0, 0.0, 0.0), 1.0)
        graph, report = build_reachable_scan_graph(np.zeros(3), CollisionQueries(world), GraphPolicy(strategy="scan"))

        assert graph.is_empty
        assert report.warnings

    def test_scan_edges_never_cross_walls(self):
        world, queries = wall_queries()
        policy = GraphPolicy(strategy="scan", scan_cell_size=1.0, scan_max_extent=(3, 1, 4))
        graph, _ = build_reachable_scan_graph(np.array([3.0, 0.0, 0.0]), queries, policy)

        assert graph.node_count > 0
        for a, b in graph.edges():
            assert world.first_blocking_hit(graph.position(a), graph.position(b)) is None

    def test_dispatch_rejects_unknown_strategy(self):
        with pytest.raises(ValueError):
            build_navigation_graph(np.zeros(3), open_queries(), GraphPolicy(strategy="voronoi"))


class TestGraphManager:
    def test_rebuild_reasons(self):
        rebuilt = []
        manager = GraphManager(
            GraphPolicy(sample_point_count=16, graph_recenter_distance=4.0),
            on_rebuilt=lambda graph, report: rebuilt.append((graph.node_count, report.metrics["reason"])),
        )
        queries = open_queries()

        manager.ensure(np.zeros(3), queries)
        manager.ensure(np.array([3.0, 0.0, 0.0]), queries)
        assert manager.rebuild_count == 1

        manager.ensure(np.array([5.0, 0.0, 0.0]), queries)
        assert manager.rebuild_count == 2
        np.testing.assert_allclose(manager.graph.anchor, [5.0, 0.0, 0.0])

        manager.set_policy(GraphPolicy(sample_point_count=16, seed=2, graph_recenter_distance=4.0))
        manager.ensure(np.array([5.0, 0.0, 0.0]), queries)

        manager.mark_dirty()
        manager.ensure(np.array([5.0, 0.0, 0.0]), queries)

        assert [reason for _, reason in rebuilt] == ["dirty", "anchor_moved", "parameters_changed", "dirty"]
        assert all(count == 16 for count, _ in rebuilt)
        assert manager.last_report.metrics["reason"] == "dirty"

    def test_rebuild_replaces_graph_instance(self):
        manager = GraphManager(GraphPolicy(sample_point_count=8))
        queries = open_queries()
        first = manager.ensure(np.zeros(3), queries)
        manager.mark_dirty()
        second = manager.ensure(np.zeros(3), queries)
        assert first is not second
