"""
Navigation graph construction around an anchor point.

Two interchangeable strategies build the graph:

- random: seeded random-sphere samples, clearance-filtered, connected to
  their nearest visible neighbours under a degree limit. Cheap in open
  areas.
- scan: breadth-first flood fill over a regular grid anchored at the
  anchor, adding clear cells and clear connecting segments as they are
  discovered. Hugs navigable interior space in corridor-like geometry.

GraphManager owns the current graph and decides when to rebuild it.

UNIT CONVENTIONS
----------------
All geometric values are in METERS.
"""

from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Set, Tuple
import logging

import numpy as np
from scipy.spatial import cKDTree

from route_policies import GraphPolicy
from ..core.report import OperationReport
from ..core.graph import NavigationGraph
from ..core.types import FailureKind
from ..spatial.query_cache import CollisionQueries
from .sampling import SphereSampler

logger = logging.getLogger(__name__)

Cell = Tuple[int, int, int]


def scan_stencil(connectivity: int) -> List[Cell]:
    """
    Neighbour offsets for a 6-, 18- or 26-connected grid.

    6 keeps face neighbours, 18 adds edge neighbours, 26 adds corners.
    Offsets are ordered face, edge, corner so a degree-limited scan
    spreads along the axes first.
    """
    if connectivity not in (6, 18, 26):
        raise ValueError(f"Unsupported scan connectivity: {connectivity}")
    max_nonzero = {6: 1, 18: 2, 26: 3}[connectivity]
    offsets = []
    for di in (-1, 0, 1):
        for dj in (-1, 0, 1):
            for dk in (-1, 0, 1):
                nonzero = (di != 0) + (dj != 0) + (dk != 0)
                if 0 < nonzero <= max_nonzero:
                    offsets.append((di, dj, dk))
    offsets.sort(key=lambda o: abs(o[0]) + abs(o[1]) + abs(o[2]))
    return offsets


def _new_report(policy: GraphPolicy) -> OperationReport:
    return OperationReport(
        operation="build_navigation_graph",
        requested_policy=policy.to_dict(),
        effective_policy=policy.to_dict(),
    )


def _finish_report(report: OperationReport, graph: NavigationGraph, capped: bool) -> OperationReport:
    report.metrics.update({
        "node_count": graph.node_count,
        "edge_count": graph.edge_count,
        "component_count": graph.component_count(),
        "capped": capped,
    })
    if capped:
        report.add_warning(
            f"{FailureKind.GRAPH_BUILD_CAPPED.value}: graph truncated at {graph.node_count} nodes"
        )
    return report


def build_random_sample_graph(
    anchor: np.ndarray,
    queries: CollisionQueries,
    policy: GraphPolicy,
    sampler: Optional[SphereSampler] = None,
) -> Tuple[NavigationGraph, OperationReport]:
    """
    Build a graph from clearance-checked random-sphere samples.

    Parameters
    ----------
    anchor : np.ndarray
        Graph center
    queries : CollisionQueries
        Cached collision queries
    policy : GraphPolicy
        Sampling and connection parameters
    sampler : SphereSampler, optional
        Sample set to reuse between builds

    Returns
    -------
    graph : NavigationGraph
        The built graph
    report : OperationReport
        Build statistics
    """
    if sampler is None:
        sampler = SphereSampler()
    report = _new_report(policy)
    anchor = np.asarray(anchor, dtype=float)

    candidates = sampler.points(
        anchor, policy.navigation_radius, policy.sample_point_count, policy.seed
    )
    graph = NavigationGraph(anchor)
    for point in candidates:
        if queries.is_point_clear(point):
            graph.add_node(point)

    limit = policy.graph_neighbor_limit
    rejected_edges = 0
    if graph.node_count > 1:
        positions = graph.positions
        tree = cKDTree(positions)
        for i in range(graph.node_count):
            if graph.degree(i) >= limit:
                continue
            nearby = [j for j in tree.query_ball_point(positions[i], r=policy.max_connection_distance) if j != i]
            if not nearby:
                continue
            nearby = np.asarray(nearby)
            d2 = np.einsum("ij,ij->i", positions[nearby] - positions[i], positions[nearby] - positions[i])
            for k in np.argsort(d2, kind="stable")[:limit]:
                j = int(nearby[k])
                if graph.degree(i) >= limit:
                    break
                if graph.has_edge(i, j) or graph.degree(j) >= limit:
                    continue
                if queries.is_edge_clear(positions[i], positions[j], policy.edge_clearance_checks):
                    graph.add_edge(i, j, max_degree=limit)
                else:
                    rejected_edges += 1

    report.metrics.update({
        "strategy": "random",
        "candidate_count": len(candidates),
        "rejected_edges": rejected_edges,
    })
    return graph, _finish_report(report, graph, capped=False)


def build_reachable_scan_graph(
    anchor: np.ndarray,
    queries: CollisionQueries,
    policy: GraphPolicy,
) -> Tuple[NavigationGraph, OperationReport]:
    """
    Flood-fill a grid from the anchor cell, keeping reachable clear cells.

    The scan stops growing once ``scan_max_cells`` nodes exist; cells
    beyond ``scan_max_extent`` (per axis, in cells) are never visited.
    No node ends up with more than ``graph_neighbor_limit`` neighbours:
    the flood first grows a spanning tree, then spends any remaining
    degree on cross links between discovered neighbours, so a truncated
    graph stays connected.
    """
    report = _new_report(policy)
    anchor = np.asarray(anchor, dtype=float)
    graph = NavigationGraph(anchor)
    report.metrics["strategy"] = "scan"

    if not queries.is_point_clear(anchor):
        report.add_warning("Anchor cell is blocked; scan produced no nodes")
        return graph, _finish_report(report, graph, capped=False)

    stencil = scan_stencil(policy.scan_connectivity)
    extent = policy.scan_max_extent
    cell_size = policy.scan_cell_size
    checks = policy.edge_clearance_checks
    limit = policy.graph_neighbor_limit

    def neighbours(cell: Cell):
        for di, dj, dk in stencil:
            nb = (cell[0] + di, cell[1] + dj, cell[2] + dk)
            if extent is not None and (
                abs(nb[0]) > extent[0] or abs(nb[1]) > extent[1] or abs(nb[2]) > extent[2]
            ):
                continue
            yield nb

    origin: Cell = (0, 0, 0)
    index: Dict[Cell, int] = {origin: graph.add_node(anchor)}
    blocked: Set[Cell] = set()
    queue: Deque[Cell] = deque([origin])
    capped = False
    visited = 0

    # spanning tree first; cross links only use leftover degree
    while queue:
        cell = queue.popleft()
        visited += 1
        ci = index[cell]
        cpos = graph.position(ci)
        for nb in neighbours(cell):
            if nb in blocked or nb in index:
                continue
            if graph.node_count >= policy.scan_max_cells:
                capped = True
                break
            if graph.degree(ci) >= limit:
                break
            npos = anchor + np.asarray(nb, dtype=float) * cell_size
            if not queries.is_point_clear(npos):
                blocked.add(nb)
                continue
            if not queries.is_edge_clear(cpos, npos, checks):
                continue
            index[nb] = graph.add_node(npos)
            graph.add_edge(ci, index[nb], max_degree=limit)
            queue.append(nb)

    cross_edges = 0
    for cell, ci in index.items():
        cpos = graph.position(ci)
        for nb in neighbours(cell):
            if graph.degree(ci) >= limit:
                break
            known = index.get(nb)
            if known is None or graph.has_edge(ci, known) or graph.degree(known) >= limit:
                continue
            if queries.is_edge_clear(cpos, graph.position(known), checks):
                if graph.add_edge(ci, known, max_degree=limit):
                    cross_edges += 1

    report.metrics.update({
        "cells_visited": visited,
        "cells_blocked": len(blocked),
        "cross_edges": cross_edges,
    })
    return graph, _finish_report(report, graph, capped=capped)


def build_navigation_graph(
    anchor: np.ndarray,
    queries: CollisionQueries,
    policy: GraphPolicy,
    sampler: Optional[SphereSampler] = None,
) -> Tuple[NavigationGraph, OperationReport]:
    """Dispatch to the builder selected by ``policy.strategy``."""
    if policy.strategy == "random":
        return build_random_sample_graph(anchor, queries, policy, sampler)
    if policy.strategy == "scan":
        return build_reachable_scan_graph(anchor, queries, policy)
    raise ValueError(f"Unknown graph strategy: {policy.strategy!r}")


class GraphManager:
    """
    Owns the current navigation graph and rebuilds it lazily.

    A rebuild happens when the graph is empty, the anchor has drifted past
    ``graph_recenter_distance``, a graph-affecting parameter changed, or
    mark_dirty() was called. The new graph replaces the old one in a
    single assignment.
    """

    def __init__(
        self,
        policy: GraphPolicy,
        on_rebuilt: Optional[Callable[[NavigationGraph, OperationReport], None]] = None,
    ):
        self.policy = policy
        self.on_rebuilt = on_rebuilt
        self.graph = NavigationGraph()
        self.sampler = SphereSampler()
        self.last_report: Optional[OperationReport] = None
        self.rebuild_count = 0
        self._signature = None
        self._dirty = True

    def set_policy(self, policy: GraphPolicy) -> None:
        self.policy = policy

    def mark_dirty(self) -> None:
        self._dirty = True

    def rebuild_reason(self, anchor: np.ndarray) -> Optional[str]:
        """Why the graph needs rebuilding around ``anchor``, or None."""
        if self._dirty:
            return "dirty"
        if self.graph.is_empty:
            return "empty"
        if self.policy.signature() != self._signature:
            return "parameters_changed"
        if self.graph.anchor is None:
            return "empty"
        drift = float(np.linalg.norm(np.asarray(anchor, dtype=float) - self.graph.anchor))
        if drift > self.policy.graph_recenter_distance:
            return "anchor_moved"
        return None

    def ensure(self, anchor: np.ndarray, queries: CollisionQueries) -> NavigationGraph:
        """Return a graph valid for ``anchor``, rebuilding it if needed."""
        reason = self.rebuild_reason(anchor)
        if reason is None:
            return self.graph
        return self.rebuild(anchor, queries, reason)

    def rebuild(self, anchor: np.ndarray, queries: CollisionQueries, reason: str = "forced") -> NavigationGraph:
        queries.clear()
        graph, report = build_navigation_graph(anchor, queries, self.policy, self.sampler)
        report.metrics["reason"] = reason

        self.graph = graph
        self.last_report = report
        self._signature = self.policy.signature()
        self._dirty = False
        self.rebuild_count += 1

        logger.info(
            f"Rebuilt {report.metrics['strategy']} graph ({reason}): "
            f"{graph.node_count} nodes, {graph.edge_count} edges"
        )
        for warning in report.warnings:
            logger.warning(warning)
        if graph.is_empty:
            logger.warning("Navigation graph is empty after rebuild")

        if self.on_rebuilt is not None:
            self.on_rebuilt(graph, report)
        return graph


__all__ = [
    "scan_stencil",
    "build_random_sample_graph",
    "build_reachable_scan_graph",
    "build_navigation_graph",
    "GraphManager",
]
