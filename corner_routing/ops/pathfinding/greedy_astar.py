"""
Greedy A* over the navigation graph plus two virtual endpoint nodes.

Search ids: START_ID (0) is the origin, GOAL_ID (1) the target, and
graph node i is searched as i + NODE_ID_OFFSET. The origin connects to
graph nodes through its dynamic links; graph nodes linked to the target
connect to GOAL_ID.

The heuristic is ``heuristic_weight * distance_to_goal``. Weights above
1.0 make the heuristic inadmissible and the search greedy: fewer
expansions, paths that are good but not guaranteed shortest.

The open set is a binary heap that may hold stale entries. Each node's
best known f is tracked, and an entry popped with an f worse than that
is skipped. Entries are never removed from the heap early.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import heapq
import logging

import numpy as np

from route_policies import SearchPolicy
from ...core.graph import NavigationGraph
from ...core.types import DynamicLink, GOAL_ID, NODE_ID_OFFSET, START_ID
from ...utils.geometry import metric_distance

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Result of a greedy A* search."""
    success: bool
    node_ids: List[int] = field(default_factory=list)
    points: List[np.ndarray] = field(default_factory=list)
    cost: float = 0.0
    nodes_explored: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def graph_indices(self) -> List[int]:
        """Real graph node indices along the path (virtual endpoints dropped)."""
        return [vid - NODE_ID_OFFSET for vid in self.node_ids if vid >= NODE_ID_OFFSET]


def greedy_astar(
    origin: np.ndarray,
    target: np.ndarray,
    graph: NavigationGraph,
    origin_links: Sequence[DynamicLink],
    target_links: Sequence[DynamicLink],
    policy: Optional[SearchPolicy] = None,
) -> SearchResult:
    """
    Search from the origin to the target through the graph.

    Parameters
    ----------
    origin, target : np.ndarray
        Query endpoints
    graph : NavigationGraph
        Static graph
    origin_links, target_links : sequence of DynamicLink
        Dynamic links for each endpoint
    policy : SearchPolicy, optional
        Cost, heuristic and expansion limits

    Returns
    -------
    SearchResult
        Virtual node ids and points from origin to target on success
    """
    if policy is None:
        policy = SearchPolicy()

    metric = policy.distance_metric
    weight = policy.heuristic_weight
    goal_linked = {link.node_index for link in target_links}

    def position(vid: int) -> np.ndarray:
        if vid == START_ID:
            return origin
        if vid == GOAL_ID:
            return target
        return graph.position(vid - NODE_ID_OFFSET)

    def successors(vid: int) -> Iterator[int]:
        if vid == START_ID:
            for link in origin_links:
                yield link.node_index + NODE_ID_OFFSET
            return
        index = vid - NODE_ID_OFFSET
        for nb in graph.neighbors(index):
            yield nb + NODE_ID_OFFSET
        if index in goal_linked:
            yield GOAL_ID

    def move_cost(a: int, b: int) -> float:
        if policy.use_unit_cost:
            return 1.0
        return metric_distance(position(a), position(b), metric)

    def heuristic(vid: int) -> float:
        return weight * metric_distance(position(vid), target, metric)

    g_score: Dict[int, float] = {START_ID: 0.0}
    best_f: Dict[int, float] = {START_ID: heuristic(START_ID)}
    came_from: Dict[int, int] = {}
    counter = 0
    open_heap: List[Tuple[float, int, int]] = [(best_f[START_ID], counter, START_ID)]

    nodes_explored = 0
    while open_heap:
        f, _, current = heapq.heappop(open_heap)
        if f > best_f[current]:
            continue

        if current == GOAL_ID:
            ids = [GOAL_ID]
            while ids[-1] != START_ID:
                ids.append(came_from[ids[-1]])
            ids.reverse()
            return SearchResult(
                success=True,
                node_ids=ids,
                points=[np.array(position(vid), dtype=float) for vid in ids],
                cost=g_score[GOAL_ID],
                nodes_explored=nodes_explored,
            )

        if nodes_explored >= policy.max_expansions:
            message = f"Greedy A* stopped after {nodes_explored} expansions"
            logger.warning(message)
            return SearchResult(success=False, nodes_explored=nodes_explored, warnings=[message])
        nodes_explored += 1

        current_g = g_score[current]
        for nb in successors(current):
            tentative_g = current_g + move_cost(current, nb)
            if tentative_g >= g_score.get(nb, np.inf):
                continue
            g_score[nb] = tentative_g
            came_from[nb] = current
            f_nb = tentative_g + heuristic(nb)
            best_f[nb] = f_nb
            counter += 1
            heapq.heappush(open_heap, (f_nb, counter, nb))

    return SearchResult(success=False, nodes_explored=nodes_explored)


__all__ = ["SearchResult", "greedy_astar"]
