"""
Anchor-centered navigation graph.

Nodes are validated waypoints identified by dense integer indices
(0..N-1). Edges are undirected and stored as symmetric adjacency lists.
A graph is built once and then treated as read-only; rebuilds produce a
new instance so the search never observes a half-built graph.
"""

from typing import Iterator, List, Optional, Set, Tuple

import numpy as np
import networkx as nx


class NavigationGraph:
    """
    Undirected graph of mutually visible, clearance-checked waypoints.

    Parameters
    ----------
    anchor : np.ndarray, optional
        Point the graph was built around
    """

    def __init__(self, anchor: Optional[np.ndarray] = None):
        self.anchor = None if anchor is None else np.array(anchor, dtype=float)
        self._positions: List[np.ndarray] = []
        self._adjacency: List[List[int]] = []
        self._edge_set: Set[Tuple[int, int]] = set()
        self._array: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self._positions)

    @property
    def node_count(self) -> int:
        return len(self._positions)

    @property
    def edge_count(self) -> int:
        return len(self._edge_set)

    @property
    def is_empty(self) -> bool:
        return not self._positions

    @property
    def positions(self) -> np.ndarray:
        """Node positions as an (N, 3) array."""
        if self._array is None or len(self._array) != len(self._positions):
            if self._positions:
                self._array = np.vstack(self._positions)
            else:
                self._array = np.zeros((0, 3))
        return self._array

    def position(self, index: int) -> np.ndarray:
        return self._positions[index]

    def add_node(self, position: np.ndarray) -> int:
        """Append a node and return its index."""
        self._positions.append(np.array(position, dtype=float))
        self._adjacency.append([])
        return len(self._positions) - 1

    def has_edge(self, a: int, b: int) -> bool:
        return (min(a, b), max(a, b)) in self._edge_set

    def degree(self, index: int) -> int:
        return len(self._adjacency[index])

    def add_edge(self, a: int, b: int, max_degree: Optional[int] = None) -> bool:
        """
        Insert an undirected edge.

        Returns False for self-loops, duplicates, or when either endpoint
        already holds ``max_degree`` neighbors.
        """
        if a == b:
            return False
        key = (min(a, b), max(a, b))
        if key in self._edge_set:
            return False
        if max_degree is not None and (
            len(self._adjacency[a]) >= max_degree or len(self._adjacency[b]) >= max_degree
        ):
            return False
        self._edge_set.add(key)
        self._adjacency[a].append(b)
        self._adjacency[b].append(a)
        return True

    def neighbors(self, index: int) -> List[int]:
        return self._adjacency[index]

    def edges(self) -> Iterator[Tuple[int, int]]:
        return iter(sorted(self._edge_set))

    def to_networkx(self) -> nx.Graph:
        """Export as a networkx graph with ``pos`` and ``length`` attributes."""
        g = nx.Graph()
        for i, pos in enumerate(self._positions):
            g.add_node(i, pos=tuple(pos.tolist()))
        for a, b in self._edge_set:
            g.add_edge(a, b, length=float(np.linalg.norm(self._positions[a] - self._positions[b])))
        return g

    def component_count(self) -> int:
        if self.is_empty:
            return 0
        return nx.number_connected_components(self.to_networkx())

    def __repr__(self) -> str:
        return f"NavigationGraph(nodes={self.node_count}, edges={self.edge_count})"


__all__ = ["NavigationGraph"]
