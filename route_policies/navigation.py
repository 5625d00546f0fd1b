"""
Navigation policies for corner-aware proxy routing.

This module contains policy dataclasses for graph construction, dynamic
linking, greedy A* search, path reuse and recompute scheduling.

All policies are JSON-serializable and support from_dict/to_dict methods.

UNIT CONVENTIONS
----------------
All geometric values are in METERS, all durations in SECONDS.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .base import check_range

GRAPH_STRATEGIES = ("random", "scan")
SCAN_CONNECTIVITIES = (6, 18, 26)
DISTANCE_METRICS = ("euclidean", "manhattan")


@dataclass
class GraphPolicy:
    """
    Policy for building the anchor-centered navigation graph.

    Every field is graph-affecting: changing any of them invalidates the
    current graph and triggers a rebuild on the next query.

    JSON Schema:
    {
        "strategy": "random" | "scan",
        "sample_point_count": int,
        "seed": int,
        "navigation_radius": float (meters),
        "max_connection_distance": float (meters),
        "graph_neighbor_limit": int,
        "edge_clearance_checks": int,
        "graph_recenter_distance": float (meters),
        "scan_cell_size": float (meters),
        "scan_connectivity": 6 | 18 | 26,
        "scan_max_cells": int,
        "scan_max_extent": [int, int, int] | null
    }
    """
    strategy: str = "random"
    sample_point_count: int = 64
    seed: int = 1337
    navigation_radius: float = 12.0
    max_connection_distance: float = 6.0
    graph_neighbor_limit: int = 6
    edge_clearance_checks: int = 0
    graph_recenter_distance: float = 4.0
    scan_cell_size: float = 1.5
    scan_connectivity: int = 26
    scan_max_cells: int = 512
    scan_max_extent: Optional[Tuple[int, int, int]] = None

    def validate(self) -> List[str]:
        errors: List[str] = []
        if self.strategy not in GRAPH_STRATEGIES:
            errors.append(f"strategy must be one of {GRAPH_STRATEGIES}, got {self.strategy!r}")
        check_range(errors, "sample_point_count", self.sample_point_count, 1, 4096)
        check_range(errors, "navigation_radius", self.navigation_radius, 0.0, exclusive_min=True)
        check_range(errors, "max_connection_distance", self.max_connection_distance, 0.0, exclusive_min=True)
        check_range(errors, "graph_neighbor_limit", self.graph_neighbor_limit, 1, 64)
        check_range(errors, "edge_clearance_checks", self.edge_clearance_checks, 0, 16)
        check_range(errors, "graph_recenter_distance", self.graph_recenter_distance, 0.0)
        check_range(errors, "scan_cell_size", self.scan_cell_size, 0.0, exclusive_min=True)
        if self.scan_connectivity not in SCAN_CONNECTIVITIES:
            errors.append(
                f"scan_connectivity must be one of {SCAN_CONNECTIVITIES}, got {self.scan_connectivity}"
            )
        check_range(errors, "scan_max_cells", self.scan_max_cells, 1)
        if self.scan_max_extent is not None:
            if len(self.scan_max_extent) != 3:
                errors.append("scan_max_extent must have exactly 3 entries")
            elif any(e < 0 for e in self.scan_max_extent):
                errors.append(f"scan_max_extent entries must be >= 0, got {self.scan_max_extent}")
        return errors

    def signature(self) -> Tuple[Any, ...]:
        """Hashable snapshot of every graph-affecting value."""
        extent = tuple(self.scan_max_extent) if self.scan_max_extent is not None else None
        return (
            self.strategy,
            self.sample_point_count,
            self.seed,
            self.navigation_radius,
            self.max_connection_distance,
            self.graph_neighbor_limit,
            self.edge_clearance_checks,
            self.graph_recenter_distance,
            self.scan_cell_size,
            self.scan_connectivity,
            self.scan_max_cells,
            extent,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "sample_point_count": self.sample_point_count,
            "seed": self.seed,
            "navigation_radius": self.navigation_radius,
            "max_connection_distance": self.max_connection_distance,
            "graph_neighbor_limit": self.graph_neighbor_limit,
            "edge_clearance_checks": self.edge_clearance_checks,
            "graph_recenter_distance": self.graph_recenter_distance,
            "scan_cell_size": self.scan_cell_size,
            "scan_connectivity": self.scan_connectivity,
            "scan_max_cells": self.scan_max_cells,
            "scan_max_extent": list(self.scan_max_extent) if self.scan_max_extent is not None else None,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GraphPolicy":
        d = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        if d.get("scan_max_extent") is not None:
            d["scan_max_extent"] = tuple(int(e) for e in d["scan_max_extent"])
        return cls(**d)


@dataclass
class LinkPolicy:
    """
    Policy for connecting query-time endpoints into the static graph.

    JSON Schema:
    {
        "dynamic_connection_limit": int,
        "dynamic_candidate_multiplier": int,
        "other_endpoint_bias": float
    }
    """
    dynamic_connection_limit: int = 4
    dynamic_candidate_multiplier: int = 3
    other_endpoint_bias: float = 0.25

    @property
    def candidate_count(self) -> int:
        return self.dynamic_connection_limit * self.dynamic_candidate_multiplier

    def validate(self) -> List[str]:
        errors: List[str] = []
        check_range(errors, "dynamic_connection_limit", self.dynamic_connection_limit, 1, 32)
        check_range(errors, "dynamic_candidate_multiplier", self.dynamic_candidate_multiplier, 1, 16)
        check_range(errors, "other_endpoint_bias", self.other_endpoint_bias, 0.0)
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dynamic_connection_limit": self.dynamic_connection_limit,
            "dynamic_candidate_multiplier": self.dynamic_candidate_multiplier,
            "other_endpoint_bias": self.other_endpoint_bias,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LinkPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class SearchPolicy:
    """
    Policy for greedy A* over the navigation graph.

    A heuristic_weight above 1.0 trades optimality for fewer expansions.

    JSON Schema:
    {
        "heuristic_weight": float,
        "distance_metric": "euclidean" | "manhattan",
        "use_unit_cost": bool,
        "max_expansions": int,
        "smoothing_enabled": bool
    }
    """
    heuristic_weight: float = 1.2
    distance_metric: str = "euclidean"
    use_unit_cost: bool = False
    max_expansions: int = 4096
    smoothing_enabled: bool = True

    def validate(self) -> List[str]:
        errors: List[str] = []
        check_range(errors, "heuristic_weight", self.heuristic_weight, 0.0)
        if self.distance_metric not in DISTANCE_METRICS:
            errors.append(
                f"distance_metric must be one of {DISTANCE_METRICS}, got {self.distance_metric!r}"
            )
        check_range(errors, "max_expansions", self.max_expansions, 1)
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heuristic_weight": self.heuristic_weight,
            "distance_metric": self.distance_metric,
            "use_unit_cost": self.use_unit_cost,
            "max_expansions": self.max_expansions,
            "smoothing_enabled": self.smoothing_enabled,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SearchPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class ReusePolicy:
    """
    Policy for validating and reusing the previous solution.

    JSON Schema:
    {
        "enabled": bool,
        "reuse_origin_tolerance": float (meters),
        "reuse_target_tolerance": float (meters),
        "reuse_max_detour_ratio": float,
        "cached_length_growth_limit": float
    }
    """
    enabled: bool = True
    reuse_origin_tolerance: float = 0.75
    reuse_target_tolerance: float = 1.5
    reuse_max_detour_ratio: float = 1.6
    cached_length_growth_limit: float = 1.20

    def validate(self) -> List[str]:
        errors: List[str] = []
        check_range(errors, "reuse_origin_tolerance", self.reuse_origin_tolerance, 0.0)
        check_range(errors, "reuse_target_tolerance", self.reuse_target_tolerance, 0.0)
        check_range(errors, "reuse_max_detour_ratio", self.reuse_max_detour_ratio, 1.0)
        check_range(errors, "cached_length_growth_limit", self.cached_length_growth_limit, 1.0)
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "reuse_origin_tolerance": self.reuse_origin_tolerance,
            "reuse_target_tolerance": self.reuse_target_tolerance,
            "reuse_max_detour_ratio": self.reuse_max_detour_ratio,
            "cached_length_growth_limit": self.cached_length_growth_limit,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ReusePolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class SchedulePolicy:
    """
    Policy for rate-limiting full recomputes.

    JSON Schema:
    {
        "update_interval": float (seconds),
        "origin_move_threshold": float (meters),
        "target_move_threshold": float (meters),
        "force_recompute_interval": float (seconds)
    }
    """
    update_interval: float = 0.1
    origin_move_threshold: float = 0.1
    target_move_threshold: float = 0.25
    force_recompute_interval: float = 1.0

    def validate(self) -> List[str]:
        errors: List[str] = []
        check_range(errors, "update_interval", self.update_interval, 0.0)
        check_range(errors, "origin_move_threshold", self.origin_move_threshold, 0.0)
        check_range(errors, "target_move_threshold", self.target_move_threshold, 0.0)
        check_range(errors, "force_recompute_interval", self.force_recompute_interval, 0.0)
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "update_interval": self.update_interval,
            "origin_move_threshold": self.origin_move_threshold,
            "target_move_threshold": self.target_move_threshold,
            "force_recompute_interval": self.force_recompute_interval,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SchedulePolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


__all__ = [
    "GRAPH_STRATEGIES",
    "SCAN_CONNECTIVITIES",
    "DISTANCE_METRICS",
    "GraphPolicy",
    "LinkPolicy",
    "SearchPolicy",
    "ReusePolicy",
    "SchedulePolicy",
]
