"""
Composite router policy and navigation profile presets.

A RouterPolicy bundles every sub-policy the router consumes. Navigation
profiles are documented bundles of graph/search/link tunables; CUSTOM
keeps the manually configured values.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List

from .navigation import GraphPolicy, LinkPolicy, SearchPolicy, ReusePolicy, SchedulePolicy
from .proxy import ProxyPolicy, ModulationPolicy


class NavigationProfile(str, Enum):
    """Preset bundles of navigation tunables."""
    CUSTOM = "CUSTOM"
    OPEN_AREAS = "OPEN_AREAS"
    HALLWAYS = "HALLWAYS"


# Overrides per sub-policy; applied on top of whatever is configured.
PROFILE_BUNDLES: Dict[NavigationProfile, Dict[str, Dict[str, Any]]] = {
    NavigationProfile.CUSTOM: {},
    NavigationProfile.OPEN_AREAS: {
        "graph": {
            "strategy": "random",
            "sample_point_count": 96,
            "navigation_radius": 20.0,
            "max_connection_distance": 10.0,
            "graph_neighbor_limit": 8,
            "edge_clearance_checks": 0,
            "graph_recenter_distance": 6.0,
        },
        "search": {
            "heuristic_weight": 1.5,
        },
    },
    NavigationProfile.HALLWAYS: {
        "graph": {
            "strategy": "scan",
            "scan_cell_size": 1.25,
            "scan_connectivity": 26,
            "scan_max_cells": 768,
            "graph_neighbor_limit": 10,
            "edge_clearance_checks": 2,
        },
        "search": {
            "heuristic_weight": 1.1,
        },
        "link": {
            "dynamic_connection_limit": 6,
        },
    },
}


@dataclass
class RouterPolicy:
    """
    Top-level configuration for a CornerRouter.

    JSON Schema:
    {
        "profile": "CUSTOM" | "OPEN_AREAS" | "HALLWAYS",
        "exclude_listener_collider": bool,
        "graph": GraphPolicy,
        "link": LinkPolicy,
        "search": SearchPolicy,
        "reuse": ReusePolicy,
        "schedule": SchedulePolicy,
        "proxy": ProxyPolicy,
        "modulation": ModulationPolicy
    }
    """
    profile: NavigationProfile = NavigationProfile.CUSTOM
    exclude_listener_collider: bool = True
    graph: GraphPolicy = field(default_factory=GraphPolicy)
    link: LinkPolicy = field(default_factory=LinkPolicy)
    search: SearchPolicy = field(default_factory=SearchPolicy)
    reuse: ReusePolicy = field(default_factory=ReusePolicy)
    schedule: SchedulePolicy = field(default_factory=SchedulePolicy)
    proxy: ProxyPolicy = field(default_factory=ProxyPolicy)
    modulation: ModulationPolicy = field(default_factory=ModulationPolicy)

    def effective(self) -> "RouterPolicy":
        """Return a copy with the selected profile bundle applied."""
        return apply_profile(self, self.profile)

    def validate(self) -> List[str]:
        errors: List[str] = []
        for name in ("graph", "link", "search", "reuse", "schedule", "proxy", "modulation"):
            errors.extend(f"{name}.{msg}" for msg in getattr(self, name).validate())
        return errors

    def require_valid(self) -> None:
        errors = self.validate()
        if errors:
            raise ValueError("Invalid router policy: " + "; ".join(errors))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.value,
            "exclude_listener_collider": self.exclude_listener_collider,
            "graph": self.graph.to_dict(),
            "link": self.link.to_dict(),
            "search": self.search.to_dict(),
            "reuse": self.reuse.to_dict(),
            "schedule": self.schedule.to_dict(),
            "proxy": self.proxy.to_dict(),
            "modulation": self.modulation.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RouterPolicy":
        return cls(
            profile=NavigationProfile(d.get("profile", NavigationProfile.CUSTOM.value)),
            exclude_listener_collider=d.get("exclude_listener_collider", True),
            graph=GraphPolicy.from_dict(d.get("graph", {})),
            link=LinkPolicy.from_dict(d.get("link", {})),
            search=SearchPolicy.from_dict(d.get("search", {})),
            reuse=ReusePolicy.from_dict(d.get("reuse", {})),
            schedule=SchedulePolicy.from_dict(d.get("schedule", {})),
            proxy=ProxyPolicy.from_dict(d.get("proxy", {})),
            modulation=ModulationPolicy.from_dict(d.get("modulation", {})),
        )


def apply_profile(policy: RouterPolicy, profile: NavigationProfile) -> RouterPolicy:
    """
    Apply a navigation profile bundle to a policy.

    Parameters
    ----------
    policy : RouterPolicy
        Base policy (left untouched)
    profile : NavigationProfile
        Profile whose bundle to apply

    Returns
    -------
    RouterPolicy
        New policy with the bundle's overrides applied
    """
    bundle = PROFILE_BUNDLES[NavigationProfile(profile)]
    updates = {
        name: replace(getattr(policy, name), **overrides)
        for name, overrides in bundle.items()
    }
    return replace(policy, profile=NavigationProfile(profile), **updates)


__all__ = [
    "NavigationProfile",
    "PROFILE_BUNDLES",
    "RouterPolicy",
    "apply_profile",
]
