"""
Route Policies - Centralized policy definitions for corner-aware proxy routing.

This package provides all policy dataclasses used by the corner_routing
library. All policies are JSON-serializable and validate themselves into a
list of human-readable errors.

Usage:
    from route_policies import RouterPolicy, NavigationProfile, OperationReport
    from route_policies.navigation import GraphPolicy, SearchPolicy
"""

from .base import (
    OperationReport,
    check_range,
)

from .navigation import (
    GraphPolicy,
    LinkPolicy,
    SearchPolicy,
    ReusePolicy,
    SchedulePolicy,
)

from .proxy import (
    ProxyPolicy,
    ModulationPolicy,
)

from .router import (
    NavigationProfile,
    PROFILE_BUNDLES,
    RouterPolicy,
    apply_profile,
)

__all__ = [
    # Base
    "OperationReport",
    "check_range",
    # Navigation
    "GraphPolicy",
    "LinkPolicy",
    "SearchPolicy",
    "ReusePolicy",
    "SchedulePolicy",
    # Proxy
    "ProxyPolicy",
    "ModulationPolicy",
    # Router
    "NavigationProfile",
    "PROFILE_BUNDLES",
    "RouterPolicy",
    "apply_profile",
]
