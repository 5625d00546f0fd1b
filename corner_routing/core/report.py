"""
Operation Report Module

Re-exports OperationReport at the library import path so callers do not
need to reach into route_policies directly:

    from corner_routing.core.report import OperationReport
"""

from route_policies.base import OperationReport

__all__ = ["OperationReport"]
