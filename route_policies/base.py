"""
Base utilities for routing policies.

This module provides the range-check helper used by every policy's
validate() and the OperationReport dataclass returned by graph builds.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List
import json


def check_range(
    errors: List[str],
    name: str,
    value: float,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    exclusive_min: bool = False,
) -> None:
    """Append a message to ``errors`` when ``value`` falls outside its range."""
    if minimum is not None:
        if exclusive_min and not value > minimum:
            errors.append(f"{name} must be > {minimum}, got {value}")
            return
        if not exclusive_min and value < minimum:
            errors.append(f"{name} must be >= {minimum}, got {value}")
            return
    if maximum is not None and value > maximum:
        errors.append(f"{name} must be <= {maximum}, got {value}")


@dataclass
class OperationReport:
    """
    Standard report structure for graph builds and route resolves.

    Every operation returns a report with requested vs effective policy,
    warnings, and operation-specific metrics.
    """
    operation: str = "unknown"
    success: bool = True
    requested_policy: Dict[str, Any] = field(default_factory=dict)
    effective_policy: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)


__all__ = [
    "OperationReport",
    "check_range",
]
