"""
Collaborator interfaces consumed and produced by the router.

The host engine supplies a CollisionQueryService and an AudioProxySink.
Collision queries are expected to always return a best-effort answer;
any exception they raise propagates unchanged.
"""

from typing import Any, Dict, FrozenSet, Hashable, Optional, Protocol

import numpy as np

from .types import Hit

Exclusions = FrozenSet[Hashable]


class CollisionQueryService(Protocol):
    """Point-clearance and segment-visibility queries against world geometry."""

    def is_point_clear(self, point: np.ndarray, exclusions: Exclusions) -> bool:
        ...

    def first_blocking_hit(
        self,
        start: np.ndarray,
        end: np.ndarray,
        exclusions: Exclusions,
    ) -> Optional[Hit]:
        ...


class AudioProxySink(Protocol):
    """Receives proxy position and modulation from the follower."""

    def set_position(self, world_point: np.ndarray) -> None:
        ...

    def set_external_volume_offset_db(self, offset_db: float) -> None:
        ...

    def set_external_occlusion_hold(self, seconds: float) -> None:
        ...

    def clear_external_occlusion_hold(self) -> None:
        ...

    def set_external_inner_radius_override(self, radius: float) -> None:
        ...

    def clear_external_inner_radius_override(self) -> None:
        ...

    def set_external_navigation_debug_data(self, active: bool, info: Dict[str, Any]) -> None:
        ...

    def clear_external_navigation_debug_data(self) -> None:
        ...


__all__ = [
    "Exclusions",
    "CollisionQueryService",
    "AudioProxySink",
]
