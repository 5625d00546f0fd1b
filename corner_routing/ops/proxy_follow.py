"""
Proxy follower: turns the solved route into a moving proxy position.

Each tick the follower picks a target point on the route, measured as a
distance back from the path end (the listener), and eases the proxy
toward it. Two distance controllers are available:

- spring arm: keeps the proxy at least ``min_listener_distance`` from the
  listener, pushing out quickly and relaxing slowly.
- backoff (legacy): hysteresis between an enter and a release distance,
  retreating to a fixed distance from the path end while engaged.

UNIT CONVENTIONS
----------------
Distances in METERS, delta in SECONDS.
"""

from typing import Optional
import logging

import numpy as np

from route_policies import ModulationPolicy, ProxyPolicy
from ..core.types import FollowState, ProxyState, RoutePath
from ..utils.geometry import distance_from_end, lerp, point_at_distance_from_end

logger = logging.getLogger(__name__)


def _blend(delta: float, speed: float) -> float:
    return max(0.0, min(1.0, delta * speed))


def volume_offset_db(path: Optional[RoutePath], policy: ModulationPolicy) -> float:
    """
    Volume loss for the extra distance a reflected route travels.

    Returns 0.0 for missing or direct paths, otherwise a negative offset
    no louder than ``-max_volume_loss_db``.
    """
    if path is None or path.direct:
        return 0.0
    direct = float(np.linalg.norm(path.target - path.origin))
    extra = max(0.0, path.length - direct)
    return -min(policy.max_volume_loss_db, extra * policy.volume_loss_db_per_meter)


class ProxyFollower:
    """
    Per-tick proxy controller.

    Parameters
    ----------
    origin : np.ndarray
        Initial proxy position
    policy : ProxyPolicy
        Follower configuration
    """

    def __init__(self, origin: np.ndarray, policy: Optional[ProxyPolicy] = None):
        self.policy = policy or ProxyPolicy()
        origin = np.asarray(origin, dtype=float)
        self.state = ProxyState(position=origin.copy(), target_position=origin.copy())

    @property
    def position(self) -> np.ndarray:
        return self.state.position

    def park(self, origin: np.ndarray) -> ProxyState:
        """Snap to the origin and go idle."""
        origin = np.asarray(origin, dtype=float)
        self.state.position = origin.copy()
        self.state.target_position = origin.copy()
        self.state.arm_distance = 0.0
        self.state.backoff_engaged = False
        self.state.state = FollowState.IDLE
        return self.state

    def base_distance(self, path: RoutePath) -> float:
        """Distance from the path end of the configured base waypoint."""
        if path.direct and self.policy.proxy_only_when_blocked:
            return path.length
        index = len(path) - 1 - self.policy.proxy_waypoint_from_end
        return distance_from_end(path.points, index)

    def update(
        self,
        delta: float,
        origin: np.ndarray,
        listener: Optional[np.ndarray],
        path: Optional[RoutePath],
    ) -> ProxyState:
        """
        Advance the proxy by one tick.

        With no path (never solved, or the last resolve failed) the proxy
        eases back to the origin and the follower reports IDLE.
        """
        state = self.state
        origin = np.asarray(origin, dtype=float)

        if path is None or listener is None:
            state.state = FollowState.IDLE
            state.backoff_engaged = False
            state.target_position = origin.copy()
            self._move(delta)
            return state

        previous = state.state
        state.state = FollowState.DIRECT if path.direct else FollowState.REFLECTED
        total = path.length
        base = self.base_distance(path)
        if previous == FollowState.IDLE:
            state.arm_distance = total

        if self.policy.spring_arm_enabled:
            distance = self._spring_arm(delta, path, listener, base, total)
        else:
            distance = self._backoff(path, listener, base, total)

        state.target_position = point_at_distance_from_end(path.points, distance)
        self._move(delta)
        return state

    def _spring_arm(
        self,
        delta: float,
        path: RoutePath,
        listener: np.ndarray,
        base: float,
        total: float,
    ) -> float:
        policy = self.policy
        state = self.state

        probe = point_at_distance_from_end(path.points, base)
        gap = float(np.linalg.norm(probe - listener))
        desired = base
        if gap < policy.min_listener_distance:
            desired = max(base, base + (policy.min_listener_distance - gap))
        desired = min(desired, total)

        speed = policy.push_speed if desired > state.arm_distance else policy.return_speed
        if speed <= 0.0:
            state.arm_distance = desired
        else:
            state.arm_distance += (desired - state.arm_distance) * _blend(delta, speed)
        state.arm_distance = max(0.0, min(total, state.arm_distance))
        state.backoff_engaged = desired > base
        return state.arm_distance

    def _backoff(self, path: RoutePath, listener: np.ndarray, base: float, total: float) -> float:
        policy = self.policy
        state = self.state

        base_point = point_at_distance_from_end(path.points, base)
        gap = float(np.linalg.norm(base_point - listener))
        if not state.backoff_engaged and gap < policy.proxy_min_listener_distance:
            state.backoff_engaged = True
            logger.debug(f"Proxy backoff engaged at {gap:.2f} m from listener")
        elif state.backoff_engaged and gap > policy.proxy_backoff_release_distance:
            state.backoff_engaged = False
            logger.debug(f"Proxy backoff released at {gap:.2f} m from listener")

        distance = min(policy.proxy_backoff_path_distance, total) if state.backoff_engaged else base
        state.arm_distance = distance
        return distance

    def _move(self, delta: float) -> None:
        state = self.state
        speed = (
            self.policy.audio_proxy_backoff_lerp_speed
            if state.backoff_engaged
            else self.policy.audio_proxy_lerp_speed
        )
        t = 1.0 if speed <= 0.0 else _blend(delta, speed)
        state.position = lerp(state.position, state.target_position, t)


__all__ = ["ProxyFollower", "volume_offset_db"]
