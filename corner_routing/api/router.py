"""
CornerRouter: the per-source routing loop.

The router owns every piece of routing state for one sound source: the
navigation graph, the reuse cache, the current path and the proxy
follower. It is driven by tick(delta) on the simulation thread:

- full recomputes run at most every ``update_interval`` seconds, and are
  skipped while neither endpoint has moved past its threshold, unless
  ``force_recompute_interval`` has elapsed;
- the proxy follower advances every tick and its output is pushed to the
  audio proxy sink.

Collaborators are injected at construction: an origin provider, a
target (listener) provider, a collision service and an optional sink.
"""

from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Tuple
import logging

import numpy as np

from route_policies import RouterPolicy
from ..core.context import RoutingContext
from ..core.events import EventBus, RouterEvent
from ..core.graph import NavigationGraph
from ..core.interfaces import AudioProxySink, CollisionQueryService
from ..core.types import FailureKind, FollowState, ProxyState, RoutePath, RouteResult
from ..ops.graph_build import GraphManager
from ..ops.pathfinding.resolve import resolve_route
from ..ops.pathfinding.reuse import PathCache
from ..ops.proxy_follow import ProxyFollower, volume_offset_db
from ..spatial.query_cache import CollisionQueries, quantize_point
from ..utils.geometry import as_point

logger = logging.getLogger(__name__)

PointProvider = Callable[[], Any]


class CornerRouter:
    """
    Corner-aware route and proxy controller for one source.

    Parameters
    ----------
    collision : CollisionQueryService
        Host collision queries
    origin_provider : callable
        Returns the source position each tick
    target_provider : callable
        Returns the listener position each tick, or None when unresolved
    proxy_sink : AudioProxySink, optional
        Receives proxy position and modulation
    policy : RouterPolicy, optional
        Configuration; the navigation profile is applied on construction
    self_exclusions : iterable of hashable, optional
        Collider ids belonging to the source itself
    listener_collider_provider : callable, optional
        Returns the listener's collision ancestor id, excluded from queries
        when ``policy.exclude_listener_collider`` is set
    context : RoutingContext, optional
        Shared process-wide switches
    events : EventBus, optional
        Event bus to emit on (a private one is created otherwise)

    Raises
    ------
    ValueError
        If the policy does not validate.
    """

    def __init__(
        self,
        collision: CollisionQueryService,
        origin_provider: PointProvider,
        target_provider: PointProvider,
        proxy_sink: Optional[AudioProxySink] = None,
        policy: Optional[RouterPolicy] = None,
        self_exclusions: Optional[Iterable[Hashable]] = None,
        listener_collider_provider: Optional[Callable[[], Optional[Hashable]]] = None,
        context: Optional[RoutingContext] = None,
        events: Optional[EventBus] = None,
    ):
        self.origin_provider = origin_provider
        self.target_provider = target_provider
        self.proxy_sink = proxy_sink
        self.listener_collider_provider = listener_collider_provider
        self.self_exclusions = frozenset(self_exclusions or ())
        self.context = context
        self.events = events or EventBus()

        self.policy = self._effective(policy or RouterPolicy())
        self.queries = CollisionQueries(collision, self.self_exclusions)
        self.graph_manager = GraphManager(self.policy.graph, on_rebuilt=self._on_graph_rebuilt)
        self.cache = PathCache()
        self.follower = ProxyFollower(as_point(origin_provider()), self.policy.proxy)

        self._path: Optional[RoutePath] = None
        self._last_result: Optional[RouteResult] = None
        self._timer = self.policy.schedule.update_interval
        self._since_full = float("inf")
        self._solved: Optional[Tuple[np.ndarray, np.ndarray]] = None
        self._last_target: Optional[np.ndarray] = None
        self._failure_key = None
        self._target_missing = False
        self._last_emitted_position: Optional[np.ndarray] = None
        self._occlusion_held = False
        self._inner_radius_overridden = False
        self._debug_published = False
        self._closed = False

        if context is not None:
            context.register(self)

    @staticmethod
    def _effective(policy: RouterPolicy) -> RouterPolicy:
        policy.require_valid()
        effective = policy.effective()
        effective.require_valid()
        return effective

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def current_path(self) -> Optional[RoutePath]:
        """Last published path; None when no route is active."""
        return self._path

    @property
    def graph(self) -> NavigationGraph:
        return self.graph_manager.graph

    @property
    def last_result(self) -> Optional[RouteResult]:
        return self._last_result

    @property
    def proxy_state(self) -> ProxyState:
        return self.follower.state

    @property
    def proxy_position(self) -> np.ndarray:
        return self.follower.position

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_policy(self, policy: RouterPolicy) -> None:
        """Swap configuration; graph-affecting changes rebuild on the next resolve."""
        self.policy = self._effective(policy)
        self.graph_manager.set_policy(self.policy.graph)
        self.follower.policy = self.policy.proxy
        self.cache.clear()

    def invalidate_graph(self) -> None:
        """Force a rebuild on the next resolve, e.g. after level geometry changed."""
        self.graph_manager.mark_dirty()
        self.cache.clear()

    def build_exclusions(self) -> frozenset:
        exclusions = set(self.self_exclusions)
        if self.policy.exclude_listener_collider and self.listener_collider_provider is not None:
            listener_collider = self.listener_collider_provider()
            if listener_collider is not None:
                exclusions.add(listener_collider)
        return frozenset(exclusions)

    # ------------------------------------------------------------------
    # Resolving
    # ------------------------------------------------------------------

    def resolve(self, origin, target) -> RouteResult:
        """Run a full recompute now and publish its outcome."""
        origin = as_point(origin)
        target = as_point(target)
        self.queries.set_exclusions(self.build_exclusions())
        result = resolve_route(
            origin,
            target,
            self.queries,
            self.policy,
            graph_manager=self.graph_manager,
            cache=self.cache,
        )
        self._since_full = 0.0
        self._solved = (origin.copy(), target.copy())
        self._last_result = result

        if result.success:
            self._path = result.path
            self._failure_key = None
            self.events.emit(RouterEvent.PATH_UPDATED, result.path, result.path.direct)
        else:
            self._path = None
            key = (quantize_point(origin), quantize_point(target))
            if key != self._failure_key:
                self._failure_key = key
                logger.debug(f"Route failed: {'; '.join(result.errors)}")
                self.events.emit(RouterEvent.PATH_FAILED, origin.copy(), target.copy())
        return result

    def needs_resolve(self, origin: np.ndarray, target: np.ndarray) -> bool:
        """Whether movement or elapsed time warrants a full recompute."""
        if self._solved is None:
            return True
        schedule = self.policy.schedule
        if self._since_full >= schedule.force_recompute_interval:
            return True
        solved_origin, solved_target = self._solved
        if np.linalg.norm(origin - solved_origin) > schedule.origin_move_threshold:
            return True
        if np.linalg.norm(target - solved_target) > schedule.target_move_threshold:
            return True
        return False

    def tick(self, delta: float) -> ProxyState:
        """
        Advance the router by ``delta`` seconds.

        Returns
        -------
        ProxyState
            Follower state after this tick
        """
        if self._closed:
            return self.follower.state

        origin = as_point(self.origin_provider())

        if self.context is not None and not self.context.enabled:
            self._solved = None
            self._timer = self.policy.schedule.update_interval
            if self.follower.state.state != FollowState.IDLE or not np.allclose(self.follower.position, origin):
                self._path = None
                self.follower.park(origin)
                self._publish()
            return self.follower.state

        self._timer += delta
        self._since_full += delta

        raw_target = self.target_provider()
        if raw_target is None:
            if not self._target_missing:
                self._target_missing = True
                logger.debug("Target unresolved; keeping last known route")
                self._last_result = RouteResult(
                    success=False,
                    path=self._path,
                    failure=FailureKind.NO_TARGET_RESOLVED,
                    errors=["Target provider returned no position"],
                )
            listener = self._last_target
        else:
            self._target_missing = False
            listener = as_point(raw_target)
            self._last_target = listener
            if self._timer >= self.policy.schedule.update_interval:
                self._timer = 0.0
                if self.needs_resolve(origin, listener):
                    self.resolve(origin, listener)
                else:
                    logger.debug("Endpoints within thresholds; skipping recompute")

        state = self.follower.update(delta, origin, listener, self._path)
        self._publish()
        return state

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def debug_info(self) -> Dict[str, Any]:
        path = self._path
        result = self._last_result
        return {
            "state": self.follower.state.state.value,
            "node_count": self.graph.node_count,
            "edge_count": self.graph.edge_count,
            "graph_rebuilds": self.graph_manager.rebuild_count,
            "path_length": path.length if path is not None else 0.0,
            "waypoints": len(path) if path is not None else 0,
            "direct": path.direct if path is not None else False,
            "reused": bool(result.reused) if result is not None else False,
            "arm_distance": self.follower.state.arm_distance,
            "backoff_engaged": self.follower.state.backoff_engaged,
            "query_cache": self.queries.stats(),
        }

    def _publish(self) -> None:
        state = self.follower.state
        position = state.position
        if self._last_emitted_position is None or not np.allclose(position, self._last_emitted_position):
            self._last_emitted_position = position.copy()
            self.events.emit(RouterEvent.PROXY_MOVED, position.copy())

        sink = self.proxy_sink
        if sink is None:
            return

        modulation = self.policy.modulation
        reflected = state.state == FollowState.REFLECTED
        sink.set_position(position.copy())
        sink.set_external_volume_offset_db(volume_offset_db(self._path if reflected else None, modulation))

        if reflected:
            sink.set_external_occlusion_hold(modulation.occlusion_hold_seconds)
            sink.set_external_inner_radius_override(modulation.reflected_inner_radius)
            self._occlusion_held = True
            self._inner_radius_overridden = True
        else:
            if self._occlusion_held:
                sink.clear_external_occlusion_hold()
                self._occlusion_held = False
            if self._inner_radius_overridden:
                sink.clear_external_inner_radius_override()
                self._inner_radius_overridden = False

        debug = modulation.publish_debug_data or (self.context is not None and self.context.debug)
        if debug:
            sink.set_external_navigation_debug_data(True, self.debug_info())
            self._debug_published = True
        elif self._debug_published:
            sink.clear_external_navigation_debug_data()
            self._debug_published = False

    def _on_graph_rebuilt(self, graph: NavigationGraph, report) -> None:
        self.cache.clear()
        self.events.emit(RouterEvent.GRAPH_REBUILT, graph.node_count)

    def close(self) -> None:
        """Release sink state and detach from the context."""
        if self._closed:
            return
        self._closed = True
        if self.proxy_sink is not None:
            if self._occlusion_held:
                self.proxy_sink.clear_external_occlusion_hold()
                self._occlusion_held = False
            if self._inner_radius_overridden:
                self.proxy_sink.clear_external_inner_radius_override()
                self._inner_radius_overridden = False
            if self._debug_published:
                self.proxy_sink.clear_external_navigation_debug_data()
                self._debug_published = False
        if self.context is not None:
            self.context.unregister(self)


__all__ = ["CornerRouter"]
