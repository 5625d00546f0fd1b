"""
Router event bus.

Callbacks are registered per event and invoked synchronously, in
registration order, on the simulation tick that produced the event.
"""

from collections import defaultdict
from enum import Enum
from typing import Any, Callable, DefaultDict, List


class RouterEvent(str, Enum):
    """Events emitted by a CornerRouter.

    PATH_UPDATED:  callback(path, is_direct)
    PATH_FAILED:   callback(origin, target)
    PROXY_MOVED:   callback(position)
    GRAPH_REBUILT: callback(node_count)
    """
    PATH_UPDATED = "path_updated"
    PATH_FAILED = "path_failed"
    PROXY_MOVED = "proxy_moved"
    GRAPH_REBUILT = "graph_rebuilt"


class EventBus:
    """
    Synchronous callback registry.

    Example:
        bus = EventBus()
        bus.subscribe(RouterEvent.GRAPH_REBUILT, lambda n: print(f"{n} nodes"))
    """

    def __init__(self):
        self._callbacks: DefaultDict[RouterEvent, List[Callable[..., Any]]] = defaultdict(list)

    def subscribe(self, event: RouterEvent, callback: Callable[..., Any]) -> None:
        self._callbacks[RouterEvent(event)].append(callback)

    def unsubscribe(self, event: RouterEvent, callback: Callable[..., Any]) -> bool:
        callbacks = self._callbacks.get(RouterEvent(event), [])
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def emit(self, event: RouterEvent, *args: Any) -> None:
        for callback in list(self._callbacks.get(RouterEvent(event), [])):
            callback(*args)

    def subscriber_count(self, event: RouterEvent) -> int:
        return len(self._callbacks.get(RouterEvent(event), []))


__all__ = ["RouterEvent", "EventBus"]
