"""
Process-wide routing context.

Holds the effects toggle and debug switch shared by every router in a
process. It is created explicitly and handed to each router at
construction; there is no hidden module-level instance.
"""

from typing import List, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from ..api.router import CornerRouter

logger = logging.getLogger(__name__)


class RoutingContext:
    """
    Shared switches for a group of routers.

    Example:
        with RoutingContext(enabled=True) as ctx:
            router = CornerRouter(..., context=ctx)
            ...
        # every registered router is closed here
    """

    def __init__(self, enabled: bool = True, debug: bool = False):
        self.enabled = enabled
        self.debug = debug
        self._routers: List["CornerRouter"] = []
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def routers(self) -> List["CornerRouter"]:
        return list(self._routers)

    def register(self, router: "CornerRouter") -> None:
        if not self._open:
            raise RuntimeError("RoutingContext has been shut down")
        if router not in self._routers:
            self._routers.append(router)

    def unregister(self, router: "CornerRouter") -> None:
        if router in self._routers:
            self._routers.remove(router)

    def shutdown(self) -> None:
        """Close every registered router and refuse new registrations."""
        for router in list(self._routers):
            router.close()
        self._routers.clear()
        self._open = False
        logger.debug("Routing context shut down")

    def __enter__(self) -> "RoutingContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


__all__ = ["RoutingContext"]
