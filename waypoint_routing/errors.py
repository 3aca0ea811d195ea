"""Typed failures raised by the routing components.

Every routing failure derives from :class:`RoutingError` and is terminal for the
call that raised it: the engine never returns a partial path and never retries.
Input problems are reported separately through :class:`InvalidConfiguration`.
"""

from typing import Any, Optional, Tuple


class InvalidConfiguration(ValueError):
    """A grid configuration violates its structural invariants."""

    kind = "invalid_configuration"


class InvalidSnapshot(InvalidConfiguration):
    """An imported snapshot is structurally invalid; nothing was applied."""

    kind = "invalid_input"


class RoutingError(Exception):
    """Base class of all routing failures."""

    kind = "routing_error"


class MissingEndpoint(RoutingError):
    kind = "missing_endpoint"

    def __init__(self, missing: Tuple[str, ...]):
        self.missing = tuple(missing)
        super().__init__(f"Endpoint not set: {', '.join(self.missing)}")


class Unreachable(RoutingError):
    """No path exists from start to a specific marker."""

    kind = "unreachable"

    def __init__(self, point: Any):
        self.point = point
        super().__init__(f"No path from start to {point}")


class NoCompleteRoute(RoutingError):
    """The exact order solver found no finite-cost tour through every waypoint."""

    kind = "no_complete_route"

    def __init__(self, message: str = "No finite-cost tour visits every required cell"):
        super().__init__(message)


class SegmentUnreachable(RoutingError):
    """A consecutive-pair search failed while routing a fixed visiting order."""

    kind = "segment_unreachable"

    def __init__(self, index: int, source: Optional[Any] = None, target: Optional[Any] = None):
        self.index = index
        self.source = source
        self.target = target
        super().__init__(f"Segment {index} from {source} to {target} has no route")


class NoRoute(RoutingError):
    """The global state search exhausted its frontier."""

    kind = "no_route"

    def __init__(self, message: str = "No route under current constraints"):
        super().__init__(message)


class CapacityExceeded(RoutingError):
    kind = "capacity_exceeded"

    def __init__(self, required: int, limit: int):
        self.required = required
        self.limit = limit
        super().__init__(f"{required} required cells exceed the solver limit of {limit}")


class SearchLimitExceeded(RoutingError):
    kind = "search_limit_exceeded"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"State search generated more than {limit} states")
