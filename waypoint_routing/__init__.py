from .errors import (
    CapacityExceeded,
    InvalidConfiguration,
    InvalidSnapshot,
    MissingEndpoint,
    NoCompleteRoute,
    NoRoute,
    RoutingError,
    SearchLimitExceeded,
    SegmentUnreachable,
    Unreachable,
)
from .Objects import MAX_REQUIRED, Coord, GridBoard, GridConfig, OrderPolicy, Path, RevisitPolicy
from .RoutingEngine import RoutingEngine, route
from .utilities import is_simple, is_valid_path, path_cost, path_to_str, path_turns
