import logging
from typing import Optional

from .DistanceTable import DistanceTable
from .errors import CapacityExceeded, MissingEndpoint, RoutingError
from .GlobalStateSearch import GlobalStateSearch
from .Objects import MAX_REQUIRED, GridConfig, OrderPolicy, Path
from .SegmentConcatenator import SegmentConcatenator
from .ShortestPathSearch import ShortestPathSearch
from .WaypointOrderSolver import WaypointOrderSolver

logger = logging.getLogger(__name__)

SIMPLE_PATH_STRATEGIES = ("global", "segment")


class RoutingEngine:
    """Selects and composes the search components for a routing policy.

    ``simple_path_strategy`` decides how an optimised order is routed when
    revisits are forbidden: ``"global"`` runs the state search, which is exact
    but may explore many states; ``"segment"`` fixes the Held-Karp order first
    and routes it segment by segment, which is fast but only approximate.
    """

    def __init__(
        self,
        simple_path_strategy: str = "global",
        max_required: int = MAX_REQUIRED,
        max_states: Optional[int] = None,
    ):
        strategy = str(simple_path_strategy).lower().strip()
        if strategy not in SIMPLE_PATH_STRATEGIES:
            raise ValueError(
                f"Unsupported simple path strategy {simple_path_strategy!r}; "
                f"expected one of {SIMPLE_PATH_STRATEGIES}."
            )
        if max_required < 0 or max_required > MAX_REQUIRED:
            raise ValueError(f"max_required must be between 0 and {MAX_REQUIRED}")
        self.simple_path_strategy = strategy
        self.max_required = max_required
        self.max_states = max_states

    def get_parameters(self) -> dict:
        return {
            "simple_path_strategy": self.simple_path_strategy,
            "max_required": self.max_required,
            "max_states": self.max_states,
        }

    def strategy_for(self, config: GridConfig) -> str:
        if config.order_policy is OrderPolicy.AS_SPECIFIED:
            return "in_order" if config.revisit else "in_order_simple"
        if config.revisit:
            return "held_karp"
        if self.simple_path_strategy == "segment":
            return "held_karp_simple"
        return "state_search"

    def route(self, config: GridConfig) -> Path:
        """Route ``config`` and return the path, raising a ``RoutingError`` on failure."""
        missing = tuple(name for name in ("start", "end") if getattr(config, name) is None)
        if missing:
            raise MissingEndpoint(missing)
        if len(config.required) > self.max_required:
            raise CapacityExceeded(len(config.required), self.max_required)

        strategy = self.strategy_for(config)
        logger.info(
            "Routing %sx%s grid with %s required cells using %s.",
            config.n,
            config.n,
            len(config.required),
            strategy,
        )
        try:
            path = self._dispatch(strategy, config)
        except RoutingError as exc:
            logger.warning("Routing with %s failed: %s", strategy, exc)
            raise
        logger.info("Route found with %s steps.", len(path) - 1)
        return path

    def _dispatch(self, strategy: str, config: GridConfig) -> Path:
        board = config.board
        search = ShortestPathSearch(board)
        concatenator = SegmentConcatenator(search)
        markers = config.markers

        if strategy == "in_order":
            return concatenator.route_in_order(markers, forbid_revisits=False)
        if strategy == "in_order_simple":
            return concatenator.route_in_order(markers, forbid_revisits=True)
        if strategy == "state_search":
            state_search = GlobalStateSearch(board, max_required=self.max_required, max_states=self.max_states)
            return state_search.search(config.start, config.end, config.required, allow_revisit=False)

        table = DistanceTable.build(search, markers)
        solution = WaypointOrderSolver(table.matrix(), points=markers, max_required=self.max_required).solve()
        logger.debug("Held-Karp order %s, unconstrained cost %s.", solution.order, solution.cost)
        if strategy == "held_karp":
            return concatenator.stitch(markers, solution.order, table.path)
        ordered = [markers[idx] for idx in solution.order]
        return concatenator.route_in_order(ordered, forbid_revisits=True)


def route(config: GridConfig, **engine_kwargs) -> Path:
    """Route a single configuration with a throwaway engine."""
    return RoutingEngine(**engine_kwargs).route(config)
