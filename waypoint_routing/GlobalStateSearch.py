import heapq
import logging
import math
from typing import Dict, FrozenSet, Hashable, List, Optional, Sequence, Tuple

from .errors import CapacityExceeded, NoRoute, SearchLimitExceeded
from .Objects import MAX_REQUIRED, Coord, GridBoard, Path

logger = logging.getLogger(__name__)


class GlobalStateSearch:
    """Uniform-cost search over (position, visited-waypoint mask[, visited cells]).

    Every move costs one step and the heuristic is zero, so the frontier pops
    states in order of path length and ties in discovery order. The end cell is
    absorbing: it may only be entered once every required cell has been seen.

    With revisits allowed the state is ``(position, mask)``, bounded by
    ``n^2 * 2^R``. With revisits forbidden the visited cell set is part of the
    state, so distinct histories never merge and the search space grows with
    the number of simple paths; ``max_states`` bounds the work in that case.
    """

    def __init__(self, board: GridBoard, max_required: int = MAX_REQUIRED, max_states: Optional[int] = None):
        self.board = board
        self.max_required = max_required
        self.max_states = max_states

    def search(
        self,
        start: Coord,
        end: Coord,
        required: Sequence[Coord],
        allow_revisit: bool = True,
    ) -> Path:
        if len(required) > self.max_required:
            raise CapacityExceeded(len(required), self.max_required)

        waypoint_bit: Dict[Coord, int] = {cell: 1 << k for k, cell in enumerate(required)}
        full = (1 << len(required)) - 1

        # Arena of generated states; parents are arena indices.
        positions: List[Coord] = [start]
        masks: List[int] = [waypoint_bit.get(start, 0)]
        parents: List[int] = [-1]
        histories: List[Optional[FrozenSet[Coord]]] = [None if allow_revisit else frozenset([start])]

        def state_key(pos: Coord, mask: int, history: Optional[FrozenSet[Coord]]) -> Hashable:
            if history is None:
                return pos, mask
            return pos, mask, history

        best_cost: Dict[Hashable, int] = {state_key(start, masks[0], histories[0]): 0}
        counter = 0
        frontier: List[Tuple[int, int, int]] = [(0, counter, 0)]

        while frontier:
            cost, _, node = heapq.heappop(frontier)
            pos = positions[node]
            mask = masks[node]
            if pos == end and mask == full:
                logger.debug("State search reached the goal at cost %s after %s states.", cost, len(positions))
                return self._reconstruct_path(node, positions, parents)
            visited = histories[node]
            if cost > best_cost.get(state_key(pos, mask, visited), math.inf):
                continue

            for nb in self.board.neighbors(pos):
                if nb == end and mask != full:
                    continue
                if visited is not None and nb in visited:
                    continue
                new_cost = cost + 1
                new_mask = mask | waypoint_bit.get(nb, 0)
                new_history = None if visited is None else visited | {nb}
                key = state_key(nb, new_mask, new_history)
                if new_cost >= best_cost.get(key, math.inf):
                    continue
                best_cost[key] = new_cost
                positions.append(nb)
                masks.append(new_mask)
                parents.append(node)
                histories.append(new_history)
                child = len(positions) - 1
                counter += 1
                heapq.heappush(frontier, (new_cost, counter, child))
                if self.max_states is not None and len(positions) > self.max_states:
                    raise SearchLimitExceeded(self.max_states)

        logger.debug("State search exhausted %s states without reaching %s.", len(positions), end)
        raise NoRoute()

    @staticmethod
    def _reconstruct_path(node: int, positions: List[Coord], parents: List[int]) -> Path:
        path: Path = []
        while node != -1:
            path.append(positions[node])
            node = parents[node]
        path.reverse()
        return path
