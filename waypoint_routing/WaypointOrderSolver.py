import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .errors import CapacityExceeded, NoCompleteRoute, Unreachable
from .Objects import MAX_REQUIRED, Coord

logger = logging.getLogger(__name__)


@dataclass
class OrderSolution:
    """Visiting order over marker indices (0 first, K-1 last) and its total length."""

    order: List[int]
    cost: float


class WaypointOrderSolver:
    """Exact Held-Karp dynamic program over required waypoint subsets.

    ``distances`` is a K x K matrix where index 0 is the start, ``1..K-2`` the
    required waypoints and ``K-1`` the end; unreachable pairs are ``math.inf``
    (or ``None``). Runs in O(2^R * R^2) time and O(2^R * R) memory, so it is
    only practical while R stays small.
    """

    def __init__(
        self,
        distances: Sequence[Sequence[Optional[float]]],
        points: Optional[Sequence[Coord]] = None,
        max_required: int = MAX_REQUIRED,
    ):
        self.dist: List[List[float]] = [
            [math.inf if d is None else d for d in row] for row in distances
        ]
        self.size = len(self.dist)
        if self.size < 2:
            raise ValueError("Distance matrix needs at least a start and an end")
        if any(len(row) != self.size for row in self.dist):
            raise ValueError("Distance matrix must be square")
        self.points = list(points) if points is not None else None
        self.max_required = max_required

    def _label(self, idx: int):
        return self.points[idx] if self.points is not None else idx

    def _check_reachable(self) -> None:
        end = self.size - 1
        for j in range(1, end):
            if math.isinf(self.dist[0][j]):
                raise Unreachable(self._label(j))
        if math.isinf(self.dist[0][end]):
            raise Unreachable(self._label(end))

    def solve(self) -> OrderSolution:
        end = self.size - 1
        count = self.size - 2
        if count > self.max_required:
            raise CapacityExceeded(count, self.max_required)
        self._check_reachable()
        if count == 0:
            return OrderSolution(order=[0, end], cost=self.dist[0][end])

        # Waypoint k of the DP is marker index k + 1.
        full = (1 << count) - 1
        dp = [[math.inf] * count for _ in range(1 << count)]
        parent = [[-1] * count for _ in range(1 << count)]
        for k in range(count):
            dp[1 << k][k] = self.dist[0][k + 1]

        for mask in range(1, full + 1):
            for i in range(count):
                cost = dp[mask][i]
                if not (mask & (1 << i)) or math.isinf(cost):
                    continue
                for j in range(count):
                    if mask & (1 << j):
                        continue
                    new_cost = cost + self.dist[i + 1][j + 1]
                    new_mask = mask | (1 << j)
                    if new_cost < dp[new_mask][j]:
                        dp[new_mask][j] = new_cost
                        parent[new_mask][j] = i

        best_cost = math.inf
        best_last = -1
        for i in range(count):
            total = dp[full][i] + self.dist[i + 1][end]
            if total < best_cost:
                best_cost = total
                best_last = i

        if best_last < 0:
            raise NoCompleteRoute()

        order: List[int] = []
        mask = full
        k = best_last
        while k != -1:
            order.append(k + 1)
            prev = parent[mask][k]
            mask &= ~(1 << k)
            k = prev
        order.reverse()
        logger.debug("Optimal waypoint order %s with cost %s.", order, best_cost)
        return OrderSolution(order=[0] + order + [end], cost=best_cost)
