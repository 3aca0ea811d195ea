"""Reference implementations used to cross-check the routing components."""

import itertools
import math
import random
from collections import deque

from waypoint_routing import GridConfig


def brute_force_distance(n, blocked, source, target, forbidden=frozenset()):
    """Plain BFS over the full grid, independent of ShortestPathSearch."""
    if source == target:
        return 0
    dist = {source: 0}
    queue = deque([source])
    while queue:
        r, c = queue.popleft()
        for dr, dc in ((0, 1), (1, 0), (0, -1), (-1, 0)):
            nxt = (r + dr, c + dc)
            if not (0 <= nxt[0] < n and 0 <= nxt[1] < n):
                continue
            if nxt in blocked or nxt in dist:
                continue
            if nxt in forbidden and nxt != target:
                continue
            dist[nxt] = dist[(r, c)] + 1
            if nxt == target:
                return dist[nxt]
            queue.append(nxt)
    return None


def brute_force_tour(matrix):
    """Minimum start -> permutation of waypoints -> end cost over a K x K matrix."""
    end = len(matrix) - 1
    best = math.inf
    for perm in itertools.permutations(range(1, end)):
        order = (0, *perm, end)
        best = min(best, sum(matrix[a][b] for a, b in zip(order, order[1:])))
    return best


def random_config(seed, n=6, required_count=3, blocked_ratio=0.2, **policies):
    rng = random.Random(seed)
    cells = [(r, c) for r in range(n) for c in range(n)]
    rng.shuffle(cells)
    start, end = cells[0], cells[1]
    required = cells[2:2 + required_count]
    free = cells[2 + required_count:]
    blocked = free[: int(len(free) * blocked_ratio)]
    return GridConfig(n=n, blocked=frozenset(blocked), start=start, end=end, required=tuple(required), **policies)
