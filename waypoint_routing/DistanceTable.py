import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .Objects import Coord, Path
from .ShortestPathSearch import ShortestPathSearch

logger = logging.getLogger(__name__)


class DistanceTable:
    """All-pairs shortest distances and paths among marker points.

    Index 0 is the start, ``1..R`` the required cells and ``R + 1`` the end.
    """

    def __init__(self, points: Sequence[Coord], entries: Dict[Tuple[int, int], Tuple[Optional[int], Path]]):
        self.points: List[Coord] = list(points)
        self._entries = entries

    @classmethod
    def build(cls, search: ShortestPathSearch, points: Sequence[Coord]) -> "DistanceTable":
        entries: Dict[Tuple[int, int], Tuple[Optional[int], Path]] = {}
        for i, source in enumerate(points):
            for j, target in enumerate(points):
                if i == j:
                    entries[(i, j)] = (0, [source])
                    continue
                path = search.find_path(source, target)
                entries[(i, j)] = (len(path) - 1 if path else None, path)
        unreachable = sum(1 for dist, _ in entries.values() if dist is None)
        logger.debug("Distance table over %s points built, %s unreachable pairs.", len(points), unreachable)
        return cls(points, entries)

    @property
    def size(self) -> int:
        return len(self.points)

    def distance(self, i: int, j: int) -> Optional[int]:
        return self._entries[(i, j)][0]

    def path(self, i: int, j: int) -> Path:
        return list(self._entries[(i, j)][1])

    def matrix(self) -> List[List[float]]:
        """Distances as a dense matrix with ``math.inf`` for unreachable pairs."""
        out: List[List[float]] = []
        for i in range(self.size):
            row: List[float] = []
            for j in range(self.size):
                dist = self.distance(i, j)
                row.append(math.inf if dist is None else dist)
            out.append(row)
        return out
