from collections import deque
import logging
from typing import AbstractSet, Dict, Optional, Set

from .Objects import Coord, GridBoard, Path

logger = logging.getLogger(__name__)


class ShortestPathSearch:
    """Breadth-first search between two cells of a board.

    Neighbours are expanded up, down, left, right so equal-length routes are
    always broken the same way.
    """

    def __init__(self, board: GridBoard):
        self.board = board

    def _reconstruct_path(self, target: Coord, parent: Dict[Coord, Optional[Coord]]) -> Path:
        path: Path = []
        current: Optional[Coord] = target
        while current is not None:
            path.append(current)
            current = parent[current]
        path.reverse()
        return path

    def find_path(
        self,
        source: Coord,
        target: Coord,
        forbidden: Optional[AbstractSet[Coord]] = None,
    ) -> Path:
        """Return a shortest path from ``source`` to ``target``, or ``[]`` when there is none.

        Cells in ``forbidden`` are impassable in addition to blocked cells;
        ``source`` and ``target`` themselves are always passable.
        """
        if source == target:
            return [source]
        forbidden = forbidden or frozenset()

        queue: deque[Coord] = deque([source])
        seen: Set[Coord] = {source}
        parent: Dict[Coord, Optional[Coord]] = {source: None}

        while queue:
            cell = queue.popleft()
            for neighbor in self.board.neighbors(cell):
                if neighbor in seen:
                    continue
                if neighbor in forbidden and neighbor != target:
                    continue
                seen.add(neighbor)
                parent[neighbor] = cell
                if neighbor == target:
                    return self._reconstruct_path(target, parent)
                queue.append(neighbor)

        logger.debug("No path from %s to %s after visiting %s cells.", source, target, len(seen))
        return []

    def distance(
        self,
        source: Coord,
        target: Coord,
        forbidden: Optional[AbstractSet[Coord]] = None,
    ) -> Optional[int]:
        """Hop count of the shortest path, or ``None`` when ``target`` is unreachable."""
        path = self.find_path(source, target, forbidden)
        return len(path) - 1 if path else None
