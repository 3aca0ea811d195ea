import logging
from typing import Callable, Iterable, List, Sequence, Set

from .errors import SegmentUnreachable
from .Objects import Coord, Path
from .ShortestPathSearch import ShortestPathSearch

logger = logging.getLogger(__name__)


def concatenate(segments: Iterable[Path]) -> Path:
    """Join point-to-point paths, dropping the duplicated junction cell of each later segment."""
    path: Path = []
    for segment in segments:
        if not path:
            path.extend(segment)
        else:
            path.extend(segment[1:])
    return path


class SegmentConcatenator:
    """Builds a single path out of consecutive marker-to-marker segments.

    With ``forbid_revisits`` each segment search avoids every cell already
    committed to the path and every marker still ahead in the sequence. This
    keeps the result free of repeated cells, but it commits segments greedily:
    a later segment may then fail, or come out longer, even though a globally
    simple route through the same order exists.
    """

    def __init__(self, search: ShortestPathSearch):
        self.search = search

    def stitch(
        self,
        points: Sequence[Coord],
        order: Sequence[int],
        lookup: Callable[[int, int], Path],
    ) -> Path:
        """Concatenate ``lookup(a, b)`` for every adjacent pair of indices in ``order``."""
        if len(order) == 1:
            return [points[order[0]]]
        return concatenate(lookup(a, b) for a, b in zip(order, order[1:]))

    def route_in_order(self, points: Sequence[Coord], forbid_revisits: bool = False) -> Path:
        """Route ``points[0] -> points[1] -> ...`` in the given order."""
        segments: List[Path] = []
        committed: Set[Coord] = set()
        for idx, (source, target) in enumerate(zip(points, points[1:])):
            forbidden = None
            if forbid_revisits:
                forbidden = committed | set(points[idx + 2:])
                forbidden.discard(source)
                forbidden.discard(target)
            segment = self.search.find_path(source, target, forbidden)
            if not segment:
                logger.debug("Segment %s (%s -> %s) could not be routed.", idx, source, target)
                raise SegmentUnreachable(idx, source, target)
            segments.append(segment)
            committed.update(segment)
        if len(points) == 1:
            return [points[0]]
        return concatenate(segments)
