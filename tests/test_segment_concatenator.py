import pytest

from waypoint_routing import GridBoard, SegmentUnreachable
from waypoint_routing.DistanceTable import DistanceTable
from waypoint_routing.SegmentConcatenator import SegmentConcatenator, concatenate
from waypoint_routing.ShortestPathSearch import ShortestPathSearch
from waypoint_routing.utilities import is_simple


def test_concatenate_drops_junction_cells():
    segments = [
        [(0, 0), (0, 1)],
        [(0, 1), (0, 2), (1, 2)],
        [(1, 2), (2, 2)],
    ]
    assert concatenate(segments) == [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)]


def test_concatenate_single_cell_segments():
    assert concatenate([[(0, 0)]]) == [(0, 0)]
    assert concatenate([]) == []


def test_stitch_uses_lookup_in_order():
    points = [(0, 0), (0, 4), (4, 4)]
    search = ShortestPathSearch(GridBoard(5))
    table = DistanceTable.build(search, points)
    path = SegmentConcatenator(search).stitch(points, [0, 1, 2], table.path)
    assert path[0] == (0, 0) and path[-1] == (4, 4)
    assert len(path) - 1 == 8
    assert (0, 4) in path


def test_route_in_order_allows_revisits_by_default():
    # dead-end waypoint forces walking back over the same cells
    blocked = {(1, c) for c in range(5) if c != 2}
    search = ShortestPathSearch(GridBoard(5, blocked))
    path = SegmentConcatenator(search).route_in_order([(0, 0), (1, 2), (0, 4)])
    assert len(path) - 1 == 6
    assert path.count((0, 2)) == 2


def test_route_in_order_forbidding_revisits_fails_on_dead_end():
    blocked = {(1, c) for c in range(5) if c != 2} | {(2, 2)}
    search = ShortestPathSearch(GridBoard(5, blocked))
    with pytest.raises(SegmentUnreachable) as err:
        SegmentConcatenator(search).route_in_order([(0, 0), (1, 2), (0, 4)], forbid_revisits=True)
    assert err.value.index == 1
    assert err.value.source == (1, 2)
    assert err.value.target == (0, 4)


def test_route_in_order_avoids_future_markers():
    # the straight line (0,0) -> (0,2) would cross the final marker (0,1)
    search = ShortestPathSearch(GridBoard(3))
    path = SegmentConcatenator(search).route_in_order([(0, 0), (0, 2), (0, 1)], forbid_revisits=True)
    assert path == [(0, 0), (1, 0), (1, 1), (1, 2), (0, 2), (0, 1)]
    assert is_simple(path)


def test_route_in_order_reports_first_failing_segment():
    ring = {(1, 2), (3, 2), (2, 1), (2, 3)}
    search = ShortestPathSearch(GridBoard(5, ring))
    with pytest.raises(SegmentUnreachable) as err:
        SegmentConcatenator(search).route_in_order([(0, 0), (4, 4), (2, 2), (0, 4)])
    assert err.value.index == 1
