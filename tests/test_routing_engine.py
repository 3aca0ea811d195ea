import pytest

from waypoint_routing import (
    CapacityExceeded,
    GridConfig,
    MissingEndpoint,
    NoRoute,
    RoutingEngine,
    RoutingError,
    SegmentUnreachable,
    Unreachable,
    route,
)
from waypoint_routing.utilities import is_simple, is_valid_path

from helpers import random_config

POLICIES = [
    ("as-specified", "allowed"),
    ("as-specified", "forbidden"),
    ("optimize", "allowed"),
    ("optimize", "forbidden"),
]

ROW_ONE_WALL = frozenset((1, c) for c in range(5) if c != 2)
END_RING = frozenset({(1, 1), (1, 2), (1, 3), (2, 1), (2, 3), (3, 1), (3, 2), (3, 3)})


@pytest.mark.parametrize("order_policy,revisit_policy", POLICIES)
def test_empty_grid_manhattan_length(order_policy, revisit_policy):
    cfg = GridConfig(n=5, start=(0, 0), end=(4, 4), order_policy=order_policy, revisit_policy=revisit_policy)
    path = route(cfg)
    assert len(path) - 1 == 8
    assert is_valid_path(cfg, path)


def test_empty_grid_in_order_path_is_deterministic_shape():
    cfg = GridConfig(n=5, start=(0, 0), end=(4, 4))
    assert route(cfg) == [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0), (4, 1), (4, 2), (4, 3), (4, 4)]


@pytest.mark.parametrize("order_policy", ["as-specified", "optimize"])
def test_dead_end_waypoint_with_revisits(order_policy):
    cfg = GridConfig(n=5, blocked=ROW_ONE_WALL, start=(0, 0), end=(0, 4), required=[(1, 2)],
                     order_policy=order_policy)
    path = route(cfg)
    assert len(path) - 1 == 6
    assert (1, 2) in path


def test_dead_end_waypoint_without_revisits():
    cfg = GridConfig(n=5, blocked=ROW_ONE_WALL, start=(0, 0), end=(0, 4), required=[(1, 2)],
                     revisit_policy="forbidden")
    with pytest.raises(SegmentUnreachable) as err:
        route(cfg)
    assert err.value.index == 1
    with pytest.raises(NoRoute):
        route(cfg.with_policies(order_policy="optimize"))


@pytest.mark.parametrize("order_policy,revisit_policy,error", [
    ("as-specified", "allowed", SegmentUnreachable),
    ("as-specified", "forbidden", SegmentUnreachable),
    ("optimize", "allowed", Unreachable),
    ("optimize", "forbidden", NoRoute),
])
def test_enclosed_end(order_policy, revisit_policy, error):
    cfg = GridConfig(n=5, blocked=END_RING, start=(0, 0), end=(2, 2),
                     order_policy=order_policy, revisit_policy=revisit_policy)
    with pytest.raises(error) as err:
        route(cfg)
    if error is Unreachable:
        assert err.value.point == (2, 2)


def test_enclosed_end_with_segment_strategy():
    cfg = GridConfig(n=5, blocked=END_RING, start=(0, 0), end=(2, 2),
                     order_policy="optimize", revisit_policy="forbidden")
    with pytest.raises(Unreachable):
        RoutingEngine(simple_path_strategy="segment").route(cfg)


@pytest.mark.parametrize("order_policy", ["as-specified", "optimize"])
def test_corridor_waypoint_without_revisits(order_policy):
    blocked = {(r, c) for r in range(1, 5) for c in range(5)}
    cfg = GridConfig(n=5, blocked=blocked, start=(0, 0), end=(0, 4), required=[(0, 2)],
                     order_policy=order_policy, revisit_policy="forbidden")
    path = route(cfg)
    assert path == [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)]
    assert is_simple(path)


def test_as_specified_order_is_respected():
    cfg = GridConfig(n=5, start=(0, 0), end=(0, 4), required=[(4, 4), (0, 2)])
    path = route(cfg)
    assert path.index((4, 4)) < path.index((0, 2))
    assert len(path) - 1 == 8 + 6 + 2


def test_optimize_reorders_waypoints():
    cfg = GridConfig(n=5, start=(0, 0), end=(0, 4), required=[(4, 4), (0, 2)], order_policy="optimize")
    path = route(cfg)
    assert path.index((0, 2)) < path.index((4, 4))
    assert len(path) - 1 == 2 + 6 + 4


@pytest.mark.parametrize("start,end,missing", [
    (None, (1, 1), ("start",)),
    ((1, 1), None, ("end",)),
    (None, None, ("start", "end")),
])
def test_missing_endpoint(start, end, missing):
    with pytest.raises(MissingEndpoint) as err:
        route(GridConfig(n=3, start=start, end=end))
    assert err.value.missing == missing


def test_capacity_checked_before_routing():
    cfg = GridConfig(n=5, start=(0, 0), end=(4, 4), required=[(0, 1), (0, 2), (0, 3)])
    with pytest.raises(CapacityExceeded) as err:
        RoutingEngine(max_required=2).route(cfg)
    assert err.value.limit == 2


def test_invalid_engine_arguments():
    with pytest.raises(ValueError):
        RoutingEngine(simple_path_strategy="greedy")
    with pytest.raises(ValueError):
        RoutingEngine(max_required=64)


@pytest.mark.parametrize("order_policy,revisit_policy,strategy", [
    ("as-specified", "allowed", "in_order"),
    ("as-specified", "forbidden", "in_order_simple"),
    ("optimize", "allowed", "held_karp"),
    ("optimize", "forbidden", "state_search"),
])
def test_strategy_dispatch(order_policy, revisit_policy, strategy):
    cfg = GridConfig(n=3, start=(0, 0), end=(2, 2), order_policy=order_policy, revisit_policy=revisit_policy)
    assert RoutingEngine().strategy_for(cfg) == strategy


def test_segment_strategy_dispatch():
    cfg = GridConfig(n=3, start=(0, 0), end=(2, 2), order_policy="optimize", revisit_policy="forbidden")
    assert RoutingEngine(simple_path_strategy="segment").strategy_for(cfg) == "held_karp_simple"


@pytest.mark.parametrize("seed", range(10))
@pytest.mark.parametrize("order_policy,revisit_policy", POLICIES)
def test_repeated_calls_are_identical(seed, order_policy, revisit_policy):
    cfg = random_config(seed, n=4, required_count=2, blocked_ratio=0.1,
                        order_policy=order_policy, revisit_policy=revisit_policy)
    engine = RoutingEngine(max_states=50_000)
    try:
        first = engine.route(cfg)
    except RoutingError as exc:  # failures must repeat as well
        with pytest.raises(type(exc)):
            engine.route(cfg)
        return
    assert engine.route(cfg) == first
    assert is_valid_path(cfg, first)
    if revisit_policy == "forbidden":
        assert is_simple(first)
