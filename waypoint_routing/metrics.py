from typing import Any, Dict, List, Optional

from .Objects import Coord, GridConfig, Path
from .utilities import is_simple, path_cost, path_turns


def revisit_count(path: Path) -> int:
    """Number of steps that land on a cell already on the path."""
    return len(path) - len(set(path))


def waypoint_order(config: GridConfig, path: Path) -> List[Coord]:
    """Required cells in the order the path first reaches them."""
    required = set(config.required)
    order: List[Coord] = []
    for cell in path:
        if cell in required and cell not in order:
            order.append(cell)
    return order


def path_metrics(config: GridConfig, path: Optional[Path]) -> Dict[str, Any]:
    """Summary metrics of a routed path; an absent path yields zeroed metrics."""
    if not path:
        return {
            "routed": False,
            "length": 0,
            "turns": 0,
            "revisits": 0,
            "simple": False,
            "lower_bound": lower_bound(config),
        }
    return {
        "routed": True,
        "length": path_cost(path),
        "turns": path_turns(path),
        "revisits": revisit_count(path),
        "simple": is_simple(path),
        "lower_bound": lower_bound(config),
    }


def lower_bound(config: GridConfig) -> int:
    """Manhattan lower bound on any walk from start to end through every required cell."""
    if config.start is None or config.end is None:
        return 0
    board = config.board
    bound = board.manhattan(config.start, config.end)
    for cell in config.required:
        bound = max(bound, board.manhattan(config.start, cell) + board.manhattan(cell, config.end))
    return bound
