from typing import Optional

from .Objects import GridConfig, Path


def path_cost(path: Path) -> int:
    """Calculate the cost (length) of the given path."""
    return max(0, len(path) - 1)


def path_turns(path: Path) -> int:
    """Count direction changes along a path."""
    if len(path) < 3:
        return 0
    moves = [(b[0] - a[0], b[1] - a[1]) for a, b in zip(path, path[1:])]
    return sum(1 for prev, nxt in zip(moves, moves[1:]) if prev != nxt)


def path_to_str(path: Path) -> str:
    """Convert a path to a human-readable string."""
    return "->".join(f"({r},{c})" for r, c in path)


def is_simple(path: Path) -> bool:
    """True when no cell appears twice."""
    return len(set(path)) == len(path)


def path_violation(config: GridConfig, path: Path) -> Optional[str]:
    """Describe the first way ``path`` fails to solve ``config``, or ``None`` if it is valid."""
    if not path:
        return "path is empty"
    if path[0] != config.start:
        return f"path starts at {path[0]}, not at start {config.start}"
    if path[-1] != config.end:
        return f"path ends at {path[-1]}, not at end {config.end}"
    board = config.board
    for cell in path:
        if not board.passable(cell):
            return f"cell {cell} is blocked or out of bounds"
    for a, b in zip(path, path[1:]):
        if board.manhattan(a, b) != 1:
            return f"step {a} -> {b} is not an orthogonal unit move"
    cells = set(path)
    for cell in config.required:
        if cell not in cells:
            return f"required cell {cell} is never visited"
    if not config.revisit and not is_simple(path):
        return "path repeats a cell although revisiting is forbidden"
    return None


def is_valid_path(config: GridConfig, path: Path) -> bool:
    return path_violation(config, path) is None
