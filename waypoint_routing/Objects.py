from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Set, Tuple

from .errors import InvalidConfiguration

Coord = Tuple[int, int]
Path = List[Coord]

# Hard waypoint limit of the bitmask solvers (Held-Karp table and state search).
MAX_REQUIRED = 16


def as_coord(value: Any) -> Coord:
    """Best-effort conversion of a coordinate-like value to Coord.

    Accepts ``(r, c)`` sequences, ``{"r": .., "c": ..}`` mappings and ``"r,c"`` strings.
    """
    if isinstance(value, dict):
        if "r" not in value or "c" not in value:
            raise InvalidConfiguration(f"Coordinate mapping needs 'r' and 'c' keys: {value!r}")
        value = (value["r"], value["c"])
    elif isinstance(value, str):
        value = value.split(",")
    try:
        parts = list(value)
    except TypeError:
        raise InvalidConfiguration(f"Not a coordinate: {value!r}") from None
    if len(parts) != 2:
        raise InvalidConfiguration(f"Expected 2 components, got {len(parts)}: {value!r}")
    coord = []
    for part in parts:
        if isinstance(part, bool) or isinstance(part, float) and not part.is_integer():
            raise InvalidConfiguration(f"Coordinate components must be integers: {value!r}")
        try:
            coord.append(int(part))
        except (TypeError, ValueError):
            raise InvalidConfiguration(f"Coordinate components must be integers: {value!r}") from None
    return coord[0], coord[1]


class OrderPolicy(str, Enum):
    AS_SPECIFIED = "as-specified"
    OPTIMIZE = "optimize"


class RevisitPolicy(str, Enum):
    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"


def _as_revisit_policy(value: Any) -> RevisitPolicy:
    if isinstance(value, bool):
        return RevisitPolicy.ALLOWED if value else RevisitPolicy.FORBIDDEN
    try:
        return RevisitPolicy(value)
    except ValueError:
        raise InvalidConfiguration(f"Unknown revisit policy {value!r}") from None


def _as_order_policy(value: Any) -> OrderPolicy:
    try:
        return OrderPolicy(value)
    except ValueError:
        raise InvalidConfiguration(f"Unknown order policy {value!r}") from None


@dataclass
class GridBoard:
    n: int
    blocked: Set[Coord] = field(default_factory=set)

    def __post_init__(self):
        self.blocked = {as_coord(cell) for cell in self.blocked}

    def in_bounds(self, p: Coord) -> bool:
        r, c = p
        return 0 <= r < self.n and 0 <= c < self.n

    def passable(self, p: Coord) -> bool:
        return self.in_bounds(p) and p not in self.blocked

    def neighbors(self, p: Coord) -> List[Coord]:
        """Passable 4-neighbours in the fixed order up, down, left, right."""
        r, c = p
        candidates: List[Coord] = [
            (r - 1, c),
            (r + 1, c),
            (r, c - 1),
            (r, c + 1),
        ]
        return [q for q in candidates if self.passable(q)]

    def manhattan(self, a: Coord, b: Coord) -> int:
        return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass(frozen=True)
class GridConfig:
    """Immutable input of a single routing call."""

    n: int
    blocked: FrozenSet[Coord] = frozenset()
    start: Optional[Coord] = None
    end: Optional[Coord] = None
    required: Tuple[Coord, ...] = ()
    order_policy: OrderPolicy = OrderPolicy.AS_SPECIFIED
    revisit_policy: RevisitPolicy = RevisitPolicy.ALLOWED

    def __post_init__(self):
        if isinstance(self.n, bool) or not isinstance(self.n, int) or self.n < 1:
            raise InvalidConfiguration(f"Grid size must be a positive integer, got {self.n!r}")
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "blocked", frozenset(as_coord(cell) for cell in self.blocked))
        object.__setattr__(self, "start", None if self.start is None else as_coord(self.start))
        object.__setattr__(self, "end", None if self.end is None else as_coord(self.end))
        object.__setattr__(self, "required", tuple(as_coord(cell) for cell in self.required))
        object.__setattr__(self, "order_policy", _as_order_policy(self.order_policy))
        object.__setattr__(self, "revisit_policy", _as_revisit_policy(self.revisit_policy))
        self._validate()

    def _validate(self) -> None:
        board = GridBoard(self.n)
        for cell in self.blocked:
            if not board.in_bounds(cell):
                raise InvalidConfiguration(f"Blocked cell {cell} is outside the {self.n}x{self.n} grid")
        markers = [("start", self.start), ("end", self.end)]
        markers.extend((f"required[{idx}]", cell) for idx, cell in enumerate(self.required))
        for label, cell in markers:
            if cell is None:
                continue
            if not board.in_bounds(cell):
                raise InvalidConfiguration(f"{label} {cell} is outside the {self.n}x{self.n} grid")
            if cell in self.blocked:
                raise InvalidConfiguration(f"{label} {cell} is on a blocked cell")

        if self.start is not None and self.start == self.end:
            raise InvalidConfiguration(f"start and end are the same cell {self.start}")

        seen: Set[Coord] = set()
        for idx, cell in enumerate(self.required):
            if cell in seen:
                raise InvalidConfiguration(f"required[{idx}] {cell} is listed twice")
            if cell == self.start or cell == self.end:
                raise InvalidConfiguration(f"required[{idx}] {cell} coincides with start or end")
            seen.add(cell)

    @property
    def board(self) -> GridBoard:
        return GridBoard(self.n, set(self.blocked))

    @property
    def revisit(self) -> bool:
        return self.revisit_policy is RevisitPolicy.ALLOWED

    @property
    def markers(self) -> List[Coord]:
        """Start, required cells in listed order, end."""
        return [self.start, *self.required, self.end]

    def with_policies(
        self,
        order_policy: Optional[Any] = None,
        revisit_policy: Optional[Any] = None,
    ) -> "GridConfig":
        """Copy of this config with the routing policies replaced."""
        return GridConfig(
            n=self.n,
            blocked=self.blocked,
            start=self.start,
            end=self.end,
            required=self.required,
            order_policy=self.order_policy if order_policy is None else order_policy,
            revisit_policy=self.revisit_policy if revisit_policy is None else revisit_policy,
        )
