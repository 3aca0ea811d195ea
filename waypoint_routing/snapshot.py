"""Flat JSON snapshot of a grid, as exchanged with the editing front end.

Shape::

    {"n": 20,
     "start": {"r": 0, "c": 0} | null,
     "end": {"r": 4, "c": 4} | null,
     "blocked": ["1,2", "1,3"],
     "required": [{"r": 2, "c": 2}]}

Import is all-or-nothing: any structural problem raises ``InvalidSnapshot``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping

from .errors import InvalidConfiguration, InvalidSnapshot
from .Objects import Coord, GridConfig, OrderPolicy, RevisitPolicy, as_coord

DEFAULT_GRID_SIZE = 20


def _coord_payload(coord: Coord | None) -> Dict[str, int] | None:
    if coord is None:
        return None
    return {"r": int(coord[0]), "c": int(coord[1])}


def export_snapshot(config: GridConfig) -> Dict[str, Any]:
    """Flatten the grid part of ``config``; routing policies are not part of a snapshot."""
    return {
        "n": config.n,
        "start": _coord_payload(config.start),
        "end": _coord_payload(config.end),
        "blocked": [f"{r},{c}" for r, c in sorted(config.blocked)],
        "required": [_coord_payload(cell) for cell in config.required],
    }


def dumps(config: GridConfig, **json_kwargs) -> str:
    return json.dumps(export_snapshot(config), **json_kwargs)


def _list_field(data: Mapping[str, Any], name: str) -> List[Any]:
    value = data.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidSnapshot(f"Field {name!r} must be a list, got {type(value).__name__}")
    return value


def import_snapshot(
    data: Any,
    order_policy: OrderPolicy | str = OrderPolicy.AS_SPECIFIED,
    revisit_policy: RevisitPolicy | str | bool = RevisitPolicy.ALLOWED,
) -> GridConfig:
    """Build a ``GridConfig`` from a snapshot mapping.

    Missing optional fields default to empty lists or ``None``; a missing ``n``
    falls back to the default grid size.
    """
    if not isinstance(data, Mapping):
        raise InvalidSnapshot(f"Snapshot must be a JSON object, got {type(data).__name__}")

    n = data.get("n", DEFAULT_GRID_SIZE)
    if n is None:
        n = DEFAULT_GRID_SIZE
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidSnapshot(f"Field 'n' must be an integer, got {n!r}")

    try:
        blocked = [as_coord(cell) for cell in _list_field(data, "blocked")]
        required = [as_coord(cell) for cell in _list_field(data, "required")]
        start = data.get("start")
        end = data.get("end")
        return GridConfig(
            n=n,
            blocked=frozenset(blocked),
            start=None if start is None else as_coord(start),
            end=None if end is None else as_coord(end),
            required=tuple(required),
            order_policy=order_policy,
            revisit_policy=revisit_policy,
        )
    except InvalidSnapshot:
        raise
    except InvalidConfiguration as exc:
        raise InvalidSnapshot(str(exc)) from exc


def loads(text: str | bytes, **policies) -> GridConfig:
    """Parse snapshot JSON text; malformed JSON is reported as ``InvalidSnapshot``."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise InvalidSnapshot(f"Snapshot is not valid JSON: {exc}") from exc
    return import_snapshot(data, **policies)
