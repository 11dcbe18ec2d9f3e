from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from .errors import SeatingError
from .grid import SeatLayoutDefinition


def _read_json(path: str | Path) -> Any:
    p = Path(path)
    if not p.exists():
        raise SeatingError(f"file not found: {p}")
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except Exception as e:  # noqa: BLE001
        raise SeatingError(f"failed to read JSON from {p}: {e}") from e


def load_layout(path: Optional[str | Path]) -> Optional[SeatLayoutDefinition]:
    """A missing path or a JSON ``null`` both mean "no layout configured"."""
    if path is None:
        return None
    data = _read_json(path)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise SeatingError(f"seat layout in {path} must be a JSON object")
    try:
        return SeatLayoutDefinition.from_dict(data)
    except (TypeError, ValueError) as e:
        raise SeatingError(f"invalid seat layout data: {e}") from e


def load_bookings(path: Optional[str | Path]) -> list[Any]:
    if path is None:
        return []
    data = _read_json(path)
    if isinstance(data, dict) and "bookings" in data:
        data = data["bookings"]
    if not isinstance(data, list):
        raise SeatingError(f"bookings in {path} must be a JSON list")
    return data
