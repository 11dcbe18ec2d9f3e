from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class SeatType(str, Enum):
    normal = "normal"
    podium = "podium"
    column = "column"
    instructor = "instructor"
    exclusive = "exclusive"


class SeatStatus(str, Enum):
    available = "available"
    occupied = "occupied"
    selected = "selected"
    unavailable = "unavailable"


BOOKABLE_TYPES = frozenset({SeatType.normal, SeatType.exclusive})

_STATUS_ALIASES = {
    "active": SeatStatus.available,
    "available": SeatStatus.available,
    "inactive": SeatStatus.occupied,
    "occupied": SeatStatus.occupied,
    "selected": SeatStatus.selected,
    "unavailable": SeatStatus.unavailable,
}

RowId = Union[str, int]


def row_label(index: int) -> str:
    """1-based row index to its letter: 1 -> 'A', 2 -> 'B'."""
    return chr(ord("A") + index - 1)


def normalize_row(raw: Optional[RowId], grid_rows: int) -> str:
    """
    Rows arrive either as 1-based numbers or as letters.
    Numbers inside the grid map onto letters; anything else is upper-cased as-is.
    """
    if raw is None:
        return ""
    text = str(raw).strip()
    if text.isascii() and text.isdigit():
        n = int(text)
        if 1 <= n <= grid_rows:
            return row_label(n)
    return text.upper()


def normalize_seat_type(raw: Optional[str]) -> SeatType:
    if isinstance(raw, SeatType):
        return raw
    try:
        return SeatType(str(raw or "").strip().lower())
    except ValueError:
        return SeatType.normal


def normalize_seat_status(raw: Optional[str]) -> SeatStatus:
    if isinstance(raw, SeatStatus):
        return raw
    return _STATUS_ALIASES.get(str(raw or "").strip().lower(), SeatStatus.available)


def is_bookable_type(seat_type: SeatType) -> bool:
    return seat_type in BOOKABLE_TYPES


def seat_key(row: str, column: int) -> str:
    return f"{row}-{column}"
