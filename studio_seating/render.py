from __future__ import annotations

from typing import Iterable, Optional, Union

from .grid import Seat, grid_dimensions
from .normalize import SeatStatus, SeatType
from .selection import SeatView


_TYPE_MARKS = {
    SeatType.podium: "P",
    SeatType.column: "#",
    SeatType.instructor: "I",
}

_STATUS_MARKS = {
    SeatStatus.available: "o",
    SeatStatus.occupied: "x",
    SeatStatus.selected: "*",
    SeatStatus.unavailable: ".",
}


def _mark(item: Union[Seat, SeatView]) -> str:
    seat = item.seat if isinstance(item, SeatView) else item
    if seat.type in _TYPE_MARKS:
        return _TYPE_MARKS[seat.type]
    mark = _STATUS_MARKS[item.status]
    if seat.type == SeatType.exclusive and item.status == SeatStatus.available:
        return "E"
    return mark


def _cell(text: Optional[str], width: int) -> str:
    return (text or " ").center(width)


def render_ascii(seats: Iterable[Union[Seat, SeatView]], *, cell_width: int = 3) -> str:
    cell_width = max(1, int(cell_width))
    items = list(seats)
    plain = [i.seat if isinstance(i, SeatView) else i for i in items]
    rows, cols = grid_dimensions(plain)

    cells: dict[tuple[str, int], str] = {}
    stray: list[str] = []
    for item, seat in zip(items, plain):
        if not seat.outside_grid and len(seat.row) == 1 and "A" <= seat.row <= "Z" and 1 <= seat.column <= cols:
            cells[(seat.row, seat.column)] = _mark(item)
        else:
            stray.append(f"{seat.id}@{seat.row}{seat.column}={_mark(item)}")

    header = "   " + "".join(str(c).center(cell_width) for c in range(1, cols + 1))
    lines = [header]
    for r in range(rows):
        row = chr(ord("A") + r)
        lines.append(row.ljust(3) + "".join(_cell(cells.get((row, c)), cell_width) for c in range(1, cols + 1)))
    if stray:
        lines.append("outside grid: " + ", ".join(stray))
    return "\n".join(lines)
