from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional

from loguru import logger

from .errors import LayoutUnavailable
from .normalize import (
    RowId,
    SeatStatus,
    SeatType,
    is_bookable_type,
    normalize_row,
    normalize_seat_status,
    normalize_seat_type,
    row_label,
    seat_key,
)


DEFAULT_GRID_ROWS = 5
DEFAULT_GRID_COLUMNS = 10
MAX_GRID_ROWS = 26
MAX_GRID_COLUMNS = 100

_FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


@dataclass(frozen=True)
class Seat:
    id: str
    row: str
    column: int
    status: SeatStatus = SeatStatus.available
    type: SeatType = SeatType.normal
    label: Optional[str] = None
    credit_cost: Optional[int] = None
    # appended after the declared grid because its record lies out of bounds
    outside_grid: bool = False

    @property
    def key(self) -> str:
        return seat_key(self.row, self.column)

    @property
    def is_bookable(self) -> bool:
        return is_bookable_type(self.type)

    def with_status(self, status: SeatStatus) -> "Seat":
        if status == self.status:
            return self
        return replace(self, status=status)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "row": self.row,
            "column": self.column,
            "status": self.status.value,
            "type": self.type.value,
            "label": self.label,
            "creditCost": self.credit_cost,
        }


@dataclass(frozen=True)
class SeatRecord:
    """One physically defined seat as configured for a studio layout."""

    id: Optional[str]
    row: RowId
    column: int
    type: Optional[str] = None
    label: Optional[str] = None
    credit_cost: Optional[int] = None
    status: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SeatRecord":
        raw_id = data.get("id")
        credit = data.get("creditCost", data.get("credit_cost"))
        return cls(
            id=None if raw_id is None else str(raw_id),
            row=data.get("row"),
            column=int(data.get("column", data.get("col"))),
            type=data.get("type", data.get("seatType")),
            label=data.get("label"),
            credit_cost=None if credit is None else int(credit),
            status=data.get("status"),
        )


@dataclass(frozen=True)
class SeatLayoutDefinition:
    id: Optional[str]
    grid_rows: int
    grid_columns: int
    is_active: bool = True
    seats: tuple[SeatRecord, ...] = field(default_factory=tuple)
    name: Optional[str] = None
    location_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SeatLayoutDefinition":
        records: list[SeatRecord] = []
        for raw in data.get("seats") or []:
            try:
                records.append(SeatRecord.from_dict(raw))
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning("skipping unreadable seat record {!r}: {}", raw, e)
        raw_id = data.get("id")
        location = data.get("locationId", data.get("location_id"))
        grid_rows = int(data.get("gridRows", data.get("grid_rows")) or 0)
        grid_columns = int(data.get("gridColumns", data.get("grid_columns")) or 0)
        if grid_rows > MAX_GRID_ROWS or grid_columns > MAX_GRID_COLUMNS:
            raise ValueError(
                f"grid {grid_rows}x{grid_columns} exceeds the {MAX_GRID_ROWS}x{MAX_GRID_COLUMNS} limit"
            )
        return cls(
            id=None if raw_id is None else str(raw_id),
            grid_rows=grid_rows,
            grid_columns=grid_columns,
            is_active=_as_bool(data.get("isActive", data.get("is_active")), default=True),
            seats=tuple(records),
            name=data.get("name"),
            location_id=None if location is None else str(location),
        )


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _seat_from_record(record: SeatRecord, grid_rows: int) -> Seat:
    row = normalize_row(record.row, grid_rows)
    status = normalize_seat_status(record.status)
    if status == SeatStatus.selected:
        # selection belongs to a viewer, never to the stored layout
        status = SeatStatus.available
    return Seat(
        id=record.id if record.id is not None else f"{row}{record.column}",
        row=row,
        column=record.column,
        status=status,
        type=normalize_seat_type(record.type),
        label=record.label,
        credit_cost=record.credit_cost,
    )


def fallback_grid(rows: int = DEFAULT_GRID_ROWS, columns: int = DEFAULT_GRID_COLUMNS) -> list[Seat]:
    """Bookable placeholder grid used when a studio has no active layout."""
    seats: list[Seat] = []
    for r in range(1, rows + 1):
        row = row_label(r)
        for c in range(1, columns + 1):
            seats.append(Seat(id=f"{row}{c}", row=row, column=c))
    return seats


def require_active(definition: Optional[SeatLayoutDefinition]) -> SeatLayoutDefinition:
    if definition is None:
        raise LayoutUnavailable("no seat layout configured")
    if not definition.is_active:
        raise LayoutUnavailable(f"seat layout {definition.id} is not active")
    return definition


def generate_grid(definition: Optional[SeatLayoutDefinition]) -> list[Seat]:
    """
    Materialize every cell of the layout in row-major order.

    Cells without a seat record are structurally absent (aisles, gaps) and come
    out ``unavailable``. Records placed outside the declared bounds are appended
    after the grid so a malformed layout never loses seats.
    """
    try:
        layout = require_active(definition)
    except LayoutUnavailable as e:
        logger.debug("{}; using {}x{} fallback grid", e, DEFAULT_GRID_ROWS, DEFAULT_GRID_COLUMNS)
        return fallback_grid()

    rows = layout.grid_rows if layout.grid_rows > 0 else DEFAULT_GRID_ROWS
    cols = layout.grid_columns if layout.grid_columns > 0 else DEFAULT_GRID_COLUMNS

    by_key: dict[str, Seat] = {}
    for record in layout.seats:
        seat = _seat_from_record(record, rows)
        if seat.key in by_key:
            logger.warning("layout {}: duplicate seat at {} ignored (id={})", layout.id, seat.key, seat.id)
            continue
        by_key[seat.key] = seat

    # empty cells must never take an id a real seat already carries
    taken_ids = {s.id for s in by_key.values()}
    seats: list[Seat] = []
    for r in range(1, rows + 1):
        row = row_label(r)
        for c in range(1, cols + 1):
            seat = by_key.pop(seat_key(row, c), None)
            if seat is None:
                seat = Seat(id=_cell_id(row, c, taken_ids), row=row, column=c, status=SeatStatus.unavailable)
            seats.append(seat)

    # whatever is left in by_key sits outside the declared bounds
    seen_ids = {s.id for s in seats}
    seen_keys = {s.key for s in seats}
    for seat in by_key.values():
        if seat.id in seen_ids or seat.key in seen_keys:
            continue
        logger.warning("layout {}: seat {} at {} is outside the {}x{} grid", layout.id, seat.id, seat.key, rows, cols)
        seats.append(replace(seat, outside_grid=True))
        seen_ids.add(seat.id)
        seen_keys.add(seat.key)
    return seats


def _cell_id(row: str, column: int, taken: set[str]) -> str:
    candidate = f"{row}{column}"
    n = 1
    while candidate in taken:
        candidate = f"{row}{column}~{n}"
        n += 1
    taken.add(candidate)
    return candidate


def grid_dimensions(seats: Iterable[Seat]) -> tuple[int, int]:
    """(rows, columns) spanned by the declared grid; appended out-of-bounds seats do not count."""
    rows = 0
    cols = 0
    for s in seats:
        if not s.outside_grid and len(s.row) == 1 and "A" <= s.row <= "Z":
            rows = max(rows, ord(s.row) - ord("A") + 1)
            cols = max(cols, s.column)
    return rows, cols
