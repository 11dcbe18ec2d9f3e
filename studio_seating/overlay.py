from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from loguru import logger

from .errors import CrossSessionBooking, MalformedBookingRecord, SeatingError
from .grid import Seat, grid_dimensions
from .normalize import SeatStatus, normalize_row, seat_key


CANCELLED_STATUSES = frozenset({"cancelled", "canceled"})


@dataclass(frozen=True)
class SeatIdRef:
    seat_id: str


@dataclass(frozen=True)
class PositionRef:
    row: Any
    column: Any


SeatRef = Union[SeatIdRef, PositionRef]


@dataclass(frozen=True)
class OverlayResult:
    seats: list[Seat]
    occupied_seat_ids: frozenset[str] = frozenset()
    # booked seat ids that do not exist in the current grid (layout changed after booking)
    orphaned_seat_ids: frozenset[str] = frozenset()
    cross_session_count: int = 0
    malformed_count: int = 0
    unscoped_count: int = 0
    issues: tuple[SeatingError, ...] = field(default_factory=tuple)


def _field(record: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = record.get(name)
        if value is not None and value != "":
            return value
    return None


def _entry_id(entry: Any) -> Optional[str]:
    if isinstance(entry, (str, int)) and not isinstance(entry, bool):
        return str(entry) if str(entry) else None
    if isinstance(entry, Mapping):
        value = _field(entry, "id", "seatId", "seat_id")
        return None if value is None else str(value)
    return None


def seat_refs(record: Mapping[str, Any]) -> list[SeatRef]:
    """
    Every seat a booking record points at, most trusted shape first.

    The row/column pair is only consulted when no id-based reference exists.
    """
    refs: list[SeatRef] = []
    seat_id = _field(record, "seatId", "seat_id")
    if seat_id is not None:
        refs.append(SeatIdRef(str(seat_id)))

    seat = record.get("seat")
    if isinstance(seat, Mapping):
        nested = _entry_id(seat)
        if nested is not None:
            refs.append(SeatIdRef(nested))

    entries = record.get("seats")
    if not isinstance(entries, (list, tuple)):
        # a scalar or string here is not a seat list
        entries = ()
    for entry in entries:
        entry_id = _entry_id(entry)
        if entry_id is not None:
            refs.append(SeatIdRef(entry_id))

    if not refs:
        row = record.get("row")
        column = _field(record, "column", "col")
        if row not in (None, "") and column is not None:
            refs.append(PositionRef(row, column))
    return refs


def is_cancelled(record: Mapping[str, Any]) -> bool:
    return str(record.get("status") or "").strip().lower() in CANCELLED_STATUSES


def _resolve_position(ref: PositionRef, by_position: Mapping[str, Seat], grid_rows: int) -> Optional[str]:
    try:
        column = int(ref.column)
    except (TypeError, ValueError):
        return None
    seat = by_position.get(seat_key(normalize_row(ref.row, grid_rows), column))
    return None if seat is None else seat.id


def overlay_bookings(
    seats: Sequence[Seat],
    bookings: Iterable[Mapping[str, Any]],
    session_id: Union[str, int],
) -> OverlayResult:
    session_id = str(session_id)
    known_ids = {s.id for s in seats}
    by_position = {s.key: s for s in seats}
    grid_rows, _ = grid_dimensions(seats)

    occupied: set[str] = set()
    orphaned: set[str] = set()
    counts: Counter[str] = Counter()
    issues: list[SeatingError] = []

    for record in bookings:
        if not isinstance(record, Mapping):
            counts["malformed"] += 1
            issues.append(MalformedBookingRecord(f"booking record is not an object: {record!r}"))
            logger.warning("ignoring booking record that is not an object: {!r}", record)
            continue

        booking_id = record.get("id")
        record_session = _field(record, "sessionId", "session_id")
        if record_session is not None and str(record_session) != session_id:
            counts["cross_session"] += 1
            issues.append(CrossSessionBooking(f"booking {booking_id} belongs to session {record_session}"))
            logger.warning(
                "booking {} belongs to session {}, not {}; excluded", booking_id, record_session, session_id
            )
            continue
        if is_cancelled(record):
            continue
        if record_session is None:
            counts["unscoped"] += 1
            logger.debug("booking {} has no sessionId; trusting it for session {}", booking_id, session_id)

        resolved: list[str] = []
        for ref in seat_refs(record):
            if isinstance(ref, SeatIdRef):
                resolved.append(ref.seat_id)
            else:
                found = _resolve_position(ref, by_position, grid_rows)
                if found is not None:
                    resolved.append(found)

        if not resolved:
            counts["malformed"] += 1
            issues.append(MalformedBookingRecord(f"booking {booking_id} has no resolvable seat reference"))
            logger.warning("booking {} has no resolvable seat reference; excluded", booking_id)
            continue

        for sid in resolved:
            if sid in known_ids:
                occupied.add(sid)
            else:
                orphaned.add(sid)

    if orphaned:
        logger.info("session {}: {} booked seat(s) not present in the layout", session_id, len(orphaned))

    merged = [s.with_status(SeatStatus.occupied) if s.id in occupied else s for s in seats]
    return OverlayResult(
        seats=merged,
        occupied_seat_ids=frozenset(occupied),
        orphaned_seat_ids=frozenset(orphaned),
        cross_session_count=counts["cross_session"],
        malformed_count=counts["malformed"],
        unscoped_count=counts["unscoped"],
        issues=tuple(issues),
    )


def apply_bookings(
    seats: Sequence[Seat],
    bookings: Iterable[Mapping[str, Any]],
    session_id: Union[str, int],
) -> list[Seat]:
    return overlay_bookings(seats, bookings, session_id).seats


def occupancy_summary(result: OverlayResult) -> dict:
    by_status = Counter(s.status.value for s in result.seats)
    bookable = [s for s in result.seats if s.is_bookable]
    return {
        "seats_total": len(result.seats),
        "seats_available": sum(1 for s in bookable if s.status == SeatStatus.available),
        "seats_occupied": by_status.get(SeatStatus.occupied.value, 0),
        "seats_unavailable": by_status.get(SeatStatus.unavailable.value, 0),
        "seats_orphaned": len(result.orphaned_seat_ids),
        "cross_session_bookings": result.cross_session_count,
        "malformed_bookings": result.malformed_count,
    }
