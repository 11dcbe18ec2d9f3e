from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .grid import Seat
from .normalize import SeatStatus


class ClickOutcome(str, Enum):
    selected = "selected"
    deselected = "deselected"
    ignored = "ignored"
    auth_required = "auth_required"


@dataclass(frozen=True)
class SeatView:
    """A canonical seat as one viewer sees it, with their pending selection applied."""

    seat: Seat
    selected: bool = False

    @property
    def status(self) -> SeatStatus:
        return SeatStatus.selected if self.selected else self.seat.status

    def to_dict(self) -> dict:
        d = self.seat.to_dict()
        d["status"] = self.status.value
        return d


@dataclass(frozen=True)
class SelectionState:
    """
    Ephemeral single-seat selection for one viewer.

    The wrapped seats are never modified; ``selected`` only exists in ``view()``.
    """

    seats: tuple[Seat, ...]
    selected_id: Optional[str] = None

    @classmethod
    def start(cls, seats: Sequence[Seat]) -> "SelectionState":
        return cls(seats=tuple(seats))

    def _find(self, seat_id: str) -> Optional[Seat]:
        for s in self.seats:
            if s.id == seat_id:
                return s
        return None

    @property
    def selected_seat(self) -> Optional[Seat]:
        if self.selected_id is None:
            return None
        return self._find(self.selected_id)

    def status_of(self, seat_id: str) -> Optional[SeatStatus]:
        seat = self._find(seat_id)
        if seat is None:
            return None
        return SeatStatus.selected if seat_id == self.selected_id else seat.status

    def click(self, seat_id: str, *, authenticated: bool = True) -> "ClickResult":
        if not authenticated:
            return ClickResult(self, ClickOutcome.auth_required)

        seat = self._find(seat_id)
        if seat is None or not seat.is_bookable:
            return ClickResult(self, ClickOutcome.ignored)

        if seat_id == self.selected_id:
            return ClickResult(SelectionState(self.seats, None), ClickOutcome.deselected)

        if seat.status == SeatStatus.available:
            # replaces any previous pick: one seat per member per session
            return ClickResult(SelectionState(self.seats, seat_id), ClickOutcome.selected)

        return ClickResult(self, ClickOutcome.ignored)

    def clear(self) -> "SelectionState":
        return SelectionState(self.seats, None)

    def with_seats(self, seats: Sequence[Seat]) -> "SelectionState":
        """Rebase on a recomputed grid, dropping the pick if that seat stopped being available."""
        fresh = SelectionState(tuple(seats), self.selected_id)
        picked = fresh.selected_seat
        if picked is None or picked.status != SeatStatus.available:
            return SelectionState(fresh.seats, None)
        return fresh

    def view(self) -> list[SeatView]:
        return [SeatView(s, selected=(s.id == self.selected_id)) for s in self.seats]


@dataclass(frozen=True)
class ClickResult:
    state: SelectionState
    outcome: ClickOutcome
