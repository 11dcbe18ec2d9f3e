from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Index, UniqueConstraint, text
from sqlmodel import Field, SQLModel


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"


# Rows matching this predicate no longer hold a seat or a member's slot.
_ACTIVE_BOOKING = text("status != 'cancelled'")


class SeatLayout(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    location_id: str = Field(index=True)
    name: str = "Default"
    grid_rows: int
    grid_columns: int
    is_active: bool = True

    created_at: datetime = Field(default_factory=_utc_now)


class LayoutSeat(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("seat_layout_id", "code", name="uq_layoutseat_layout_code"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    seat_layout_id: int = Field(index=True, foreign_key="seatlayout.id")
    # Seat id exposed to clients and referenced by bookings, e.g. "A3".
    code: str

    # Stored as received; upstream rows may be "1" or "A".
    row: str
    column: int
    seat_type: str = "normal"
    label: Optional[str] = None
    credit_cost: Optional[int] = None
    status: Optional[str] = None


class ClassSession(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    location_id: Optional[str] = Field(default=None, index=True)
    starts_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=_utc_now)


class Member(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # Identity issued by the auth provider.
    user_id: str = Field(index=True, unique=True)
    name: str = ""
    email: str = ""

    created_at: datetime = Field(default_factory=_utc_now)


class Booking(SQLModel, table=True):
    __table_args__ = (
        Index(
            "uq_booking_member_session_active",
            "member_id",
            "session_id",
            unique=True,
            sqlite_where=_ACTIVE_BOOKING,
            postgresql_where=_ACTIVE_BOOKING,
        ),
        Index(
            "uq_booking_session_seat_active",
            "session_id",
            "seat_id",
            unique=True,
            sqlite_where=_ACTIVE_BOOKING,
            postgresql_where=_ACTIVE_BOOKING,
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(index=True, foreign_key="classsession.id")
    member_id: int = Field(index=True, foreign_key="member.id")
    seat_id: str
    payment_type: str
    credit_cost: Optional[int] = None
    status: BookingStatus = BookingStatus.confirmed

    created_at: datetime = Field(default_factory=_utc_now)
    cancelled_at: Optional[datetime] = None

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "sessionId": str(self.session_id),
            "memberId": self.member_id,
            "seatId": self.seat_id,
            "paymentType": self.payment_type,
            "creditCost": self.credit_cost,
            "status": self.status.value if isinstance(self.status, BookingStatus) else self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }
