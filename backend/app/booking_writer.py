"""
Write path for bookings.

The reads below are a fast path for friendly errors only. By the time the
insert runs they may already be stale; the partial unique indexes on
``Booking`` decide every race, and a violation is mapped back to the same
error a caller would have seen had the read been fresh.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from studio_seating.errors import (
    AlreadyBooked,
    LayoutUnavailable,
    MemberNotFound,
    SeatNotBookable,
    SeatTaken,
    SessionNotFound,
)
from studio_seating.grid import SeatLayoutDefinition, SeatRecord, generate_grid
from studio_seating.normalize import SeatStatus
from studio_seating.overlay import OverlayResult, overlay_bookings

from .models import Booking, BookingStatus, ClassSession, LayoutSeat, Member, SeatLayout


def active_layout(session: Session, location_id: Optional[str]) -> SeatLayout:
    if not location_id:
        raise LayoutUnavailable("session has no location")
    layout = session.exec(
        select(SeatLayout)
        .where(SeatLayout.location_id == location_id, SeatLayout.is_active == True)  # noqa: E712
        .order_by(SeatLayout.id.desc())
    ).first()
    if layout is None:
        raise LayoutUnavailable(f"no active seat layout for location {location_id}")
    return layout


def layout_definition(session: Session, layout: SeatLayout) -> SeatLayoutDefinition:
    rows = session.exec(
        select(LayoutSeat).where(LayoutSeat.seat_layout_id == layout.id).order_by(LayoutSeat.id)
    ).all()
    return SeatLayoutDefinition(
        id=str(layout.id),
        grid_rows=layout.grid_rows,
        grid_columns=layout.grid_columns,
        is_active=layout.is_active,
        seats=tuple(
            SeatRecord(
                id=s.code,
                row=s.row,
                column=s.column,
                type=s.seat_type,
                label=s.label,
                credit_cost=s.credit_cost,
                status=s.status,
            )
            for s in rows
        ),
        name=layout.name,
        location_id=layout.location_id,
    )


def session_bookings(session: Session, session_id: int) -> list[dict]:
    """Current booking records for a class session, read from the store every time."""
    rows = session.exec(select(Booking).where(Booking.session_id == session_id).order_by(Booking.id)).all()
    return [b.to_record() for b in rows]


def session_layout(session: Session, class_session: ClassSession) -> Optional[SeatLayoutDefinition]:
    try:
        return layout_definition(session, active_layout(session, class_session.location_id))
    except LayoutUnavailable as e:
        logger.debug("session {}: {}", class_session.id, e)
        return None


def session_occupancy(session: Session, class_session: ClassSession) -> OverlayResult:
    seats = generate_grid(session_layout(session, class_session))
    return overlay_bookings(seats, session_bookings(session, class_session.id), class_session.id)


def find_member_booking(session: Session, member_id: int, session_id: int) -> Optional[Booking]:
    return session.exec(
        select(Booking).where(
            Booking.member_id == member_id,
            Booking.session_id == session_id,
            Booking.status != BookingStatus.cancelled,
        )
    ).first()


def get_class_session(session: Session, session_id: int) -> ClassSession:
    class_session = session.get(ClassSession, session_id)
    if class_session is None:
        raise SessionNotFound(f"session {session_id} not found")
    return class_session


def create_booking(
    session: Session,
    *,
    member_id: int,
    session_id: int,
    seat_id: str,
    payment_type: str,
) -> Booking:
    # drop anything cached by this unit of work; every check below must hit the store
    session.expire_all()

    if session.get(Member, member_id) is None:
        raise MemberNotFound(f"member {member_id} not found")
    class_session = get_class_session(session, session_id)

    if find_member_booking(session, member_id, session_id) is not None:
        logger.info("member {} already holds a booking for session {}", member_id, session_id)
        raise AlreadyBooked(f"member {member_id} already has a booking for session {session_id}")

    occupancy = session_occupancy(session, class_session)
    seat = next((s for s in occupancy.seats if s.id == seat_id), None)
    if seat is None:
        raise SeatNotBookable(f"seat {seat_id} does not exist in the layout for session {session_id}")
    if not seat.is_bookable:
        raise SeatNotBookable(f"seat {seat_id} is a {seat.type.value} position and cannot be booked")
    if seat.status == SeatStatus.unavailable:
        raise SeatNotBookable(f"seat {seat_id} is not part of the floor plan")
    if seat.status != SeatStatus.available:
        logger.info("session {}: seat {} is {}", session_id, seat_id, seat.status.value)
        raise SeatTaken(seat_id)

    booking = Booking(
        session_id=session_id,
        member_id=member_id,
        seat_id=seat_id,
        payment_type=payment_type,
        credit_cost=seat.credit_cost,
    )
    session.add(booking)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if find_member_booking(session, member_id, session_id) is not None:
            logger.warning("session {}: lost race on member {} slot", session_id, member_id)
            raise AlreadyBooked(f"member {member_id} already has a booking for session {session_id}") from e
        logger.warning("session {}: lost race on seat {}", session_id, seat_id)
        raise SeatTaken(seat_id) from e

    session.refresh(booking)
    logger.info("booking {} created: session={} seat={} member={}", booking.id, session_id, seat_id, member_id)
    return booking


def cancel_booking(session: Session, booking_id: int) -> Optional[Booking]:
    booking = session.get(Booking, booking_id)
    if booking is None:
        return None
    if booking.status != BookingStatus.cancelled:
        booking.status = BookingStatus.cancelled
        booking.cancelled_at = datetime.now(timezone.utc)
        session.add(booking)
        session.commit()
        session.refresh(booking)
        logger.info("booking {} cancelled; seat {} released", booking.id, booking.seat_id)
    return booking
