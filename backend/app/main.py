from __future__ import annotations

import csv
import io
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from studio_seating.errors import MemberNotFound, SeatingError
from studio_seating.grid import SeatLayoutDefinition, generate_grid
from studio_seating.logging_config import configure_logging
from studio_seating.normalize import normalize_row
from studio_seating.overlay import OverlayResult, occupancy_summary, overlay_bookings

from .booking_writer import (
    cancel_booking,
    create_booking,
    find_member_booking,
    get_class_session,
    session_bookings,
    session_layout,
    session_occupancy,
)
from .db import get_session, init_db
from .models import ClassSession, LayoutSeat, Member, SeatLayout
from .schemas import (
    BookingCreate,
    ClassSessionCreate,
    MemberCreate,
    SeatGrid,
    SeatGridRequest,
    SeatLayoutCreate,
)


app = FastAPI(title="Studio Seating API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup() -> None:
    configure_logging()
    init_db()


@app.exception_handler(SeatingError)
def _seating_error(request: Request, exc: SeatingError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.message})


def _session():
    yield from get_session()


def _seat_grid(session_id: str, result: OverlayResult, layout: Optional[SeatLayoutDefinition]) -> SeatGrid:
    fallback = layout is None or not layout.is_active
    return SeatGrid(
        session_id=session_id,
        layout_id=None if fallback else layout.id,
        fallback=fallback,
        seats=[s.to_dict() for s in result.seats],
        summary=occupancy_summary(result),
        issues=[{"error": e.code, "detail": e.message} for e in result.issues],
    )


def _layout_out(layout: SeatLayout) -> dict:
    return {
        "id": layout.id,
        "locationId": layout.location_id,
        "name": layout.name,
        "gridRows": layout.grid_rows,
        "gridColumns": layout.grid_columns,
        "isActive": layout.is_active,
    }


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.post("/seat-layouts")
def create_seat_layout(payload: SeatLayoutCreate, session: Session = Depends(_session)) -> dict:
    codes: set[str] = set()
    seats: list[LayoutSeat] = []
    for rec in payload.seats:
        code = rec.id or f"{normalize_row(rec.row, payload.grid_rows)}{rec.column}"
        if code in codes:
            raise HTTPException(status_code=400, detail=f"duplicate seat id: {code}")
        codes.add(code)
        seats.append(
            LayoutSeat(
                code=code,
                row=str(rec.row),
                column=rec.column,
                seat_type=rec.type or "normal",
                label=rec.label,
                credit_cost=rec.credit_cost,
                status=rec.status,
            )
        )

    if payload.is_active:
        # one active layout per location
        for other in session.exec(
            select(SeatLayout).where(SeatLayout.location_id == payload.location_id, SeatLayout.is_active == True)  # noqa: E712
        ).all():
            other.is_active = False
            session.add(other)

    layout = SeatLayout(
        location_id=payload.location_id,
        name=payload.name,
        grid_rows=payload.grid_rows,
        grid_columns=payload.grid_columns,
        is_active=payload.is_active,
    )
    session.add(layout)
    session.flush()
    for s in seats:
        s.seat_layout_id = layout.id
        session.add(s)
    session.commit()
    session.refresh(layout)
    return {**_layout_out(layout), "seatCount": len(seats)}


@app.get("/seat-layouts")
def get_seat_layout(locationId: str, session: Session = Depends(_session)) -> Optional[dict]:
    layout = session.exec(
        select(SeatLayout)
        .where(SeatLayout.location_id == locationId, SeatLayout.is_active == True)  # noqa: E712
        .order_by(SeatLayout.id.desc())
    ).first()
    # no layout is a normal state; clients fall back to the default grid
    return _layout_out(layout) if layout else None


@app.get("/seat-layouts/{seat_layout_id}/seats")
def list_layout_seats(seat_layout_id: int, session: Session = Depends(_session)) -> list[dict]:
    if not session.get(SeatLayout, seat_layout_id):
        raise HTTPException(status_code=404, detail="seat layout not found")
    seats = session.exec(
        select(LayoutSeat).where(LayoutSeat.seat_layout_id == seat_layout_id).order_by(LayoutSeat.id)
    ).all()
    return [
        {
            "id": s.code,
            "row": s.row,
            "column": s.column,
            "type": s.seat_type,
            "label": s.label,
            "creditCost": s.credit_cost,
            "status": s.status,
        }
        for s in seats
    ]


@app.post("/seat-grid", response_model=SeatGrid)
def compute_seat_grid(payload: SeatGridRequest) -> SeatGrid:
    try:
        layout = SeatLayoutDefinition.from_dict(payload.layout) if payload.layout else None
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"invalid seat layout: {e}") from e
    result = overlay_bookings(generate_grid(layout), payload.bookings, payload.session_id)
    return _seat_grid(payload.session_id, result, layout)


@app.post("/sessions")
def create_class_session(payload: ClassSessionCreate, session: Session = Depends(_session)) -> dict:
    cs = ClassSession(**payload.model_dump())
    session.add(cs)
    session.commit()
    session.refresh(cs)
    return {"id": cs.id, "title": cs.title, "locationId": cs.location_id}


@app.get("/sessions/{session_id}/seats", response_model=SeatGrid)
def session_seats(session_id: int, session: Session = Depends(_session)) -> SeatGrid:
    class_session = get_class_session(session, session_id)
    layout = session_layout(session, class_session)
    result = overlay_bookings(generate_grid(layout), session_bookings(session, session_id), session_id)
    return _seat_grid(str(session_id), result, layout)


@app.get("/sessions/{session_id}/summary")
def session_summary(session_id: int, session: Session = Depends(_session)) -> dict:
    class_session = get_class_session(session, session_id)
    return {"sessionId": str(session_id), **occupancy_summary(session_occupancy(session, class_session))}


@app.get("/sessions/{session_id}/seats.csv")
def export_session_seats_csv(session_id: int, session: Session = Depends(_session)) -> Response:
    class_session = get_class_session(session, session_id)
    result = session_occupancy(session, class_session)

    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(["id", "row", "column", "type", "status", "label", "credit_cost"])
    for s in result.seats:
        w.writerow([s.id, s.row, s.column, s.type.value, s.status.value, s.label or "", s.credit_cost or ""])
    return Response(
        content=buf.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="session_{session_id}_seats.csv"'},
    )


@app.get("/sessions/{session_id}/members/{member_id}/booking")
def member_session_booking(session_id: int, member_id: int, session: Session = Depends(_session)) -> Optional[dict]:
    """Re-verification after a create request whose outcome is unknown (e.g. it timed out)."""
    booking = find_member_booking(session, member_id, session_id)
    return booking.to_record() if booking else None


@app.post("/members")
def create_member(payload: MemberCreate, session: Session = Depends(_session)) -> dict:
    m = Member(**payload.model_dump())
    session.add(m)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise HTTPException(status_code=409, detail="member already exists for this user") from e
    session.refresh(m)
    return {"id": m.id, "userId": m.user_id, "name": m.name}


@app.get("/bookings")
def list_bookings(sessionId: int, session: Session = Depends(_session)) -> list[dict]:
    return session_bookings(session, sessionId)


@app.post("/bookings", status_code=201)
def post_booking(
    payload: BookingCreate,
    session: Session = Depends(_session),
    x_user_id: Optional[str] = Header(default=None),
) -> dict:
    member_id = payload.member_id
    if member_id is None:
        if not x_user_id:
            raise HTTPException(status_code=401, detail="authentication required")
        member = session.exec(select(Member).where(Member.user_id == x_user_id)).first()
        if member is None:
            raise MemberNotFound(f"no member record for user {x_user_id}")
        member_id = member.id

    booking = create_booking(
        session,
        member_id=member_id,
        session_id=payload.session_id,
        seat_id=payload.seat_id,
        payment_type=payload.payment_type,
    )
    return booking.to_record()


@app.post("/bookings/{booking_id}/cancel")
def post_cancel_booking(booking_id: int, session: Session = Depends(_session)) -> dict:
    booking = cancel_booking(session, booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="booking not found")
    return booking.to_record()
