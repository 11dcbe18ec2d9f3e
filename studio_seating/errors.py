from __future__ import annotations


class SeatingError(Exception):
    """Base error for seat grid and booking failures.

    ``code`` is stable and safe to hand to clients; ``status_code`` is the HTTP
    status the service answers with when the error reaches the API boundary.
    """

    code = "seating_error"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LayoutUnavailable(SeatingError):
    code = "layout_unavailable"
    status_code = 404


class MalformedBookingRecord(SeatingError):
    code = "malformed_booking_record"


class CrossSessionBooking(SeatingError):
    code = "cross_session_booking"


class AlreadyBooked(SeatingError):
    code = "already_booked"
    status_code = 409


class SeatTaken(SeatingError):
    code = "seat_taken"
    status_code = 409

    def __init__(self, seat_id: str):
        self.seat_id = seat_id
        super().__init__(f"seat {seat_id} is no longer available; refresh the seat map and pick another seat")


class SeatNotBookable(SeatingError):
    code = "seat_not_bookable"
    status_code = 422


class MemberNotFound(SeatingError):
    code = "member_not_found"
    status_code = 404


class SessionNotFound(SeatingError):
    code = "session_not_found"
    status_code = 404
