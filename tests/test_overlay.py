import unittest

from studio_seating.errors import CrossSessionBooking, MalformedBookingRecord
from studio_seating.grid import SeatLayoutDefinition, SeatRecord, generate_grid
from studio_seating.normalize import SeatStatus
from studio_seating.overlay import apply_bookings, occupancy_summary, overlay_bookings, seat_refs


def _statuses(seats):
    return {s.id: s.status for s in seats}


class TestBookingOverlay(unittest.TestCase):
    def setUp(self):
        self.grid = generate_grid(None)  # 5x10, all available

    def test_only_current_session_bookings_occupy(self):
        bookings = [{"sessionId": "S1", "seatId": "A3"}, {"sessionId": "S2", "seatId": "A4"}]
        result = overlay_bookings(self.grid, bookings, "S1")
        st = _statuses(result.seats)
        self.assertEqual(st["A3"], SeatStatus.occupied)
        self.assertEqual(st["A4"], SeatStatus.available)
        self.assertEqual(result.cross_session_count, 1)
        self.assertIsInstance(result.issues[0], CrossSessionBooking)

    def test_other_session_never_occupies(self):
        bookings = [
            {"sessionId": "S2", "seatId": "A1"},
            {"sessionId": "S2", "seat": {"id": "A2"}},
            {"sessionId": "S2", "seats": ["A3", {"seatId": "A4"}]},
            {"sessionId": "S2", "row": "A", "column": 5},
        ]
        seats = apply_bookings(self.grid, bookings, "S1")
        self.assertNotIn(SeatStatus.occupied, {s.status for s in seats})

    def test_all_reference_shapes(self):
        bookings = [
            {"id": 1, "sessionId": "S1", "seatId": "A1"},
            {"id": 2, "sessionId": "S1", "seat": {"id": "A2"}},
            {"id": 3, "sessionId": "S1", "seats": ["A3", {"id": "A4"}, {"seatId": "A5"}]},
            {"id": 4, "sessionId": "S1", "row": "B", "column": 2},
            {"id": 5, "sessionId": "S1", "row": 3, "column": "4"},
        ]
        result = overlay_bookings(self.grid, bookings, "S1")
        self.assertEqual(result.occupied_seat_ids, frozenset({"A1", "A2", "A3", "A4", "A5", "B2", "C4"}))

    def test_position_only_used_without_ids(self):
        refs = seat_refs({"seatId": "A1", "row": "B", "column": 2})
        self.assertEqual([getattr(r, "seat_id", None) for r in refs], ["A1"])

    def test_session_id_compared_as_text(self):
        seats = apply_bookings(self.grid, [{"sessionId": 12, "seatId": "B1"}], "12")
        self.assertEqual(_statuses(seats)["B1"], SeatStatus.occupied)

    def test_unscoped_record_is_folded_in(self):
        result = overlay_bookings(self.grid, [{"id": 9, "seatId": "C1"}], "S1")
        self.assertEqual(_statuses(result.seats)["C1"], SeatStatus.occupied)
        self.assertEqual(result.unscoped_count, 1)

    def test_malformed_records_are_excluded(self):
        bookings = [{"id": 1, "sessionId": "S1"}, "garbage", {"id": 2, "sessionId": "S1", "row": "Z", "column": 1}]
        result = overlay_bookings(self.grid, bookings, "S1")
        self.assertEqual(result.malformed_count, 3)
        self.assertTrue(all(isinstance(e, MalformedBookingRecord) for e in result.issues))
        self.assertEqual(result.seats, list(self.grid))

    def test_non_list_seats_field_is_malformed(self):
        bookings = [{"id": 1, "sessionId": "S1", "seats": 5}, {"id": 2, "sessionId": "S1", "seats": "A1"}]
        result = overlay_bookings(self.grid, bookings, "S1")
        self.assertEqual(result.malformed_count, 2)
        self.assertEqual(result.occupied_seat_ids, frozenset())
        self.assertEqual(seat_refs({"seats": {"id": "A1"}}), [])

    def test_position_ignores_appended_rows(self):
        layout = SeatLayoutDefinition(
            id="L",
            grid_rows=3,
            grid_columns=1,
            seats=(SeatRecord(id="in", row="A", column=1), SeatRecord(id="far", row="F", column=1)),
        )
        grid = generate_grid(layout)
        result = overlay_bookings(grid, [{"id": 1, "sessionId": "S1", "row": "6", "column": 1}], "S1")
        self.assertEqual(result.occupied_seat_ids, frozenset())
        self.assertEqual(result.malformed_count, 1)
        result = overlay_bookings(grid, [{"id": 2, "sessionId": "S1", "row": 3, "column": 1}], "S1")
        self.assertEqual(result.occupied_seat_ids, frozenset({"C1"}))

    def test_booking_hits_record_not_empty_cell_with_same_id(self):
        layout = SeatLayoutDefinition(
            id="L", grid_rows=2, grid_columns=2, seats=(SeatRecord(id="A1", row="B", column=2),)
        )
        seats = apply_bookings(generate_grid(layout), [{"sessionId": "S1", "seatId": "A1"}], "S1")
        occupied = [s for s in seats if s.status == SeatStatus.occupied]
        self.assertEqual([(s.id, s.row, s.column) for s in occupied], [("A1", "B", 2)])

    def test_cancelled_records_do_not_occupy(self):
        seats = apply_bookings(self.grid, [{"sessionId": "S1", "seatId": "A1", "status": "CANCELLED"}], "S1")
        self.assertEqual(_statuses(seats)["A1"], SeatStatus.available)

    def test_occupied_overrides_unavailable(self):
        layout = SeatLayoutDefinition(id="L", grid_rows=1, grid_columns=2, seats=(SeatRecord(id="A1", row="A", column=1),))
        grid = generate_grid(layout)
        self.assertEqual(_statuses(grid)["A2"], SeatStatus.unavailable)
        seats = apply_bookings(grid, [{"sessionId": "S1", "seatId": "A2"}], "S1")
        self.assertEqual(_statuses(seats)["A2"], SeatStatus.occupied)

    def test_unknown_seats_reported_as_orphaned(self):
        result = overlay_bookings(self.grid, [{"sessionId": "S1", "seatId": "Z99"}], "S1")
        self.assertEqual(result.orphaned_seat_ids, frozenset({"Z99"}))
        self.assertEqual(len(result.seats), 50)
        self.assertEqual(occupancy_summary(result)["seats_orphaned"], 1)

    def test_pure_and_idempotent(self):
        bookings = [{"sessionId": "S1", "seatId": "A3"}, {"sessionId": "S1", "row": "B", "column": 1}]
        before = list(self.grid)
        once = apply_bookings(self.grid, bookings, "S1")
        twice = apply_bookings(once, bookings, "S1")
        self.assertEqual(once, twice)
        self.assertEqual(self.grid, before)
        self.assertIsNot(once, self.grid)

    def test_summary_counts(self):
        layout = SeatLayoutDefinition(
            id="L",
            grid_rows=1,
            grid_columns=3,
            seats=(
                SeatRecord(id="A1", row="A", column=1),
                SeatRecord(id="A2", row="A", column=2, type="instructor"),
            ),
        )
        result = overlay_bookings(generate_grid(layout), [{"sessionId": "S", "seatId": "A1"}], "S")
        summary = occupancy_summary(result)
        self.assertEqual(summary["seats_total"], 3)
        self.assertEqual(summary["seats_occupied"], 1)
        self.assertEqual(summary["seats_unavailable"], 1)
        self.assertEqual(summary["seats_available"], 0)


if __name__ == "__main__":
    unittest.main()
