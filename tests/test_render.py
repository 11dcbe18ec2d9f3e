import unittest

from studio_seating.grid import SeatLayoutDefinition, SeatRecord, generate_grid
from studio_seating.overlay import apply_bookings
from studio_seating.render import render_ascii
from studio_seating.selection import SelectionState


class TestRenderAscii(unittest.TestCase):
    def test_marks(self):
        layout = SeatLayoutDefinition(
            id="L",
            grid_rows=2,
            grid_columns=3,
            seats=(
                SeatRecord(id="A1", row=1, column=1),
                SeatRecord(id="A2", row=1, column=2, type="exclusive"),
                SeatRecord(id="A3", row=1, column=3, type="instructor"),
                SeatRecord(id="B1", row=2, column=1),
                SeatRecord(id="B2", row=2, column=2),
            ),
        )
        seats = apply_bookings(generate_grid(layout), [{"sessionId": "S", "seatId": "B1"}], "S")
        view = SelectionState.start(seats).click("B2").state.view()
        lines = render_ascii(view, cell_width=1).splitlines()
        self.assertEqual(lines[0], "   123")
        self.assertEqual(lines[1], "A  oEI")
        self.assertEqual(lines[2], "B  x*.")

    def test_out_of_grid_seats_listed(self):
        layout = SeatLayoutDefinition(id="L", grid_rows=1, grid_columns=1, seats=(SeatRecord(id="far", row="7", column=4),))
        text = render_ascii(generate_grid(layout))
        self.assertIn("outside grid: far@74", text)


if __name__ == "__main__":
    unittest.main()
