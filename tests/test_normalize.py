import unittest

from studio_seating.normalize import (
    SeatStatus,
    SeatType,
    is_bookable_type,
    normalize_row,
    normalize_seat_status,
    normalize_seat_type,
)


class TestNormalizeRow(unittest.TestCase):
    def test_numeric_rows_map_to_letters(self):
        letters = [normalize_row(n, 5) for n in range(1, 6)]
        self.assertEqual(letters, ["A", "B", "C", "D", "E"])
        self.assertEqual(len(set(letters)), 5)

    def test_numeric_strings(self):
        self.assertEqual(normalize_row("1", 3), "A")
        self.assertEqual(normalize_row(" 3 ", 3), "C")

    def test_numeric_out_of_range_is_kept(self):
        self.assertEqual(normalize_row("7", 5), "7")
        self.assertEqual(normalize_row(0, 5), "0")

    def test_letters_are_uppercased(self):
        self.assertEqual(normalize_row("b", 5), "B")
        self.assertEqual(normalize_row("C", 5), "C")

    def test_missing_row(self):
        self.assertEqual(normalize_row(None, 5), "")

    def test_non_ascii_digits_are_not_row_numbers(self):
        self.assertEqual(normalize_row("\u00b2", 5), "\u00b2")
        self.assertEqual(normalize_row("\u0663", 5), "\u0663")


class TestNormalizeVocabulary(unittest.TestCase):
    def test_seat_type(self):
        self.assertEqual(normalize_seat_type("EXCLUSIVE"), SeatType.exclusive)
        self.assertEqual(normalize_seat_type("Podium"), SeatType.podium)
        self.assertEqual(normalize_seat_type("bike"), SeatType.normal)
        self.assertEqual(normalize_seat_type(None), SeatType.normal)

    def test_seat_status(self):
        self.assertEqual(normalize_seat_status("active"), SeatStatus.available)
        self.assertEqual(normalize_seat_status("Available"), SeatStatus.available)
        self.assertEqual(normalize_seat_status("inactive"), SeatStatus.occupied)
        self.assertEqual(normalize_seat_status("occupied"), SeatStatus.occupied)
        self.assertEqual(normalize_seat_status("selected"), SeatStatus.selected)
        self.assertEqual(normalize_seat_status("unavailable"), SeatStatus.unavailable)
        self.assertEqual(normalize_seat_status("broken"), SeatStatus.available)
        self.assertEqual(normalize_seat_status(None), SeatStatus.available)

    def test_bookable_types(self):
        self.assertTrue(is_bookable_type(SeatType.normal))
        self.assertTrue(is_bookable_type(SeatType.exclusive))
        for t in (SeatType.podium, SeatType.column, SeatType.instructor):
            self.assertFalse(is_bookable_type(t))


if __name__ == "__main__":
    unittest.main()
