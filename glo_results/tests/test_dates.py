import unittest

from glo_results.dates import format_draw_key, generate_draw_dates, is_draw_key, parse_cli_date
from glo_results.types import DateRequest


class DateHelperTests(unittest.TestCase):
    def test_format_draw_key_pads_day_and_month(self) -> None:
        self.assertEqual(format_draw_key("01", "03", "2024"), "2024-03-01")
        self.assertEqual(format_draw_key("1", "3", "2024"), "2024-03-01")
        self.assertEqual(format_draw_key("16", "12", "2010"), "2010-12-16")

    def test_generate_draw_dates_covers_two_draws_per_month(self) -> None:
        dates = generate_draw_dates(2010)
        self.assertEqual(len(dates), 24)
        self.assertEqual(dates[0], DateRequest("01", "01", "2010"))
        self.assertEqual(dates[1], DateRequest("16", "01", "2010"))
        self.assertEqual(dates[-1], DateRequest("16", "12", "2010"))

    def test_is_draw_key(self) -> None:
        self.assertTrue(is_draw_key("2024-03-01"))
        for value in ("2024-3-1", "01-03-2024", "20240301", "2024-02-30", "", None, 20240301):
            self.assertFalse(is_draw_key(value), value)

    def test_parse_cli_date(self) -> None:
        self.assertEqual(parse_cli_date("1-3-2024"), DateRequest("01", "03", "2024"))
        self.assertEqual(parse_cli_date("16/01/2024"), DateRequest("16", "01", "2024"))
        with self.assertRaises(ValueError):
            parse_cli_date("2024-03")
        with self.assertRaises(ValueError):
            parse_cli_date("31-02-2024")


if __name__ == "__main__":
    unittest.main()
