from datetime import date
import unittest

from filmstock.domain.ExpiryDate import (
    ExpiryDate,
    any_past,
    closest_to_today,
    normalize,
    parse_many,
    sanitize_input,
    validate_expiry_dates,
)
from filmstock.domain.errors import ExpiryDateError, ValidationError


class TestSanitizeInput(unittest.TestCase):

    def test_six_digits_get_a_slash(self):
        self.assertEqual(sanitize_input("122026"), "12/2026")
        self.assertEqual(sanitize_input("12/2026"), "12/2026")
        self.assertEqual(sanitize_input("12.2026"), "12/2026")

    def test_four_digits_stay_a_year(self):
        self.assertEqual(sanitize_input("2027"), "2027")

    def test_extra_digits_are_dropped(self):
        self.assertEqual(sanitize_input("1220267"), "12/2026")

    def test_partial_input(self):
        self.assertEqual(sanitize_input("12-20"), "1220")
        self.assertEqual(sanitize_input(""), "")


class TestExpiryDateParse(unittest.TestCase):

    def test_canonical_input_round_trips(self):
        for value in ["1950", "2024", "2100", "01/2024", "12/2099"]:
            self.assertEqual(normalize(value), value)

    def test_other_shapes_normalize(self):
        self.assertEqual(normalize("122026"), "12/2026")
        self.assertEqual(normalize("3/2024"), "03/2024")
        # legacy day precision collapses to the month
        self.assertEqual(normalize("03/15/2024"), "03/2024")

    def test_month_out_of_range(self):
        with self.assertRaises(ExpiryDateError) as ctx:
            ExpiryDate.parse("13/2024")
        self.assertEqual(ctx.exception.kind, "month")
        self.assertIsInstance(ctx.exception, ValidationError)

    def test_month_checked_before_year(self):
        with self.assertRaises(ExpiryDateError) as ctx:
            ExpiryDate.parse("131900")
        self.assertEqual(ctx.exception.kind, "month")

    def test_year_out_of_range(self):
        for value in ["1949", "2101", "06/1900"]:
            with self.assertRaises(ExpiryDateError) as ctx:
                ExpiryDate.parse(value)
            self.assertEqual(ctx.exception.kind, "year")

    def test_legacy_day_must_exist(self):
        with self.assertRaises(ExpiryDateError) as ctx:
            ExpiryDate.parse("02/30/2024")
        self.assertEqual(ctx.exception.kind, "day")
        self.assertEqual(ExpiryDate.parse("02/29/2024").day, 29)

    def test_garbage_is_a_format_error(self):
        for value in ["abc", "20", "2024/12", ""]:
            with self.assertRaises(ExpiryDateError) as ctx:
                ExpiryDate.parse(value)
            self.assertEqual(ctx.exception.kind, "format")


class TestExpiryDatePeriods(unittest.TestCase):

    def test_month_boundary(self):
        d = ExpiryDate.parse("03/2024")
        self.assertFalse(d.is_past(date(2024, 3, 31)))
        self.assertTrue(d.is_past(date(2024, 4, 1)))

    def test_year_boundary(self):
        d = ExpiryDate.parse("2024")
        self.assertEqual(d.start, date(2024, 1, 1))
        self.assertFalse(d.is_past(date(2024, 12, 31)))
        self.assertTrue(d.is_past(date(2025, 1, 1)))

    def test_february_end_of_period(self):
        self.assertEqual(ExpiryDate.parse("02/2024").end_of_period, date(2024, 2, 29))
        self.assertEqual(ExpiryDate.parse("02/2023").end_of_period, date(2023, 2, 28))

    def test_ordering_uses_end_of_period(self):
        year = ExpiryDate.parse("2024")
        june = ExpiryDate.parse("06/2024")
        self.assertLess(june, year)
        self.assertEqual(sorted([year, june, ExpiryDate.parse("2023")])[0].normalized(), "2023")


class TestExpiryDateLists(unittest.TestCase):

    def test_validate_reports_index(self):
        with self.assertRaises(ExpiryDateError) as ctx:
            validate_expiry_dates(["2024", "", "13/2024"])
        self.assertEqual(ctx.exception.index, 2)
        self.assertEqual(ctx.exception.to_dict()["field"], "expiry_dates")

    def test_validate_normalizes_and_skips_blanks(self):
        self.assertEqual(validate_expiry_dates(["3/2024", " ", "2025"]), ["03/2024", "2025"])

    def test_closest_to_today(self):
        closest = closest_to_today(["2020", "12/2026", "06/2025"], today=date(2025, 1, 1))
        self.assertEqual(closest.normalized(), "06/2025")
        self.assertIsNone(closest_to_today([], today=date(2025, 1, 1)))

    def test_unparsable_stored_values_are_skipped(self):
        self.assertEqual(len(parse_many(["2030", "garbage"])), 1)
        self.assertFalse(any_past(["2030", "garbage"], today=date(2025, 1, 1)))
        self.assertTrue(any_past(["2030", "2020"], today=date(2025, 1, 1)))
