import unittest
from datetime import datetime, time
from unittest.mock import patch

from dateutil import tz

from budgetcycle import config
from budgetcycle.instants import (
    at_midnight, calendar_fields, days_in_month, first_day_of_month, format_date, format_day_of_month,
    format_day_of_week, format_month_year, from_datetime, is_in_month, is_same_day, last_day_of_month,
    make_instant, month_view_dates, next_day, next_month, previous_month, to_date, to_datetime,
)


class TestInstants(unittest.TestCase):
    def setUp(self):
        patcher = patch.object(config, "LOCAL_TZ", tz.gettz("Europe/Berlin"))
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_days_in_month(self):
        self.assertEqual(days_in_month(2024, 2), 29)
        self.assertEqual(days_in_month(2023, 2), 28)
        self.assertEqual(days_in_month(1900, 2), 28)
        self.assertEqual(days_in_month(2000, 2), 29)
        self.assertEqual(days_in_month(2023, 4), 30)
        self.assertEqual(days_in_month(2023, 12), 31)

    def test_make_instant_rejects_missing_days(self):
        with self.assertRaises(ValueError):
            make_instant(2023, 2, 29)
        with self.assertRaises(ValueError):
            make_instant(2023, 4, 31)

    def test_make_instant_is_local(self):
        instant = make_instant(2024, 1, 1)
        # Berlin is UTC+1 in winter
        self.assertEqual(instant, 1704063600000)
        self.assertEqual(to_datetime(instant).hour, 0)

    def test_millisecond_precision(self):
        instant = 1700000000123
        self.assertEqual(from_datetime(to_datetime(instant)), instant)
        self.assertEqual(to_datetime(instant).microsecond, 123000)

    def test_naive_datetimes_are_local(self):
        self.assertEqual(from_datetime(datetime(2024, 1, 1)), make_instant(2024, 1, 1))

    def test_calendar_fields(self):
        fields = calendar_fields(make_instant(2024, 5, 15, time(13, 45)))
        self.assertEqual(fields, (2024, 5, 15, 2))
        self.assertEqual(fields.weekday, 2)

    def test_midnight_and_next_day(self):
        instant = make_instant(2024, 5, 15, time(23, 59, 59, 999000))
        self.assertEqual(at_midnight(instant), make_instant(2024, 5, 15))
        self.assertEqual(next_day(instant), make_instant(2024, 5, 16))
        # Across the spring DST change the day is 23 hours long
        self.assertEqual(next_day(make_instant(2024, 3, 31, time(12))), make_instant(2024, 4, 1))

    def test_same_day_and_month(self):
        self.assertTrue(is_same_day(make_instant(2024, 5, 15), make_instant(2024, 5, 15, time(22))))
        self.assertFalse(is_same_day(make_instant(2024, 5, 15), make_instant(2024, 5, 16)))
        self.assertTrue(is_in_month(make_instant(2024, 5, 31), make_instant(2024, 5, 1)))
        self.assertFalse(is_in_month(make_instant(2023, 5, 31), make_instant(2024, 5, 1)))

    def test_month_bounds(self):
        instant = make_instant(2024, 2, 10, time(9))
        self.assertEqual(first_day_of_month(instant), make_instant(2024, 2, 1))
        self.assertEqual(last_day_of_month(instant), make_instant(2024, 2, 29, time(23, 59, 59, 999000)))

    def test_month_navigation_clamps(self):
        self.assertEqual(next_month(make_instant(2024, 1, 31)), make_instant(2024, 2, 29))
        self.assertEqual(previous_month(make_instant(2023, 3, 31)), make_instant(2023, 2, 28))
        self.assertEqual(next_month(make_instant(2023, 12, 5)), make_instant(2024, 1, 5))

    def test_month_view_dates(self):
        grid = month_view_dates(make_instant(2024, 5, 20))
        self.assertEqual(len(grid), 42)
        # May 1st 2024 is a Wednesday
        self.assertEqual(grid[0], make_instant(2024, 4, 28))
        self.assertEqual(grid[-1], make_instant(2024, 6, 8))
        self.assertTrue(all(to_date(d).weekday() == 6 for d in grid[::7]))

    def test_month_view_starting_on_sunday(self):
        grid = month_view_dates(make_instant(2024, 9, 3))
        self.assertEqual(grid[0], make_instant(2024, 9, 1))

    def test_formatting(self):
        instant = make_instant(2025, 1, 5)
        self.assertEqual(format_date(instant), "Jan 05, 2025")
        self.assertEqual(format_month_year(instant), "January 2025")
        self.assertEqual(format_day_of_month(instant), "5")
        self.assertEqual(format_day_of_week(instant), "Sun")


if __name__ == "__main__":
    unittest.main()
