"""Unit tests for date helpers."""
from datetime import date

import pytest

from movie_catalog.utils.dates import add_months, days_from, parse_release_date


class TestDaysFrom:

    def test_back_across_year(self):
        assert days_from(date(2025, 1, 10), -60) == date(2024, 11, 11)

    def test_forward(self):
        assert days_from(date(2025, 2, 28), 1) == date(2025, 3, 1)


class TestAddMonths:

    @pytest.mark.parametrize(
        "start, months, expected",
        [
            (date(2025, 3, 15), 2, date(2025, 5, 15)),
            (date(2025, 11, 30), 2, date(2026, 1, 30)),
            (date(2024, 12, 31), 2, date(2025, 2, 28)),
            (date(2023, 12, 31), 2, date(2024, 2, 29)),
            (date(2025, 8, 31), 1, date(2025, 9, 30)),
            (date(2025, 3, 31), -1, date(2025, 2, 28)),
        ],
    )
    def test_add_months(self, start, months, expected):
        assert add_months(start, months) == expected


class TestParseReleaseDate:

    def test_valid(self):
        assert parse_release_date("1999-03-31") == date(1999, 3, 31)

    @pytest.mark.parametrize("value", [None, "", "1999", "2011-07", "31/03/1999"])
    def test_missing_or_malformed(self, value):
        assert parse_release_date(value) is None
