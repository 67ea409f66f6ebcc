"""Tests for utility functions in util module.

Covers:
- collapse_whitespace / safe_ratio: small text and number helpers
- month_to_number / date_key: profile date parsing
- months_between: position durations, including open-ended ones
"""

from datetime import date

from util import (
    collapse_whitespace,
    date_key,
    month_to_number,
    months_between,
    safe_ratio,
    utc_now_iso,
)


class TestCollapseWhitespace:
    """Test collapse_whitespace()."""

    def test_trims_and_collapses(self):
        assert collapse_whitespace("  Stanford \n  University ") == "Stanford University"

    def test_empty(self):
        assert collapse_whitespace("   ") == ""


class TestSafeRatio:
    """Test safe_ratio()."""

    def test_divides(self):
        assert safe_ratio(1, 4) == 0.25

    def test_zero_denominator(self):
        assert safe_ratio(3, 0) == 0.0


class TestUtcNowIso:
    """Test utc_now_iso()."""

    def test_format(self):
        value = utc_now_iso()
        assert value.endswith("Z")
        assert "T" in value
        assert "." not in value


class TestMonthToNumber:
    """Test month_to_number()."""

    def test_abbreviations(self):
        assert month_to_number("Jan") == 1
        assert month_to_number("dec") == 12

    def test_full_names(self):
        assert month_to_number("September") == 9

    def test_numbers_and_numeric_strings(self):
        assert month_to_number(3) == 3
        assert month_to_number("11") == 11

    def test_unknown(self):
        assert month_to_number(None) == 0
        assert month_to_number("") == 0
        assert month_to_number("Smarch") == 0
        assert month_to_number(13) == 0


class TestDateKey:
    """Test date_key()."""

    def test_year_and_month(self):
        assert date_key({"year": 2020, "month": "Mar"}) == (2020, 3)

    def test_year_only(self):
        assert date_key({"year": 2019}) == (2019, 0)

    def test_string_year(self):
        assert date_key({"year": "2018", "month": "Jul"}) == (2018, 7)

    def test_missing(self):
        assert date_key(None) is None
        assert date_key({}) is None
        assert date_key({"month": "Jan"}) is None
        assert date_key({"year": "soon"}) is None

    def test_orders_chronologically(self):
        dates = [{"year": 2020, "month": "Mar"}, {"year": 2019}, {"year": 2020, "month": "Jan"}]
        ordered = sorted(dates, key=date_key)
        assert [date_key(d) for d in ordered] == [(2019, 0), (2020, 1), (2020, 3)]


class TestMonthsBetween:
    """Test months_between()."""

    def test_closed_range(self):
        start = {"year": 2019, "month": "Jan"}
        end = {"year": 2020, "month": "Apr"}
        assert months_between(start, end) == 15

    def test_open_range_runs_until_today(self):
        start = {"year": 2024, "month": "Jun"}
        assert months_between(start, None, today=date(2025, 6, 15)) == 12

    def test_missing_start(self):
        assert months_between(None, {"year": 2020}) == 0

    def test_year_only_dates(self):
        assert months_between({"year": 2015}, {"year": 2017}) == 24

    def test_never_negative(self):
        assert months_between({"year": 2021}, {"year": 2020}) == 0
