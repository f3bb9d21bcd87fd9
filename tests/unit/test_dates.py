"""Tests for date normalization."""

import pytest
from datetime import date, datetime, timezone

from changelog_tracker.core.dates import (
    normalize_date,
    parse_absolute_date,
    parse_partial_date,
    parse_relative_date,
    resolve_date,
)


REFERENCE = datetime(2025, 11, 20, 12, 0, tzinfo=timezone.utc)


class TestNormalizeDate:
    """Tests for normalize_date function."""

    def test_empty_string_is_today(self):
        """Test that empty input falls back to the reference date."""
        assert normalize_date("", REFERENCE) == "2025-11-20"

    def test_none_is_today(self):
        """Test that None falls back to the reference date."""
        assert normalize_date(None, REFERENCE) == "2025-11-20"

    def test_garbage_is_today(self):
        """Test that unparseable text falls back to the reference date."""
        assert normalize_date("not a date", REFERENCE) == "2025-11-20"

    def test_iso_timestamp(self):
        """Test that time-of-day is dropped from ISO timestamps."""
        assert normalize_date("2025-10-28T09:00:00Z", REFERENCE) == "2025-10-28"

    def test_ordinal_day_month_year(self):
        """Test Matomo-style dates with ordinal suffixes."""
        assert normalize_date("28th October 2025", REFERENCE) == "2025-10-28"

    def test_month_day_year(self):
        """Test US-style long dates."""
        assert normalize_date("October 28, 2025", REFERENCE) == "2025-10-28"

    def test_year_only_defaults_to_first_of_january(self):
        """Test that missing month and day default to January 1st."""
        assert normalize_date("Released in 2024", REFERENCE) == "2024-01-01"

    def test_date_object_passthrough(self):
        """Test that an already-resolved date is kept."""
        assert normalize_date(date(2024, 3, 1), REFERENCE) == "2024-03-01"

    def test_datetime_object_passthrough(self):
        """Test that datetimes are reduced to their date."""
        assert normalize_date(datetime(2024, 3, 1, 23, 59), REFERENCE) == "2024-03-01"

    def test_partial_past_date_uses_reference_year(self):
        """Test that a year-less date in the past keeps the reference year."""
        assert normalize_date("Jan 5", REFERENCE) == "2025-01-05"

    def test_partial_near_future_date_uses_reference_year(self):
        """Test that a year-less date a few days ahead keeps the reference year."""
        assert normalize_date("Nov 25", REFERENCE) == "2025-11-25"

    def test_whitespace_is_collapsed(self):
        """Test that surrounding and inner whitespace does not matter."""
        assert normalize_date("  Jan \n 5 ", REFERENCE) == "2025-01-05"

    def test_accepts_plain_date_reference(self):
        """Test that a date can be used as reference."""
        assert normalize_date("", date(2024, 6, 1)) == "2024-06-01"

    def test_result_is_always_iso(self):
        """Test that every result has the YYYY-MM-DD shape."""
        for raw in ["", "yesterday", "Dec 31", "March 2023", "foo bar 99"]:
            value = normalize_date(raw, REFERENCE)
            assert len(value) == 10
            assert date.fromisoformat(value)


class TestParsePartialDate:
    """Tests for parse_partial_date function."""

    TODAY = date(2025, 11, 20)

    def test_month_day(self):
        """Test month-first expressions."""
        assert parse_partial_date("January 5th", self.TODAY) == date(2025, 1, 5)

    def test_day_month(self):
        """Test day-first expressions."""
        assert parse_partial_date("5 Jan", self.TODAY) == date(2025, 1, 5)

    def test_day_of_month(self):
        """Test "25th of November"."""
        assert parse_partial_date("25th of November", self.TODAY) == date(2025, 11, 25)

    def test_abbreviation_with_dot(self):
        """Test abbreviated month names with a trailing dot."""
        assert parse_partial_date("Sept. 3", self.TODAY) == date(2025, 9, 3)

    def test_far_future_rolls_back_one_year(self):
        """Test that dates beyond the tolerance window belong to last year."""
        assert parse_partial_date("Dec 31", self.TODAY) == date(2024, 12, 31)

    def test_tolerance_boundary(self):
        """Test that exactly 30 days ahead still keeps the reference year."""
        assert parse_partial_date("Dec 20", self.TODAY) == date(2025, 12, 20)
        assert parse_partial_date("Dec 21", self.TODAY) == date(2024, 12, 21)

    def test_leap_day_outside_leap_year(self):
        """Test that Feb 29 resolves to the previous leap year when possible."""
        assert parse_partial_date("Feb 29", date(2025, 3, 10)) == date(2024, 2, 29)

    def test_leap_day_with_no_recent_leap_year(self):
        """Test that an impossible date falls back to the reference."""
        assert parse_partial_date("Feb 29", date(2026, 3, 10)) == date(2026, 3, 10)

    def test_invalid_day(self):
        """Test that day 31 of a 30-day month falls back to the reference."""
        assert parse_partial_date("Nov 31", self.TODAY) == self.TODAY

    def test_non_partial_text(self):
        """Test that text with a year is not treated as partial."""
        assert parse_partial_date("Jan 5, 2024", self.TODAY) is None
        assert parse_partial_date("hello", self.TODAY) is None


class TestParseRelativeDate:
    """Tests for parse_relative_date function."""

    TODAY = date(2025, 11, 20)

    @pytest.mark.parametrize("text,expected", [
        ("today", date(2025, 11, 20)),
        ("Yesterday", date(2025, 11, 19)),
        ("3 days ago", date(2025, 11, 17)),
        ("a day ago", date(2025, 11, 19)),
        ("2 weeks ago", date(2025, 11, 6)),
        ("one week ago", date(2025, 11, 13)),
    ])
    def test_relative_expressions(self, text, expected):
        """Test supported relative expressions."""
        assert parse_relative_date(text, self.TODAY) == expected

    def test_unknown_expression(self):
        """Test that other text is not relative."""
        assert parse_relative_date("3 months ago", self.TODAY) is None

    def test_resolve_routes_relative(self):
        """Test that resolve_date applies relative parsing."""
        assert resolve_date("yesterday", REFERENCE) == date(2025, 11, 19)


class TestParseAbsoluteDate:
    """Tests for parse_absolute_date function."""

    def test_requires_year(self):
        """Test that text without a 4-digit year is rejected."""
        assert parse_absolute_date("October 28") is None

    def test_fuzzy_text(self):
        """Test that surrounding words are ignored."""
        assert parse_absolute_date("Published on March 3rd, 2024") == date(2024, 3, 3)

    def test_month_year(self):
        """Test that a missing day defaults to the 1st."""
        assert parse_absolute_date("March 2023") == date(2023, 3, 1)
