"""Unit tests for date parsing and time windows."""
import pytest
from datetime import datetime

from app.core.dates import day_window, month_window, parse_date_input, sunday_index, week_window
from app.core.errors import ValidationError


class TestParseDateInput:
    """Test delivery date parsing."""

    def test_date_only(self):
        """A plain date parses to midnight."""
        assert parse_date_input("2026-10-20") == datetime(2026, 10, 20)

    def test_utc_suffix(self):
        """A trailing Z is treated as UTC."""
        assert parse_date_input("2026-10-20T08:30:00Z") == datetime(2026, 10, 20, 8, 30)

    def test_offset_converted_to_utc(self):
        """Aware values are converted to naive UTC."""
        assert parse_date_input("2026-10-20T02:00:00+05:00") == datetime(2026, 10, 19, 21, 0)

    @pytest.mark.parametrize("value", ["not-a-date", "2026-13-01", "20/10/2026", ""])
    def test_invalid(self, value):
        """Unparsable values raise a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            parse_date_input(value)
        assert exc_info.value.message == "Invalid delivery date format"
        assert exc_info.value.status_code == 400

    def test_custom_message(self):
        """Callers can choose the error wording."""
        with pytest.raises(ValidationError) as exc_info:
            parse_date_input("nope", "Invalid delivery date format.")
        assert exc_info.value.message == "Invalid delivery date format."


class TestWindows:
    """Test day, week and month windows."""

    def test_day_window_is_half_open_to_next_midnight(self):
        """The day window ends at the next midnight, covering the last second."""
        start, end = day_window(datetime(2026, 10, 20, 17, 45))
        assert start == datetime(2026, 10, 20)
        assert end == datetime(2026, 10, 21)
        assert start <= datetime(2026, 10, 20, 23, 59, 59, 500000) < end

    def test_day_window_on_last_representable_day(self):
        """The last calendar day does not overflow, its end is clamped."""
        start, end = day_window(datetime(9999, 12, 31, 8, 0))
        assert start == datetime(9999, 12, 31)
        assert end == datetime.max

    def test_week_starts_on_sunday(self):
        """A Wednesday belongs to the week starting the previous Sunday."""
        start, end = week_window(datetime(2026, 10, 21, 15, 0))
        assert start == datetime(2026, 10, 18)
        assert end == datetime(2026, 10, 25)

    def test_week_window_on_sunday(self):
        """A Sunday starts its own week."""
        start, _ = week_window(datetime(2026, 10, 18, 0, 0))
        assert start == datetime(2026, 10, 18)

    def test_month_window(self):
        """The month window includes the whole last day."""
        assert month_window(datetime(2026, 10, 19)) == (datetime(2026, 10, 1), datetime(2026, 11, 1))

    def test_month_window_december(self):
        """December rolls into the next year."""
        assert month_window(datetime(2026, 12, 31, 23, 0)) == (datetime(2026, 12, 1), datetime(2027, 1, 1))

    def test_sunday_index(self):
        """Sunday is 0 and Saturday is 6."""
        assert sunday_index(datetime(2026, 10, 18)) == 0
        assert sunday_index(datetime(2026, 10, 21)) == 3
        assert sunday_index(datetime(2026, 10, 24)) == 6
