"""Date parsing and time windows used for filtering orders."""
from datetime import datetime, timedelta, timezone
from typing import Tuple

from app.core.errors import ValidationError

INVALID_DATE_MESSAGE = "Invalid delivery date format"


def parse_date_input(value: str, message: str = INVALID_DATE_MESSAGE) -> datetime:
    """
    Parse an ISO-8601 date or datetime string.

    Aware values are converted to UTC; the result is always naive UTC.

    Raises:
        ValidationError: if the value cannot be parsed
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(message) from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def day_window(value: datetime) -> Tuple[datetime, datetime]:
    """
    Half-open [midnight, next midnight) interval containing ``value``.

    On the last representable day the end is clamped to ``datetime.max``.
    """
    start = datetime(value.year, value.month, value.day)
    try:
        end = start + timedelta(days=1)
    except OverflowError:
        end = datetime.max
    return start, end



def week_window(value: datetime) -> Tuple[datetime, datetime]:
    """Half-open interval for the Sunday-based week containing ``value``."""
    today, _ = day_window(value)
    # weekday(): Monday == 0 ... Sunday == 6
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=7)


def month_window(value: datetime) -> Tuple[datetime, datetime]:
    """Half-open interval for the calendar month containing ``value``."""
    start = datetime(value.year, value.month, 1)
    if value.month == 12:
        end = datetime(value.year + 1, 1, 1)
    else:
        end = datetime(value.year, value.month + 1, 1)
    return start, end


def sunday_index(value: datetime) -> int:
    """Day of week with Sunday == 0 and Saturday == 6."""
    return (value.weekday() + 1) % 7