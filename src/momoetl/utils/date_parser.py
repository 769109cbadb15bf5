"""Date parsing utilities."""

from datetime import date, datetime, timedelta, timezone
from dateutil import parser as date_parser
from dateutil import tz
from dateutil.relativedelta import relativedelta

EARLIEST_TIMESTAMP = datetime(2000, 1, 1)
LATEST_TIMESTAMP = datetime(2100, 1, 1)

# Tried in order before falling back to dateutil. ISO forms come first so
# dayfirst never reorders a year-month-day string.
_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
    "%d %b %Y %I:%M:%S %p",
    "%d %b %Y %H:%M:%S",
)

# Fixed default so missing components never depend on the current date
_FALLBACK_DEFAULT = datetime(2000, 1, 1)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Used for command-line filters, not for record normalization.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_timestamp(timestamp_str: str, timezone_name: str = "UTC") -> datetime:
    """Parse an SMS timestamp into a naive UTC datetime.

    Accepts:
    - "2026-01-20 14:30:00", "2026-01-20T14:30:00Z", "2026-01-20T14:30:00+02:00"
    - "20/01/2026 14:30" (day first)
    - "20 Jan 2026 2:30:00 PM"
    - "1768919400000" (epoch milliseconds, as written by Android SMS backups)

    Naive values are interpreted in ``timezone_name``. The result does not
    depend on the current date or clock, so the same input always produces
    the same instant.

    Args:
        timestamp_str: Timestamp text
        timezone_name: IANA zone name for naive timestamps

    Returns:
        Naive datetime in UTC

    Raises:
        ValueError: If the text cannot be parsed or falls outside
            [EARLIEST_TIMESTAMP, LATEST_TIMESTAMP)
    """
    if not timestamp_str or not timestamp_str.strip():
        raise ValueError("Empty date string")

    text = timestamp_str.strip()
    local_zone = tz.gettz(timezone_name)
    if local_zone is None:
        raise ValueError(f"Unknown timezone '{timezone_name}'")

    parsed = _parse_any(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=local_zone)
    result = parsed.astimezone(timezone.utc).replace(tzinfo=None)

    if not EARLIEST_TIMESTAMP <= result < LATEST_TIMESTAMP:
        raise ValueError(f"Date '{timestamp_str}' is out of range")
    return result


def _parse_any(text: str) -> datetime:
    if text.isdigit():
        if len(text) < 12:
            raise ValueError(f"Could not parse date '{text}'")
        try:
            return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ValueError(f"Could not parse date '{text}': {e}")

    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    try:
        return date_parser.isoparse(text)
    except ValueError:
        pass

    try:
        return date_parser.parse(text, dayfirst=True, default=_FALLBACK_DEFAULT)
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{text}': {e}")
