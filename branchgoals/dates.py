"""Date utilities for branchgoals.

Pure functions for period bucketing, date windows and formatting. Every
calculation happens in an explicit named time zone so reports read the same
wherever they are opened.
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from branchgoals.domain.models import Timestamp

DEFAULT_TIMEZONE = "America/Santo_Domingo"

GRANULARITIES = ("day", "week", "month", "total")

TOTAL_LABEL = "Total"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_END_OF_DAY = time(23, 59, 59, 999000)


def get_zone(name: str = DEFAULT_TIMEZONE) -> ZoneInfo:
    """Look up a named time zone.

    Raises:
        zoneinfo.ZoneInfoNotFoundError: If the zone name is unknown.
    """
    return ZoneInfo(name)


def to_timestamp(dt: datetime) -> Timestamp:
    """Convert an aware datetime to epoch milliseconds without float rounding."""
    return Timestamp((dt - _EPOCH) // timedelta(milliseconds=1))


def to_local(ts: Timestamp, tz: ZoneInfo) -> datetime:
    """Convert epoch milliseconds to an aware datetime in `tz`."""
    return (_EPOCH + timedelta(milliseconds=ts)).astimezone(tz)


def start_of_week(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def end_of_week(day: date) -> date:
    """Sunday of the week containing `day`."""
    return start_of_week(day) + timedelta(days=6)


def format_medium_date(day: date) -> str:
    """Format a date in medium style, e.g. "Oct 5, 2025"."""
    return f"{day:%b} {day.day}, {day.year}"


def format_medium_datetime(ts: Timestamp, tz: ZoneInfo) -> str:
    """Format a timestamp as medium date and short time, e.g. "Oct 5, 2025, 14:30"."""
    local = to_local(ts, tz)
    return f"{format_medium_date(local.date())}, {local:%H:%M}"


def format_month(day: date) -> str:
    """Format the month of a date, e.g. "October 2025"."""
    return day.strftime("%B %Y")


def period_for(ts: Timestamp, granularity: str, tz: ZoneInfo) -> tuple[date, str]:
    """Bucket a timestamp into a reporting period.

    Args:
        ts: Entry timestamp in epoch milliseconds.
        granularity: One of "day", "week", "month" or "total".
        tz: Time zone the period boundaries are computed in.

    Returns:
        Tuple of (period_start, label). The "total" bucket starts at date.min.

    Raises:
        ValueError: If granularity is unknown.
    """
    local_day = to_local(ts, tz).date()

    if granularity == "day":
        return local_day, format_medium_date(local_day)
    if granularity == "week":
        start = start_of_week(local_day)
        end = end_of_week(local_day)
        return start, f"{format_medium_date(start)} – {format_medium_date(end)}"
    if granularity == "month":
        start = local_day.replace(day=1)
        return start, format_month(start)
    if granularity == "total":
        return date.min, TOTAL_LABEL

    raise ValueError(f"Unknown granularity: {granularity}")


def day_window(date_from: date, date_to: date, tz: ZoneInfo) -> tuple[Timestamp, Timestamp]:
    """Inclusive window from the start of `date_from` to the last millisecond of `date_to`.

    Returns:
        Tuple of (start_ms, end_ms).
    """
    start = datetime.combine(date_from, time.min, tzinfo=tz)
    end = datetime.combine(date_to, _END_OF_DAY, tzinfo=tz)
    return to_timestamp(start), to_timestamp(end)


def current_week_range(now: datetime, tz: ZoneInfo) -> tuple[date, date]:
    """Monday and Sunday of the week containing `now`, in `tz`."""
    today = now.astimezone(tz).date()
    return start_of_week(today), end_of_week(today)


def parse_date(text: str) -> date:
    """Parse a YYYY-MM-DD date.

    Raises:
        ValueError: If text is not a valid date.
    """
    return datetime.strptime(text, "%Y-%m-%d").date()


def parse_local_datetime(text: str, tz: ZoneInfo) -> Timestamp:
    """Parse an ISO date/time typed by a user.

    Naive values (e.g. "2025-10-05T14:30") are read as local time in `tz`.

    Raises:
        ValueError: If text is not an ISO date/time.
    """
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return to_timestamp(dt)
