"""Date and time utility functions."""
from datetime import datetime, timezone
from typing import Optional, Union

COUNTDOWN_FINISHED = "Event Started"

DateLike = Union[str, datetime]


def parse_iso(value: DateLike) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware datetime.

    Args:
        value: ISO string (e.g., "2025-11-15T14:00:00Z") or datetime

    Returns:
        Timezone-aware datetime (naive input is taken as UTC)

    Raises:
        ValueError: If the string is not ISO 8601
    """
    if isinstance(value, datetime):
        dt = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Invalid timestamp: {value!r}")
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def can_join(now: DateLike, window_opens_at: DateLike, end_at: DateLike) -> bool:
    """
    Check whether `now` falls inside the join window.

    The window is inclusive at both ends. This is a display hint only; the
    API decides whether a join is actually allowed.

    Args:
        now: Current time
        window_opens_at: Window start
        end_at: Event end

    Returns:
        True if window_opens_at <= now <= end_at
    """
    current = parse_iso(now)
    return parse_iso(window_opens_at) <= current <= parse_iso(end_at)


def seconds_until(target: DateLike, now: Optional[DateLike] = None) -> int:
    """Whole seconds from `now` until `target`, never negative."""
    current = parse_iso(now) if now is not None else utc_now()
    delta = (parse_iso(target) - current).total_seconds()
    return max(0, int(delta))


def as_hms(total_seconds: int) -> str:
    """Format seconds as HH:MM:SS (hours are not wrapped at 24)."""
    total_seconds = max(0, int(total_seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_countdown(start_at: DateLike, now: Optional[DateLike] = None) -> str:
    """
    Format the time left until `start_at`.

    Args:
        start_at: Event start
        now: Current time (defaults to wall clock)

    Returns:
        "{days}d HH:MM:SS", or "Event Started" once start_at has passed
    """
    remaining = seconds_until(start_at, now)
    if remaining <= 0:
        return COUNTDOWN_FINISHED

    days, rest = divmod(remaining, 86400)
    return f"{days}d {as_hms(rest)}"


def format_datetime(value: DateLike, fmt: str = "%b %d, %Y %I:%M %p") -> str:
    """Render a timestamp for display; unparseable input is returned as-is."""
    try:
        return parse_iso(value).strftime(fmt)
    except (ValueError, TypeError):
        return str(value or "")


def format_date(value: DateLike) -> str:
    """Render a timestamp as e.g. 'Friday, November 15, 2025'."""
    return format_datetime(value, "%A, %B %d, %Y")


def format_time(value: DateLike) -> str:
    """Render a timestamp as e.g. '02:00 PM'."""
    return format_datetime(value, "%I:%M %p")


def format_timestamp(value: DateLike) -> str:
    """Render a registration timestamp as MM/DD/YYYY, HH:MM AM."""
    return format_datetime(value, "%m/%d/%Y, %I:%M %p")
