"""Time and datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime(dt: datetime) -> str:
    """Format datetime as an ISO-8601 UTC string with millisecond precision.

    Args:
        dt: Datetime to format

    Returns:
        String such as ``2024-03-01T09:30:00.000Z``
    """
    dt = ensure_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_datetime(dt_str: str) -> datetime:
    """Parse ISO datetime string.

    Args:
        dt_str: ISO format datetime string

    Returns:
        Parsed datetime object in UTC

    Raises:
        ValueError: If the string is not an ISO-8601 timestamp
    """
    formats = [
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%dT%H:%M:%S.%fZ",
        "%Y-%m-%dT%H:%M:%S%z",
        "%Y-%m-%dT%H:%M:%S.%f%z",
        "%Y-%m-%dT%H:%M",
    ]

    for fmt in formats:
        try:
            return ensure_utc(datetime.strptime(dt_str, fmt))
        except ValueError:
            continue

    # Anything else datetime itself understands (offsets without seconds etc.)
    try:
        return ensure_utc(datetime.fromisoformat(dt_str))
    except ValueError:
        raise ValueError(f"Could not parse datetime: {dt_str}") from None
