from datetime import datetime, timezone


def toTimeStamp(localTime: datetime) -> int:
    """
    Converts a datetime to a UTC timestamp in milliseconds.
    A naive datetime is assumed to be in the system's local timezone.
    """
    if localTime.tzinfo is None or localTime.tzinfo.utcoffset(localTime) is None:
        localTime = localTime.astimezone()

    return int(localTime.astimezone(timezone.utc).timestamp() * 1000)


def fromTimeStamp(utc_timestamp_ms: int) -> datetime:
    """
    Converts a UTC timestamp in milliseconds to a timezone-aware local datetime object.
    """
    utc_dt = datetime.fromtimestamp(utc_timestamp_ms / 1000, tz=timezone.utc)
    return utc_dt.astimezone()


def elapsed_seconds(
    started_at: datetime | None,
    completed_at: datetime | None = None,
    now: datetime | None = None,
) -> float | None:
    """Seconds between start and completion, or start and now while running."""
    if started_at is None:
        return None
    end = completed_at or now or datetime.now(timezone.utc)
    return max(0.0, (toTimeStamp(end) - toTimeStamp(started_at)) / 1000)


def format_elapsed(seconds: float | None) -> str:
    """Render a duration the way the admin backend does: ``1h 2m 3s``."""
    if seconds is None or seconds < 1:
        return "0s"

    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)
