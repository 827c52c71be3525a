from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column in this app stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def calendar_days(start: datetime, end: datetime) -> int:
    """Whole days between two timestamps, counted by date boundaries crossed, not 24h periods."""
    return (end.date() - start.date()).days
