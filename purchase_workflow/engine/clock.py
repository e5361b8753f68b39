from datetime import datetime, timezone


def utc_now(now: datetime | None = None) -> datetime:
    """Return `now` when given, else the current UTC time."""
    return now if now is not None else datetime.now(timezone.utc)
