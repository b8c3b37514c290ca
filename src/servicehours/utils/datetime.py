"""Date-time helpers."""

from datetime import date, datetime, timezone


def utcnow(now: datetime | None = None) -> datetime:
    """Return a naive UTC timestamp suitable for ``DateTime`` columns."""

    current = now.astimezone(timezone.utc) if now else datetime.now(timezone.utc)
    return current.replace(tzinfo=None)


def utc_today(now: datetime | None = None) -> date:
    """Return the current calendar date in UTC."""

    return utcnow(now).date()
