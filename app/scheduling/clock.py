"""
Time helpers shared by the scheduling engine and the models.
All timestamps are naive UTC datetimes.
"""
from datetime import date, datetime, time, timedelta, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the store keeps naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_date(value) -> date:
    """Date component of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def as_time(value) -> time:
    """Time-of-day component of a time or datetime."""
    if isinstance(value, datetime):
        return value.time()
    return value


def combine(day, time_of_day) -> datetime:
    """Effective instant for a date + time-of-day pair."""
    return datetime.combine(as_date(day), as_time(time_of_day))


def day_bounds(day):
    """Return the half-open [start, end) datetime window covering one calendar day."""
    start = datetime.combine(as_date(day), time.min)
    return start, start + timedelta(days=1)


def iter_days(start_date, end_date):
    """Yield every date from start_date to end_date, both inclusive."""
    current = as_date(start_date)
    last = as_date(end_date)
    while current <= last:
        yield current
        current += timedelta(days=1)
