"""Input validation shared by the scheduling engine."""
from datetime import timedelta

from .clock import as_date
from .errors import InvalidArgument

MAX_APPOINTMENT_MINUTES = 480
MIN_SLOT_DURATION = timedelta(minutes=15)
MAX_SLOT_DURATION = timedelta(hours=8)


def require_id(value, label):
    if value is None or value <= 0:
        raise InvalidArgument(f"{label} ID must be greater than 0")


def require_duration(minutes, label='Duration'):
    if minutes is None or minutes <= 0 or minutes > MAX_APPOINTMENT_MINUTES:
        raise InvalidArgument(f"{label} must be between 1 and {MAX_APPOINTMENT_MINUTES} minutes")


def validate_slot_interval(start_time, end_time, now=None):
    """
    Check a time slot interval: start before end, 15 minutes to 8 hours long,
    and (when ``now`` is given) not starting in the past.
    """
    if start_time is None or end_time is None:
        raise InvalidArgument("Start time and end time are required")
    if start_time >= end_time:
        raise InvalidArgument("Start time must be before end time")
    if now is not None and start_time < now:
        raise InvalidArgument("Start time cannot be in the past")

    duration = end_time - start_time
    if duration < MIN_SLOT_DURATION:
        raise InvalidArgument("Time slot must be at least 15 minutes")
    if duration > MAX_SLOT_DURATION:
        raise InvalidArgument("Time slot cannot exceed 8 hours")


def validate_date_range(start_date, end_date, today):
    start_date, end_date = as_date(start_date), as_date(end_date)
    if start_date >= end_date:
        raise InvalidArgument("Start date must be before end date")
    if start_date < today:
        raise InvalidArgument("Start date cannot be in the past")


def validate_not_past(day, today, label='Date'):
    if as_date(day) < today:
        raise InvalidArgument(f"{label} cannot be in the past")


def clean_text(value, label='Text'):
    """Trim free text; blank strings become None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f"{label} must be a string")
    value = value.strip()
    return value or None
