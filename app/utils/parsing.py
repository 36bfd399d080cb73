"""
Request parsing helpers: turn query-string and JSON values into
date/time/datetime/bool values, raising InvalidArgument on bad input.
"""
from datetime import date, datetime, time, timezone

from app.scheduling.errors import InvalidArgument


def parse_date(value, field='date', required=True):
    """Parse YYYY-MM-DD (or a full ISO datetime) into a date."""
    if value is None or value == '':
        if required:
            raise InvalidArgument(f'Field "{field}" is required')
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        raise InvalidArgument(f'Invalid {field}. Use YYYY-MM-DD')


def parse_time(value, field='time', required=True):
    """Parse HH:MM or HH:MM:SS into a time."""
    if value is None or value == '':
        if required:
            raise InvalidArgument(f'Field "{field}" is required')
        return None
    if isinstance(value, time):
        return value
    for fmt in ('%H:%M', '%H:%M:%S'):
        try:
            return datetime.strptime(str(value), fmt).time()
        except ValueError:
            continue
    raise InvalidArgument(f'Invalid {field}. Use HH:MM')


def parse_datetime(value, field='datetime', required=True):
    """Parse an ISO 8601 datetime into a naive UTC datetime."""
    if value is None or value == '':
        if required:
            raise InvalidArgument(f'Field "{field}" is required')
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidArgument(f'Invalid {field}. Use ISO 8601, e.g. 2024-01-10T09:00:00')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_bool(value, field='value', default=None):
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('1', 'true', 'yes', 'on'):
        return True
    if text in ('0', 'false', 'no', 'off'):
        return False
    raise InvalidArgument(f'Invalid {field}. Use true or false')


def parse_int(value, field='value', required=True):
    if value is None or value == '':
        if required:
            raise InvalidArgument(f'Field "{field}" is required')
        return None
    if isinstance(value, bool):
        raise InvalidArgument(f'Invalid {field}. Must be an integer')
    if isinstance(value, float) and not value.is_integer():
        raise InvalidArgument(f'Invalid {field}. Must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f'Invalid {field}. Must be an integer')


def require_json():
    """JSON body of the current request; a missing or non-object body is a 400."""
    from flask import request

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgument('Request body must be JSON')
    return data
