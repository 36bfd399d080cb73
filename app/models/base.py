from app.extensions import db
from app.scheduling.clock import utcnow


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=True, onupdate=utcnow)


def isoformat(value):
    """ISO string for a date/time/datetime column, None when unset."""
    return value.isoformat() if value is not None else None
