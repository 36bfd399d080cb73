from app.extensions import db
from app.scheduling.conflicts import overlaps
from .base import TimestampMixin, isoformat


class TimeSlot(db.Model, TimestampMixin):
    """
    A bookable (or blocked) interval for one doctor.

    Slots never reference the appointment that consumes them; bookings are
    matched by time-interval comparison.
    """
    __tablename__ = 'time_slots'

    id = db.Column(db.Integer, primary_key=True)
    doctor_id = db.Column(
        db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False, index=True
    )

    start_time = db.Column(db.DateTime, nullable=False, index=True)  # UTC
    end_time = db.Column(db.DateTime, nullable=False)  # UTC

    is_available = db.Column(db.Boolean, default=True, nullable=False)
    is_blocked = db.Column(db.Boolean, default=False, nullable=False)
    block_reason = db.Column(db.String(255))

    __table_args__ = (
        db.Index('ix_time_slots_doctor_start', 'doctor_id', 'start_time'),
    )

    @property
    def starts_at(self):
        return self.start_time

    @property
    def ends_at(self):
        return self.end_time

    @property
    def duration_minutes(self):
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def is_usable(self, now):
        return self.is_available and not self.is_blocked and self.start_time > now

    def overlaps_with(self, start, end):
        return overlaps(self.start_time, self.end_time, start, end)

    def to_dict(self):
        return {
            'id': self.id,
            'doctor_id': self.doctor_id,
            'start_time': isoformat(self.start_time),
            'end_time': isoformat(self.end_time),
            'duration_minutes': self.duration_minutes,
            'is_available': self.is_available,
            'is_blocked': self.is_blocked,
            'block_reason': self.block_reason,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<TimeSlot doctor={self.doctor_id} {self.start_time} - {self.end_time}>"
