from datetime import timedelta

from app.extensions import db
from app.scheduling.clock import combine
from app.scheduling.status import AppointmentStatus
from .base import TimestampMixin, isoformat


class Appointment(db.Model, TimestampMixin):
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(
        db.Integer, db.ForeignKey('patients.id', ondelete='RESTRICT'), nullable=False, index=True
    )
    doctor_id = db.Column(
        db.Integer, db.ForeignKey('doctors.id', ondelete='RESTRICT'), nullable=False, index=True
    )

    # Date and time-of-day are stored separately; together they form the effective instant
    appointment_date = db.Column(db.Date, nullable=False, index=True)
    appointment_time = db.Column(db.Time, nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False, default=30)

    status = db.Column(
        db.Enum(
            AppointmentStatus,
            name='appointment_status',
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
        index=True,
    )
    reason = db.Column(db.String(500))
    notes = db.Column(db.Text)

    # Cancellation
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancellation_reason = db.Column(db.String(500))

    __table_args__ = (
        db.Index('ix_appointments_doctor_date', 'doctor_id', 'appointment_date'),
    )

    @property
    def starts_at(self):
        """Effective appointment instant (UTC)."""
        return combine(self.appointment_date, self.appointment_time)

    @property
    def ends_at(self):
        return self.starts_at + timedelta(minutes=self.duration_minutes)

    @property
    def status_display(self):
        return AppointmentStatus(self.status).display

    def to_dict(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'doctor_id': self.doctor_id,
            'appointment_date': isoformat(self.appointment_date),
            'appointment_time': self.appointment_time.strftime('%H:%M') if self.appointment_time else None,
            'starts_at': isoformat(self.starts_at),
            'ends_at': isoformat(self.ends_at),
            'duration_minutes': self.duration_minutes,
            'status': AppointmentStatus(self.status).value,
            'status_display': self.status_display,
            'reason': self.reason,
            'notes': self.notes,
            'cancelled_at': isoformat(self.cancelled_at),
            'cancellation_reason': self.cancellation_reason,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Appointment {self.id} patient={self.patient_id} doctor={self.doctor_id} at {self.starts_at}>"
