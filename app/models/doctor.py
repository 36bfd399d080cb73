from app.extensions import db
from .base import TimestampMixin, isoformat


class Doctor(db.Model, TimestampMixin):
    __tablename__ = 'doctors'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)  # stored lower-cased
    phone = db.Column(db.String(20))
    specialization = db.Column(db.String(100), nullable=False, index=True)
    license_number = db.Column(db.String(50), unique=True, nullable=True)

    # Doctors flagged unavailable cannot receive new appointments
    is_available = db.Column(db.Boolean, default=True, nullable=False, index=True)

    # Relationships
    time_slots = db.relationship(
        'TimeSlot', backref='doctor', lazy=True,
        cascade='all, delete-orphan',
    )
    appointments = db.relationship('Appointment', backref='doctor', lazy='dynamic', passive_deletes='all')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def professional_title(self):
        return f"{self.full_name} - {self.specialization}"

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'professional_title': self.professional_title,
            'email': self.email,
            'phone': self.phone,
            'specialization': self.specialization,
            'license_number': self.license_number,
            'is_available': self.is_available,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Doctor {self.full_name} ({self.specialization})>"
