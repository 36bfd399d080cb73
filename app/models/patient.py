from app.extensions import db
from .base import TimestampMixin, isoformat

GENDERS = ('not_specified', 'male', 'female', 'other')


class Patient(db.Model, TimestampMixin):
    __tablename__ = 'patients'

    id = db.Column(db.Integer, primary_key=True)

    # Personal
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20))
    date_of_birth = db.Column(db.Date)
    gender = db.Column(db.String(20), default='not_specified', nullable=False)

    # Address
    address = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    zip_code = db.Column(db.String(20))

    # Insurance
    insurance_provider = db.Column(db.String(100))
    insurance_policy_number = db.Column(db.String(50))

    # Emergency contact
    emergency_contact_name = db.Column(db.String(100))
    emergency_contact_phone = db.Column(db.String(20))
    emergency_contact_relationship = db.Column(db.String(50))

    # Medical
    blood_type = db.Column(db.String(5))
    allergies = db.Column(db.Text)
    medical_notes = db.Column(db.Text)

    is_profile_complete = db.Column(db.Boolean, default=False, nullable=False)

    # Relationships
    appointments = db.relationship('Appointment', backref='patient', lazy='dynamic', passive_deletes='all')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def refresh_profile_completeness(self):
        """A profile is complete once first/last name, phone and date of birth are all present."""
        self.is_profile_complete = bool(
            (self.first_name or '').strip()
            and (self.last_name or '').strip()
            and (self.phone or '').strip()
            and self.date_of_birth is not None
        )
        return self.is_profile_complete

    def age(self, today):
        if self.date_of_birth is None:
            return None
        dob = self.date_of_birth
        years = today.year - dob.year
        if (today.month, today.day) < (dob.month, dob.day):
            years -= 1
        return years

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'date_of_birth': isoformat(self.date_of_birth),
            'gender': self.gender,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'zip_code': self.zip_code,
            'insurance_provider': self.insurance_provider,
            'insurance_policy_number': self.insurance_policy_number,
            'emergency_contact_name': self.emergency_contact_name,
            'emergency_contact_phone': self.emergency_contact_phone,
            'emergency_contact_relationship': self.emergency_contact_relationship,
            'blood_type': self.blood_type,
            'allergies': self.allergies,
            'medical_notes': self.medical_notes,
            'is_profile_complete': self.is_profile_complete,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Patient {self.full_name} ({self.id})>"
