from app.extensions import db, bcrypt
from .base import TimestampMixin, isoformat

# Roles: 'admin', 'doctor', 'receptionist', 'patient'
ROLES = ('admin', 'doctor', 'receptionist', 'patient')


class User(db.Model, TimestampMixin):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20))

    role = db.Column(db.String(20), nullable=False, default='patient', index=True)

    # Profile links; a patient user points at its Patient row, a doctor user at its Doctor row
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='SET NULL'), nullable=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='SET NULL'), nullable=True)

    # Status
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Refresh tokens are single use; only the latest issued JTI is accepted
    refresh_token_jti = db.Column(db.String(64), nullable=True, index=True)
    refresh_token_expires_at = db.Column(db.DateTime, nullable=True)

    # Last login tracking
    last_login_at = db.Column(db.DateTime, nullable=True)
    login_count = db.Column(db.Integer, default=0, nullable=False)

    patient = db.relationship('Patient', foreign_keys=[patient_id])
    doctor = db.relationship('Doctor', foreign_keys=[doctor_id])

    def set_password(self, password):
        """Hash and set password"""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if provided password matches hash"""
        return bcrypt.check_password_hash(self.password_hash, password)

    def has_any_role(self, *role_names):
        return self.role in role_names

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'phone': self.phone,
            'full_name': self.full_name,
            'role': self.role,
            'patient_id': self.patient_id,
            'doctor_id': self.doctor_id,
            'is_active': self.is_active,
            'last_login_at': isoformat(self.last_login_at),
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<User {self.email} - {self.role}>"
