"""
Demo seed data for local development (flask seed-demo).
"""
import logging

from app.extensions import db
from app.models import Doctor, User
from app.scheduling.clock import utcnow

logger = logging.getLogger(__name__)

DEMO_DOCTORS = [
    {
        "first_name": "Sarah",
        "last_name": "Johnson",
        "email": "sarah.johnson@clinic.example",
        "phone": "+1-555-0101",
        "specialization": "General Practice",
        "license_number": "GP-10021",
    },
    {
        "first_name": "Michael",
        "last_name": "Chen",
        "email": "michael.chen@clinic.example",
        "phone": "+1-555-0102",
        "specialization": "Cardiology",
        "license_number": "CA-20417",
    },
    {
        "first_name": "Amira",
        "last_name": "Haddad",
        "email": "amira.haddad@clinic.example",
        "phone": "+1-555-0103",
        "specialization": "Pediatrics",
        "license_number": "PD-30988",
    },
]

DEMO_ADMIN = {
    "email": "admin@clinic.example",
    "first_name": "Clinic",
    "last_name": "Administrator",
    "role": "admin",
}

DEMO_RECEPTIONIST = {
    "email": "reception@clinic.example",
    "first_name": "Front",
    "last_name": "Desk",
    "role": "receptionist",
}


def _ensure_user(data, password, **links):
    user = User.query.filter_by(email=data["email"]).first()
    if user is not None:
        return user, False
    user = User(is_active=True, created_at=utcnow(), **data, **links)
    user.set_password(password)
    db.session.add(user)
    return user, True


def seed_demo_data(password: str = "ChangeMe123!") -> dict:
    """
    Create an admin, a receptionist and a few doctors (each with a doctor
    login) unless they already exist. Returns the number of rows created.
    """
    created = {"users": 0, "doctors": 0}
    try:
        for data in (DEMO_ADMIN, DEMO_RECEPTIONIST):
            _, is_new = _ensure_user(data, password)
            created["users"] += int(is_new)

        for data in DEMO_DOCTORS:
            doctor = Doctor.query.filter_by(email=data["email"]).first()
            if doctor is None:
                doctor = Doctor(is_available=True, created_at=utcnow(), **data)
                db.session.add(doctor)
                db.session.flush()
                created["doctors"] += 1
            _, is_new = _ensure_user(
                {
                    "email": data["email"],
                    "first_name": data["first_name"],
                    "last_name": data["last_name"],
                    "phone": data["phone"],
                    "role": "doctor",
                },
                password,
                doctor_id=doctor.id,
            )
            created["users"] += int(is_new)

        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.error("Demo seeding failed", exc_info=True)
        raise

    logger.info("Seeded %d users and %d doctors", created["users"], created["doctors"])
    return created
