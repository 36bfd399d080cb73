from typing import List, Optional

from sqlalchemy import func

from app.models import Doctor


class SqlAlchemyDoctorRepository:
    """Doctor store backed by the Flask-SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def get(self, doctor_id: int) -> Optional[Doctor]:
        return self.session.get(Doctor, doctor_id)

    def exists(self, doctor_id: int) -> bool:
        return self.session.query(Doctor.id).filter(Doctor.id == doctor_id).first() is not None

    def lock(self, doctor_id: int) -> Optional[Doctor]:
        # SELECT ... FOR UPDATE; SQLite has no row locks and ignores it
        return (
            self.session.query(Doctor)
            .filter(Doctor.id == doctor_id)
            .with_for_update()
            .first()
        )

    def get_by_email(self, email: str) -> Optional[Doctor]:
        return self.session.query(Doctor).filter(Doctor.email == email.strip().lower()).first()

    def get_by_license(self, license_number: str) -> Optional[Doctor]:
        return self.session.query(Doctor).filter(Doctor.license_number == license_number).first()

    def list(self, specialization: Optional[str] = None, available: Optional[bool] = None) -> List[Doctor]:
        query = self.session.query(Doctor)
        if specialization:
            query = query.filter(func.lower(Doctor.specialization) == specialization.strip().lower())
        if available is not None:
            query = query.filter(Doctor.is_available == available)
        return query.order_by(Doctor.last_name, Doctor.first_name).all()

    def has_appointments(self, doctor_id: int) -> bool:
        doctor = self.get(doctor_id)
        return doctor is not None and doctor.appointments.first() is not None

    def add(self, doctor: Doctor) -> Doctor:
        self.session.add(doctor)
        self.session.commit()
        return doctor

    def save(self, doctor: Doctor) -> Doctor:
        self.session.commit()
        return doctor

    def delete(self, doctor: Doctor) -> None:
        self.session.delete(doctor)
        self.session.commit()
