from typing import List, Optional

from sqlalchemy import func, or_

from app.models import Patient


class SqlAlchemyPatientRepository:
    """Patient store backed by the Flask-SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def get(self, patient_id: int) -> Optional[Patient]:
        return self.session.get(Patient, patient_id)

    def exists(self, patient_id: int) -> bool:
        return self.session.query(Patient.id).filter(Patient.id == patient_id).first() is not None

    def get_by_email(self, email: str) -> Optional[Patient]:
        return (
            self.session.query(Patient)
            .filter(func.lower(Patient.email) == email.strip().lower())
            .first()
        )

    def list_all(self) -> List[Patient]:
        return self.session.query(Patient).order_by(Patient.last_name, Patient.first_name).all()

    def search(self, term: str) -> List[Patient]:
        """Case-insensitive match on first name, last name or email."""
        pattern = f"%{term.strip().lower()}%"
        return (
            self.session.query(Patient)
            .filter(or_(
                func.lower(Patient.first_name).like(pattern),
                func.lower(Patient.last_name).like(pattern),
                func.lower(Patient.email).like(pattern),
            ))
            .order_by(Patient.last_name, Patient.first_name)
            .all()
        )

    def add(self, patient: Patient) -> Patient:
        self.session.add(patient)
        self.session.commit()
        return patient

    def save(self, patient: Patient) -> Patient:
        self.session.commit()
        return patient

    def delete(self, patient: Patient) -> None:
        self.session.delete(patient)
        self.session.commit()
