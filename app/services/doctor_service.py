"""
Doctor Service
Registration, profile updates and the availability toggle
"""
import logging
from typing import List, Optional

from app.extensions import db
from app.models import Doctor
from app.repositories import SqlAlchemyDoctorRepository
from app.scheduling.errors import Conflict, NotFound
from app.scheduling.validation import clean_text, require_id
from app.services.scheduling import get_clock
from app.utils.validators import normalize_email, require_text

logger = logging.getLogger(__name__)


def _repository() -> SqlAlchemyDoctorRepository:
    return SqlAlchemyDoctorRepository(db.session)


def get_doctor(doctor_id: int) -> Doctor:
    require_id(doctor_id, 'Doctor')
    doctor = _repository().get(doctor_id)
    if doctor is None:
        raise NotFound(f"Doctor with ID {doctor_id} not found")
    return doctor


def list_doctors(specialization: Optional[str] = None, available: Optional[bool] = None) -> List[Doctor]:
    return _repository().list(specialization=specialization, available=available)


def _ensure_unique(repository, email: str, license_number: Optional[str], doctor_id: Optional[int] = None):
    existing = repository.get_by_email(email)
    if existing is not None and existing.id != doctor_id:
        raise Conflict(f"Doctor with email {email} already exists")
    if license_number:
        existing = repository.get_by_license(license_number)
        if existing is not None and existing.id != doctor_id:
            raise Conflict(f"Doctor with license number {license_number} already exists")


def register_doctor(
    first_name: str,
    last_name: str,
    email: str,
    specialization: str,
    phone: Optional[str] = None,
    license_number: Optional[str] = None,
) -> Doctor:
    """
    Register a doctor; new doctors start out available.

    Raises:
        InvalidArgument: Missing names, specialization, or malformed email
        Conflict: Email or license number already registered
    """
    first_name = require_text(first_name, 'First name')
    last_name = require_text(last_name, 'Last name')
    specialization = require_text(specialization, 'Specialization')
    email = normalize_email(email)
    license_number = clean_text(license_number, 'License number')

    repository = _repository()
    _ensure_unique(repository, email, license_number)

    doctor = Doctor(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=clean_text(phone, 'Phone'),
        specialization=specialization,
        license_number=license_number,
        is_available=True,
        created_at=get_clock()(),
    )
    repository.add(doctor)
    logger.info("Doctor registered: %s (%s)", doctor.id, doctor.professional_title)
    return doctor


def update_doctor(doctor_id: int, first_name: str, last_name: str, email: str, specialization: str,
                  phone: Optional[str] = None, license_number: Optional[str] = None,
                  is_available: Optional[bool] = None) -> Doctor:
    first_name = require_text(first_name, 'First name')
    last_name = require_text(last_name, 'Last name')
    specialization = require_text(specialization, 'Specialization')
    email = normalize_email(email)
    license_number = clean_text(license_number, 'License number')
    doctor = get_doctor(doctor_id)

    repository = _repository()
    _ensure_unique(repository, email, license_number, doctor_id=doctor.id)

    doctor.first_name = first_name
    doctor.last_name = last_name
    doctor.email = email
    doctor.phone = clean_text(phone, 'Phone')
    doctor.specialization = specialization
    doctor.license_number = license_number
    if is_available is not None:
        doctor.is_available = bool(is_available)
    doctor.updated_at = get_clock()()
    repository.save(doctor)
    logger.info("Doctor %s updated", doctor.id)
    return doctor


def set_availability(doctor_id: int, is_available: bool) -> Doctor:
    doctor = get_doctor(doctor_id)
    doctor.is_available = bool(is_available)
    doctor.updated_at = get_clock()()
    _repository().save(doctor)
    logger.info("Doctor %s availability set to %s", doctor.id, doctor.is_available)
    return doctor


def delete_doctor(doctor_id: int) -> bool:
    """Delete a doctor and their time slots. Doctors with appointments cannot be removed."""
    require_id(doctor_id, 'Doctor')
    repository = _repository()
    doctor = repository.get(doctor_id)
    if doctor is None:
        return False
    if repository.has_appointments(doctor_id):
        raise Conflict("Cannot delete a doctor who has appointments")
    repository.delete(doctor)
    logger.info("Doctor %s deleted", doctor_id)
    return True
