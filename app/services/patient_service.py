"""
Patient Service
Registration, profile maintenance and search for patients
"""
import logging
from datetime import date
from typing import List, Optional

from app.extensions import db
from app.models import Patient
from app.models.patient import GENDERS
from app.repositories import SqlAlchemyPatientRepository
from app.scheduling.errors import Conflict, InvalidArgument, NotFound
from app.scheduling.validation import clean_text, require_id
from app.services.scheduling import get_clock
from app.utils.validators import normalize_email, require_text

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'address', 'city', 'state', 'zip_code',
    'insurance_provider', 'insurance_policy_number',
    'emergency_contact_name', 'emergency_contact_phone', 'emergency_contact_relationship',
    'blood_type', 'allergies', 'medical_notes',
)


def _repository() -> SqlAlchemyPatientRepository:
    return SqlAlchemyPatientRepository(db.session)


def get_patient(patient_id: int) -> Patient:
    require_id(patient_id, 'Patient')
    patient = _repository().get(patient_id)
    if patient is None:
        raise NotFound(f"Patient with ID {patient_id} not found")
    return patient


def get_patient_by_email(email: str) -> Optional[Patient]:
    return _repository().get_by_email(require_text(email, 'Email'))


def list_patients(search: Optional[str] = None) -> List[Patient]:
    if search and search.strip():
        return search_patients(search)
    return _repository().list_all()


def search_patients(term: str) -> List[Patient]:
    """Case-insensitive search on first name, last name and email; blank terms match nothing."""
    if not term or not term.strip():
        return []
    return _repository().search(term)


def register_patient(
    first_name: str,
    last_name: str,
    email: str,
    phone: Optional[str] = None,
    date_of_birth: Optional[date] = None,
) -> Patient:
    """
    Create a patient record

    Args:
        first_name: Given name (required)
        last_name: Family name (required)
        email: Unique e-mail address, stored lower-cased
        phone: Contact number (optional)
        date_of_birth: Date of birth (optional)

    Returns:
        Patient: Created patient

    Raises:
        InvalidArgument: Missing names or malformed email
        Conflict: Email already registered
    """
    first_name = require_text(first_name, 'First name')
    last_name = require_text(last_name, 'Last name')
    email = normalize_email(email)

    repository = _repository()
    if repository.get_by_email(email) is not None:
        raise Conflict(f"A patient with email {email} already exists")

    patient = Patient(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=clean_text(phone, 'Phone'),
        date_of_birth=date_of_birth,
        created_at=get_clock()(),
    )
    patient.refresh_profile_completeness()
    repository.add(patient)
    logger.info("Patient registered: %s (%s)", patient.id, email)
    return patient


def update_patient(patient_id: int, first_name: str, last_name: str, email: str,
                   phone: Optional[str] = None) -> Patient:
    """Update the basic contact details of a patient."""
    first_name = require_text(first_name, 'First name')
    last_name = require_text(last_name, 'Last name')
    email = normalize_email(email)
    patient = get_patient(patient_id)

    repository = _repository()
    existing = repository.get_by_email(email)
    if existing is not None and existing.id != patient.id:
        raise Conflict(f"Email {email} is already in use")

    patient.first_name = first_name
    patient.last_name = last_name
    patient.email = email
    patient.phone = clean_text(phone, 'Phone')
    patient.updated_at = get_clock()()
    patient.refresh_profile_completeness()
    repository.save(patient)
    logger.info("Patient %s updated", patient.id)
    return patient


def update_profile(patient_id: int, first_name: str, last_name: str, phone: Optional[str] = None,
                   date_of_birth: Optional[date] = None, gender: str = 'not_specified',
                   **profile) -> Patient:
    """
    Replace the extended profile of a patient and recompute completeness.

    ``profile`` accepts the address, insurance, emergency contact and
    medical fields listed in PROFILE_FIELDS; omitted fields are cleared.
    """
    first_name = require_text(first_name, 'First name')
    last_name = require_text(last_name, 'Last name')
    gender = (gender or 'not_specified').strip().lower()
    if gender not in GENDERS:
        raise InvalidArgument(f"Invalid gender. Must be one of: {', '.join(GENDERS)}")
    unknown = set(profile) - set(PROFILE_FIELDS)
    if unknown:
        raise InvalidArgument(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    now = get_clock()()
    if date_of_birth is not None and date_of_birth > now.date():
        raise InvalidArgument("Date of birth cannot be in the future")

    patient = get_patient(patient_id)
    patient.first_name = first_name
    patient.last_name = last_name
    patient.phone = clean_text(phone, 'Phone')
    patient.date_of_birth = date_of_birth
    patient.gender = gender
    for field in PROFILE_FIELDS:
        setattr(patient, field, clean_text(profile.get(field), field))
    patient.updated_at = now
    patient.refresh_profile_completeness()
    _repository().save(patient)
    logger.info("Patient %s profile updated (complete=%s)", patient.id, patient.is_profile_complete)
    return patient


def delete_patient(patient_id: int) -> bool:
    """Hard delete. Patients referenced by appointments cannot be removed."""
    require_id(patient_id, 'Patient')
    repository = _repository()
    patient = repository.get(patient_id)
    if patient is None:
        return False
    if patient.appointments.first() is not None:
        raise Conflict("Cannot delete a patient who has appointments")
    repository.delete(patient)
    logger.info("Patient %s deleted", patient_id)
    return True
