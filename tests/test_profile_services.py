from datetime import date, time

import pytest

from app.scheduling.errors import Conflict, InvalidArgument, NotFound
from app.services import doctor_service, patient_service
from app.services.scheduling import appointment_scheduler, time_slot_manager
from app.utils.validators import normalize_email
from tests.conftest import TOMORROW


# ============================================================================
# PATIENTS
# ============================================================================


def test_register_patient(app):
    patient = patient_service.register_patient('  Grace ', 'Hopper', 'Grace@Navy.MIL', phone=' ')

    assert patient.id
    assert patient.first_name == 'Grace'
    assert patient.email == 'grace@navy.mil'
    assert patient.phone is None

    with pytest.raises(Conflict):
        patient_service.register_patient('Other', 'Person', 'grace@navy.mil')
    with pytest.raises(InvalidArgument):
        patient_service.register_patient('', 'Hopper', 'x@y.z')


def test_profile_completeness(app, patient):
    updated = patient_service.update_profile(
        patient.id, 'Ada', 'Lovelace', phone='555-0199', date_of_birth=date(1990, 12, 10),
        gender='Female', city='London', allergies='  ',
    )

    assert updated.is_profile_complete is True
    assert updated.gender == 'female'
    assert updated.city == 'London'
    assert updated.allergies is None
    assert updated.age(date(2024, 1, 9)) == 33

    cleared = patient_service.update_profile(patient.id, 'Ada', 'Lovelace')
    assert cleared.is_profile_complete is False
    assert cleared.city is None


def test_update_profile_validation(app, patient):
    with pytest.raises(InvalidArgument, match='gender'):
        patient_service.update_profile(patient.id, 'Ada', 'Lovelace', gender='unknown')
    with pytest.raises(InvalidArgument, match='Unknown profile fields'):
        patient_service.update_profile(patient.id, 'Ada', 'Lovelace', favourite_colour='blue')
    with pytest.raises(InvalidArgument, match='future'):
        patient_service.update_profile(patient.id, 'Ada', 'Lovelace', date_of_birth=date(2030, 1, 1))


def test_update_patient_email_must_stay_unique(app, make_patient):
    first, second = make_patient(), make_patient()

    with pytest.raises(Conflict):
        patient_service.update_patient(second.id, 'Ada', 'Lovelace', first.email)
    assert patient_service.update_patient(second.id, 'Ada', 'King', second.email).last_name == 'King'


def test_search_patients(app, make_patient):
    make_patient(first_name='Marie', last_name='Curie', email='marie@radium.test')
    make_patient(first_name='Pierre', last_name='Curie', email='pierre@radium.test')
    make_patient(first_name='Alan', last_name='Turing', email='alan@bletchley.test')

    assert {p.first_name for p in patient_service.search_patients('curie')} == {'Marie', 'Pierre'}
    assert [p.first_name for p in patient_service.search_patients('BLETCHLEY')] == ['Alan']
    assert patient_service.search_patients('   ') == []
    assert len(patient_service.list_patients()) == 3


def test_delete_patient(app, make_patient, doctor):
    idle, booked = make_patient(), make_patient()
    appointment_scheduler().schedule(booked.id, doctor.id, TOMORROW, time(10, 0))

    assert patient_service.delete_patient(idle.id) is True
    assert patient_service.delete_patient(idle.id) is False
    with pytest.raises(Conflict):
        patient_service.delete_patient(booked.id)
    with pytest.raises(NotFound):
        patient_service.get_patient(idle.id)


# ============================================================================
# DOCTORS
# ============================================================================


def test_register_and_list_doctors(app):
    cardio = doctor_service.register_doctor('Helen', 'Taussig', 'helen@heart.test', 'Cardiology',
                                            license_number='CA-1')
    doctor_service.register_doctor('Virginia', 'Apgar', 'virginia@kids.test', 'Pediatrics')
    doctor_service.set_availability(cardio.id, False)

    assert cardio.is_available is False
    assert [d.last_name for d in doctor_service.list_doctors(specialization='cardiology')] == ['Taussig']
    assert [d.last_name for d in doctor_service.list_doctors(available=True)] == ['Apgar']

    with pytest.raises(Conflict):
        doctor_service.register_doctor('Other', 'Doc', 'helen@heart.test', 'Cardiology')
    with pytest.raises(Conflict):
        doctor_service.register_doctor('Other', 'Doc', 'other@heart.test', 'Cardiology', license_number='CA-1')


def test_update_doctor(app, doctor):
    updated = doctor_service.update_doctor(doctor.id, 'Lisa', 'Cuddy', 'lisa@clinic.test', 'Endocrinology',
                                           is_available=False)

    assert updated.full_name == 'Lisa Cuddy'
    assert updated.professional_title == 'Lisa Cuddy - Endocrinology'
    assert updated.is_available is False


def test_delete_doctor_removes_slots(app, make_doctor, patient):
    idle, booked = make_doctor(), make_doctor()
    manager = time_slot_manager()
    manager.bulk_create(idle.id, TOMORROW, time(9, 0), time(10, 0), 30)
    appointment_scheduler().schedule(patient.id, booked.id, TOMORROW, time(10, 0))

    assert doctor_service.delete_doctor(idle.id) is True
    assert manager.list_all() == []
    with pytest.raises(Conflict):
        doctor_service.delete_doctor(booked.id)
    assert doctor_service.delete_doctor(999) is False


# ============================================================================
# EMAIL
# ============================================================================


@pytest.mark.parametrize('address', ['a@.b.c', 'a@b..com', 'a@-x.com', 'two@@signs.test', 'nobody@localhost'])
def test_malformed_emails_are_rejected(app, address):
    with pytest.raises(InvalidArgument, match='Email format is invalid'):
        normalize_email(address)


def test_email_is_normalized(app):
    assert normalize_email('  Grace.Hopper@NAVY.mil ') == 'grace.hopper@navy.mil'
    assert normalize_email('front.desk@clinic.test') == 'front.desk@clinic.test'


def test_reserved_domains_need_test_environment(app):
    app.config['EMAIL_TEST_ENVIRONMENT'] = False

    with pytest.raises(InvalidArgument):
        normalize_email('front.desk@clinic.test')
    assert normalize_email('front.desk@clinic.example') == 'front.desk@clinic.example'
