from datetime import date, datetime, time

import pytest

from app.extensions import db
from app.models import TimeSlot
from app.scheduling.errors import InvalidArgument, NotFound
from app.services.scheduling import appointment_scheduler, availability_resolver, time_slot_manager
from tests.conftest import TODAY, TOMORROW


def starts(slots):
    return [slot.start_time.strftime('%H:%M') for slot in slots]


def test_generated_grid_when_no_persisted_slots(app, doctor):
    slots = availability_resolver().resolve(doctor.id, TOMORROW)

    assert len(slots) == 16
    assert slots[0].start_time == datetime(2024, 1, 10, 9, 0)
    assert {slot.source for slot in slots} == {'generated'}
    assert all(slot.slot_id is None for slot in slots)


def test_today_only_lists_future_slots(app, doctor):
    slots = availability_resolver().resolve(doctor.id, TODAY)

    assert starts(slots)[0] == '12:30'
    assert len(slots) == 9


def test_booked_interval_is_excluded_on_overlap(app, patient, doctor):
    appointment_scheduler().schedule(patient.id, doctor.id, TOMORROW, time(10, 0), 45)

    available = starts(availability_resolver().resolve(doctor.id, TOMORROW))

    assert '10:00' not in available
    assert '10:30' not in available
    assert '11:00' in available
    assert len(available) == 14


def test_exact_start_match_only_drops_same_start(app, patient, doctor):
    app.config['AVAILABILITY_EXACT_START_MATCH'] = True
    appointment_scheduler().schedule(patient.id, doctor.id, TOMORROW, time(10, 0), 45)

    available = starts(availability_resolver().resolve(doctor.id, TOMORROW))

    assert '10:00' not in available
    assert '10:30' in available
    assert len(available) == 15


def test_cancelled_bookings_do_not_block(app, patient, doctor):
    scheduler = appointment_scheduler()
    appointment = scheduler.schedule(patient.id, doctor.id, TOMORROW, time(10, 0), 30)
    scheduler.cancel(appointment.id)

    assert '10:00' in starts(availability_resolver().resolve(doctor.id, TOMORROW))


def test_persisted_slots_replace_the_grid(app, doctor):
    manager = time_slot_manager()
    open_slot = manager.create(doctor.id, datetime(2024, 1, 10, 14, 0), datetime(2024, 1, 10, 14, 45))
    blocked = manager.create(doctor.id, datetime(2024, 1, 10, 15, 0), datetime(2024, 1, 10, 15, 30))
    manager.block(blocked.id, 'Staff meeting')

    slots = availability_resolver().resolve(doctor.id, TOMORROW)

    assert [(s.slot_id, s.source) for s in slots] == [(open_slot.id, 'persisted')]
    assert slots[0].duration_minutes == 45


def test_range_is_inclusive_and_mixes_sources(app, doctor):
    time_slot_manager().create(doctor.id, datetime(2024, 1, 11, 9, 0), datetime(2024, 1, 11, 10, 0))

    slots = availability_resolver().resolve(doctor.id, TOMORROW, date(2024, 1, 11))

    assert len(slots) == 17
    assert slots[-1].source == 'persisted'
    assert slots[-1].start_time == datetime(2024, 1, 11, 9, 0)


def test_unavailable_doctor_has_no_availability(app, make_doctor):
    doctor = make_doctor(is_available=False)

    assert availability_resolver().resolve(doctor.id, TOMORROW) == []


def test_invalid_queries(app, doctor):
    resolver = availability_resolver()

    with pytest.raises(InvalidArgument):
        resolver.resolve(0, TOMORROW)
    with pytest.raises(InvalidArgument):
        resolver.resolve(doctor.id, date(2024, 1, 8))
    with pytest.raises(InvalidArgument):
        resolver.resolve(doctor.id, TOMORROW, TOMORROW)
    with pytest.raises(InvalidArgument):
        resolver.resolve(doctor.id, date(2024, 1, 8), TOMORROW)
    with pytest.raises(NotFound):
        resolver.resolve(999, TOMORROW)


def test_is_slot_available(app, patient, doctor):
    resolver = availability_resolver()
    appointment_scheduler().schedule(patient.id, doctor.id, TOMORROW, time(10, 0), 30)

    assert resolver.is_slot_available(doctor.id, datetime(2024, 1, 10, 11, 0), datetime(2024, 1, 10, 11, 30))
    assert not resolver.is_slot_available(doctor.id, datetime(2024, 1, 10, 10, 15), datetime(2024, 1, 10, 10, 45))
    # Outside working hours
    assert not resolver.is_slot_available(doctor.id, datetime(2024, 1, 10, 18, 0), datetime(2024, 1, 10, 18, 30))
    # In the past
    assert not resolver.is_slot_available(doctor.id, datetime(2024, 1, 9, 10, 0), datetime(2024, 1, 9, 10, 30))


def test_is_slot_available_inside_persisted_slot(app, doctor):
    time_slot_manager().create(doctor.id, datetime(2024, 1, 10, 14, 0), datetime(2024, 1, 10, 15, 0))
    resolver = availability_resolver()

    assert resolver.is_slot_available(doctor.id, datetime(2024, 1, 10, 14, 15), datetime(2024, 1, 10, 14, 45))
    assert not resolver.is_slot_available(doctor.id, datetime(2024, 1, 10, 9, 0), datetime(2024, 1, 10, 9, 30))


def test_booking_from_previous_evening_blocks_next_morning(app, patient, doctor):
    appointment_scheduler().schedule(patient.id, doctor.id, TOMORROW, time(23, 30), 180)
    db.session.add_all([
        TimeSlot(doctor_id=doctor.id, start_time=datetime(2024, 1, 11, 1, 0), end_time=datetime(2024, 1, 11, 1, 30)),
        TimeSlot(doctor_id=doctor.id, start_time=datetime(2024, 1, 11, 3, 0), end_time=datetime(2024, 1, 11, 3, 30)),
    ])
    db.session.commit()
    resolver = availability_resolver()

    assert starts(resolver.resolve(doctor.id, date(2024, 1, 11))) == ['03:00']
    assert resolver.is_slot_available(doctor.id, datetime(2024, 1, 11, 1, 0), datetime(2024, 1, 11, 1, 30)) is False
    assert resolver.is_slot_available(doctor.id, datetime(2024, 1, 11, 3, 0), datetime(2024, 1, 11, 3, 30)) is True
