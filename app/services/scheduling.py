"""
Per-request wiring of the scheduling engine.

Each call builds fresh engine objects on top of the current
Flask-SQLAlchemy session; nothing is cached between requests.
"""
from flask import current_app

from app.extensions import db
from app.repositories import (
    SqlAlchemyAppointmentRepository,
    SqlAlchemyDoctorRepository,
    SqlAlchemyPatientRepository,
    SqlAlchemyTimeSlotRepository,
)
from app.scheduling.appointments import AppointmentScheduler
from app.scheduling.availability import AvailabilityResolver
from app.scheduling.clock import utcnow
from app.scheduling.time_slots import TimeSlotManager


def get_clock():
    """Clock used by the engine; SCHEDULING_CLOCK lets tests pin "now"."""
    return current_app.config.get('SCHEDULING_CLOCK') or utcnow


def availability_resolver(session=None, clock=None) -> AvailabilityResolver:
    session = session or db.session
    config = current_app.config
    return AvailabilityResolver(
        SqlAlchemyDoctorRepository(session),
        SqlAlchemyAppointmentRepository(session),
        SqlAlchemyTimeSlotRepository(session),
        clock=clock or get_clock(),
        start_hour=config['SLOT_DAY_START_HOUR'],
        end_hour=config['SLOT_DAY_END_HOUR'],
        slot_minutes=config['SLOT_DEFAULT_MINUTES'],
        exact_start_match=config['AVAILABILITY_EXACT_START_MATCH'],
    )


def appointment_scheduler(session=None, clock=None) -> AppointmentScheduler:
    session = session or db.session
    return AppointmentScheduler(
        SqlAlchemyPatientRepository(session),
        SqlAlchemyDoctorRepository(session),
        SqlAlchemyAppointmentRepository(session),
        clock=clock or get_clock(),
    )


def time_slot_manager(session=None, clock=None) -> TimeSlotManager:
    session = session or db.session
    clock = clock or get_clock()
    return TimeSlotManager(
        SqlAlchemyDoctorRepository(session),
        SqlAlchemyTimeSlotRepository(session),
        resolver=availability_resolver(session, clock),
        clock=clock,
    )
