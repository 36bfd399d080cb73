"""
Appointment lifecycle.

AppointmentScheduler is the only place where appointments change state.
Every mutation that can create a double booking takes the doctor row lock
first, so the conflict check and the write share one transaction.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from .clock import as_date, as_time, combine, utcnow
from .conflicts import has_conflict
from .errors import Conflict, IllegalTransition, InvalidArgument, NotFound
from .status import AppointmentStatus
from .validation import clean_text, require_duration, require_id

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 30


def coerce_status(value) -> AppointmentStatus:
    """Accept an AppointmentStatus or its string value."""
    if isinstance(value, AppointmentStatus):
        return value
    try:
        return AppointmentStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidArgument(
            f"Invalid status '{value}'. Must be one of: {', '.join(AppointmentStatus.values())}"
        )


class AppointmentScheduler:
    """
    Schedule appointments and drive them through their states.

    Args:
        patients: PatientRepository
        doctors: DoctorRepository
        appointments: AppointmentRepository
        clock: Callable returning the current naive UTC datetime
    """

    def __init__(self, patients, doctors, appointments, clock=utcnow):
        self.patients = patients
        self.doctors = doctors
        self.appointments = appointments
        self.clock = clock

    def get(self, appointment_id: int):
        require_id(appointment_id, 'Appointment')
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            raise NotFound(f"Appointment with ID {appointment_id} not found")
        return appointment

    def list_all(self) -> List:
        return self.appointments.list_all()

    def list_for_patient(self, patient_id: int) -> List:
        require_id(patient_id, 'Patient')
        if not self.patients.exists(patient_id):
            raise NotFound(f"Patient with ID {patient_id} not found")
        return self.appointments.list_for_patient(patient_id)

    def list_for_doctor(self, doctor_id: int) -> List:
        require_id(doctor_id, 'Doctor')
        if not self.doctors.exists(doctor_id):
            raise NotFound(f"Doctor with ID {doctor_id} not found")
        return self.appointments.list_for_doctor(doctor_id)

    def list_between(self, start_date, end_date) -> List:
        if start_date is None or end_date is None:
            raise InvalidArgument("Start date and end date are required")
        if as_date(start_date) > as_date(end_date):
            raise InvalidArgument("Start date must be before end date")
        return self.appointments.list_between(as_date(start_date), as_date(end_date))

    def list_upcoming(self, doctor_id: Optional[int] = None, patient_id: Optional[int] = None) -> List:
        if doctor_id is not None:
            require_id(doctor_id, 'Doctor')
        if patient_id is not None:
            require_id(patient_id, 'Patient')
        return self.appointments.list_upcoming(self.clock(), doctor_id=doctor_id, patient_id=patient_id)

    def schedule(self, patient_id: int, doctor_id: int, appointment_date, appointment_time,
                 duration_minutes: int = DEFAULT_DURATION_MINUTES,
                 reason: Optional[str] = None, notes: Optional[str] = None):
        """
        Book a new appointment in the scheduled state.

        Raises:
            InvalidArgument: bad ids or duration, missing date/time, or an instant not in the future
            NotFound: patient or doctor does not exist
            Conflict: doctor not available, or overlap with another booking of the doctor
        """
        require_id(patient_id, 'Patient')
        require_id(doctor_id, 'Doctor')
        require_duration(duration_minutes)
        if appointment_date is None or appointment_time is None:
            raise InvalidArgument("Appointment date and time are required")
        reason, notes = clean_text(reason, 'Reason'), clean_text(notes, 'Notes')

        if not self.patients.exists(patient_id):
            raise NotFound(f"Patient with ID {patient_id} not found")
        doctor = self.doctors.lock(doctor_id)
        if doctor is None:
            raise NotFound(f"Doctor with ID {doctor_id} not found")
        if not doctor.is_available:
            logger.warning("Rejected booking: doctor %s is not available", doctor_id)
            raise Conflict("Doctor is not available")

        day, time_of_day = as_date(appointment_date), as_time(appointment_time)
        starts_at = combine(day, time_of_day)
        now = self.clock()
        if starts_at <= now:
            raise InvalidArgument("Appointment date and time must be in the future")

        self._ensure_no_conflict(doctor_id, starts_at, duration_minutes)

        appointment = self.appointments.create(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=day,
            appointment_time=time_of_day,
            duration_minutes=duration_minutes,
            status=AppointmentStatus.SCHEDULED,
            reason=reason,
            notes=notes,
            created_at=now,
        )
        logger.info("Appointment %s scheduled: patient %s with doctor %s at %s (%d min)",
                    appointment.id, patient_id, doctor_id, starts_at, duration_minutes)
        return appointment

    def update(self, appointment_id: int, appointment_date, appointment_time, duration_minutes: int,
               status, reason: Optional[str] = None, notes: Optional[str] = None):
        """
        Replace date, time, duration, status, reason and notes of an appointment.

        A completed appointment may be recorded at a past instant. Cancelling
        and restoring go through cancel() and restore().
        """
        require_id(appointment_id, 'Appointment')
        require_duration(duration_minutes)
        if appointment_date is None or appointment_time is None:
            raise InvalidArgument("Appointment date and time are required")
        status = coerce_status(status)
        reason, notes = clean_text(reason, 'Reason'), clean_text(notes, 'Notes')

        appointment = self.get(appointment_id)
        if appointment.status == AppointmentStatus.CANCELLED:
            raise IllegalTransition("Cannot update a cancelled appointment")
        if status == AppointmentStatus.CANCELLED:
            raise InvalidArgument("Use the cancel operation to cancel an appointment")

        day, time_of_day = as_date(appointment_date), as_time(appointment_time)
        starts_at = combine(day, time_of_day)
        now = self.clock()
        if starts_at <= now and status != AppointmentStatus.COMPLETED:
            raise InvalidArgument("Appointment date and time must be in the future")

        self.doctors.lock(appointment.doctor_id)
        self._ensure_no_conflict(appointment.doctor_id, starts_at, duration_minutes,
                                 exclude_id=appointment.id)

        previous = appointment.status
        appointment.appointment_date = day
        appointment.appointment_time = time_of_day
        appointment.duration_minutes = duration_minutes
        appointment.status = status
        appointment.reason = reason
        appointment.notes = notes
        appointment.updated_at = now
        self.appointments.save(appointment)
        logger.info("Appointment %s updated: %s -> %s at %s", appointment.id,
                    AppointmentStatus(previous).value, status.value, starts_at)
        return appointment

    def confirm(self, appointment_id: int):
        appointment = self.get(appointment_id)
        if appointment.status != AppointmentStatus.SCHEDULED:
            raise IllegalTransition("Only scheduled appointments can be confirmed")
        return self._transition(appointment, AppointmentStatus.CONFIRMED)

    def start(self, appointment_id: int):
        """Mark a scheduled or confirmed appointment as in progress."""
        appointment = self.get(appointment_id)
        if appointment.status not in (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED):
            raise IllegalTransition("Only scheduled or confirmed appointments can be started")
        return self._transition(appointment, AppointmentStatus.IN_PROGRESS)

    def complete(self, appointment_id: int):
        appointment = self.get(appointment_id)
        if appointment.status == AppointmentStatus.CANCELLED:
            raise IllegalTransition("Cancelled appointments cannot be completed")
        return self._transition(appointment, AppointmentStatus.COMPLETED)

    def cancel(self, appointment_id: int, reason: Optional[str] = None):
        reason = clean_text(reason, 'Cancellation reason')
        appointment = self.get(appointment_id)
        if appointment.status == AppointmentStatus.CANCELLED:
            raise IllegalTransition("Appointment is already cancelled")
        if appointment.status == AppointmentStatus.COMPLETED:
            raise IllegalTransition("Cannot cancel a completed appointment")

        now = self.clock()
        appointment.cancelled_at = now
        appointment.cancellation_reason = reason
        return self._transition(appointment, AppointmentStatus.CANCELLED, now=now)

    def restore(self, appointment_id: int):
        """
        Bring a cancelled appointment back to scheduled.

        The slot may have been taken while the appointment was cancelled, so
        the conflict check runs again.
        """
        appointment = self.get(appointment_id)
        if appointment.status != AppointmentStatus.CANCELLED:
            raise IllegalTransition("Only cancelled appointments can be restored")

        now = self.clock()
        if appointment.appointment_date < now.date():
            raise IllegalTransition("Cannot restore an appointment with a past date")

        self.doctors.lock(appointment.doctor_id)
        self._ensure_no_conflict(appointment.doctor_id, appointment.starts_at,
                                 appointment.duration_minutes, exclude_id=appointment.id)

        appointment.cancelled_at = None
        appointment.cancellation_reason = None
        return self._transition(appointment, AppointmentStatus.SCHEDULED, now=now)

    def mark_no_show(self, appointment_id: int):
        appointment = self.get(appointment_id)
        if appointment.status == AppointmentStatus.CANCELLED:
            raise IllegalTransition("Cannot mark a cancelled appointment as no-show")
        return self._transition(appointment, AppointmentStatus.NO_SHOW)

    def delete(self, appointment_id: int) -> bool:
        """Hard delete regardless of status. Returns False when nothing was deleted."""
        require_id(appointment_id, 'Appointment')
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            return False
        self.appointments.delete(appointment)
        logger.info("Appointment %s deleted", appointment_id)
        return True

    def _ensure_no_conflict(self, doctor_id: int, starts_at: datetime, duration_minutes: int,
                            exclude_id: Optional[int] = None):
        ends_at = starts_at + timedelta(minutes=duration_minutes)
        # A booking from the previous evening can run past midnight
        booked = self.appointments.list_active_for_doctor_between(
            doctor_id, starts_at.date() - timedelta(days=1), ends_at.date(), exclude_id=exclude_id
        )
        if has_conflict(starts_at, ends_at, booked):
            logger.warning("Rejected booking: doctor %s already booked between %s and %s",
                           doctor_id, starts_at, ends_at)
            raise Conflict("Doctor has a scheduling conflict at this time")

    def _transition(self, appointment, status: AppointmentStatus, now: Optional[datetime] = None):
        previous = AppointmentStatus(appointment.status)
        appointment.status = status
        appointment.updated_at = now or self.clock()
        self.appointments.save(appointment)
        logger.info("Appointment %s: %s -> %s", appointment.id, previous.value, status.value)
        return appointment
