from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import and_, or_

from app.models import Appointment
from app.scheduling.clock import as_date, as_time
from app.scheduling.status import AppointmentStatus


class SqlAlchemyAppointmentRepository:
    """Appointment store backed by the Flask-SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def _ordered(self, query):
        return query.order_by(Appointment.appointment_date, Appointment.appointment_time, Appointment.id)

    def get(self, appointment_id: int) -> Optional[Appointment]:
        return self.session.get(Appointment, appointment_id)

    def create(self, **fields) -> Appointment:
        appointment = Appointment(**fields)
        self.session.add(appointment)
        self.session.commit()
        return appointment

    def save(self, appointment: Appointment) -> Appointment:
        self.session.commit()
        return appointment

    def delete(self, appointment: Appointment) -> None:
        self.session.delete(appointment)
        self.session.commit()

    def list_all(self) -> List[Appointment]:
        return self._ordered(self.session.query(Appointment)).all()

    def list_for_patient(self, patient_id: int) -> List[Appointment]:
        return self._ordered(
            self.session.query(Appointment).filter(Appointment.patient_id == patient_id)
        ).all()

    def list_for_doctor(self, doctor_id: int) -> List[Appointment]:
        return self._ordered(
            self.session.query(Appointment).filter(Appointment.doctor_id == doctor_id)
        ).all()

    def list_between(self, start_date: date, end_date: date) -> List[Appointment]:
        return self._ordered(
            self.session.query(Appointment).filter(
                Appointment.appointment_date >= as_date(start_date),
                Appointment.appointment_date <= as_date(end_date),
            )
        ).all()

    def list_upcoming(self, now: datetime, doctor_id: Optional[int] = None,
                      patient_id: Optional[int] = None) -> List[Appointment]:
        today, now_time = now.date(), as_time(now)
        query = self.session.query(Appointment).filter(
            Appointment.status != AppointmentStatus.CANCELLED,
            or_(
                Appointment.appointment_date > today,
                and_(Appointment.appointment_date == today, Appointment.appointment_time > now_time),
            ),
        )
        if doctor_id is not None:
            query = query.filter(Appointment.doctor_id == doctor_id)
        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)
        return self._ordered(query).all()

    def list_active_for_doctor_between(self, doctor_id: int, start_date: date, end_date: date,
                                       exclude_id: Optional[int] = None) -> List[Appointment]:
        query = self.session.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.status != AppointmentStatus.CANCELLED,
            Appointment.appointment_date >= as_date(start_date),
            Appointment.appointment_date <= as_date(end_date),
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return self._ordered(query).all()
