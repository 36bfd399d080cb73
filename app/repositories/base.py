"""
Repository protocols consumed by the scheduling engine.

The engine only talks to these interfaces; ``app.repositories`` ships one
SQLAlchemy adapter per protocol.
"""
from datetime import date, datetime
from typing import Iterable, List, Optional, Protocol


class PatientRepository(Protocol):
    def get(self, patient_id: int):
        ...

    def exists(self, patient_id: int) -> bool:
        ...


class DoctorRepository(Protocol):
    def get(self, doctor_id: int):
        ...

    def exists(self, doctor_id: int) -> bool:
        ...

    def lock(self, doctor_id: int):
        """Take a row lock on the doctor for the rest of the transaction and return it."""
        ...


class AppointmentRepository(Protocol):
    def get(self, appointment_id: int):
        ...

    def create(self, **fields):
        ...

    def save(self, appointment):
        ...

    def delete(self, appointment) -> None:
        ...

    def list_all(self) -> List:
        ...

    def list_for_patient(self, patient_id: int) -> List:
        ...

    def list_for_doctor(self, doctor_id: int) -> List:
        ...

    def list_between(self, start_date: date, end_date: date) -> List:
        ...

    def list_upcoming(self, now: datetime, doctor_id: Optional[int] = None,
                      patient_id: Optional[int] = None) -> List:
        ...

    def list_active_for_doctor_between(self, doctor_id: int, start_date: date, end_date: date,
                                       exclude_id: Optional[int] = None) -> List:
        """Non-cancelled appointments of a doctor dated within [start_date, end_date]."""
        ...


class TimeSlotRepository(Protocol):
    def get(self, slot_id: int):
        ...

    def create(self, **fields):
        ...

    def create_many(self, rows: Iterable[dict]) -> List:
        ...

    def save(self, slot):
        ...

    def delete(self, slot) -> None:
        ...

    def list_all(self) -> List:
        ...

    def list_for_doctor(self, doctor_id: int) -> List:
        ...

    def list_starting_between(self, start: datetime, end: datetime,
                              doctor_id: Optional[int] = None) -> List:
        """Slots with start_time in [start, end), optionally for one doctor."""
        ...

    def delete_for_doctor_between(self, doctor_id: int, start: datetime, end: datetime) -> int:
        ...

    def delete_ended_before(self, before: datetime) -> int:
        ...
