from .base import AppointmentRepository, DoctorRepository, PatientRepository, TimeSlotRepository
from .patients import SqlAlchemyPatientRepository
from .doctors import SqlAlchemyDoctorRepository
from .appointments import SqlAlchemyAppointmentRepository
from .time_slots import SqlAlchemyTimeSlotRepository

__all__ = [
    "PatientRepository", "DoctorRepository", "AppointmentRepository", "TimeSlotRepository",
    "SqlAlchemyPatientRepository", "SqlAlchemyDoctorRepository",
    "SqlAlchemyAppointmentRepository", "SqlAlchemyTimeSlotRepository",
]
