from .patient import Patient
from .doctor import Doctor
from .time_slot import TimeSlot
from .appointment import Appointment
from .user import User
from .audit_log import AuditLog

__all__ = ["Patient", "Doctor", "TimeSlot", "Appointment", "User", "AuditLog"]
