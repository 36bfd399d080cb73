from .auth_service import AuthFailure, AuthResult, AuthSuccess, AuthTokens

from .scheduling import appointment_scheduler, availability_resolver, time_slot_manager

from . import doctor_service, patient_service

__all__ = [
    # Auth
    "AuthSuccess",
    "AuthFailure",
    "AuthResult",
    "AuthTokens",
    # Scheduling engine wiring
    "appointment_scheduler",
    "availability_resolver",
    "time_slot_manager",
    # Profiles
    "doctor_service",
    "patient_service",
]
