from .auth import auth_bp
from .patient import patient_bp
from .doctor import doctor_bp
from .appointment import appointment_bp
from .time_slot import time_slot_bp
from .health import health_bp

__all__ = ['auth_bp', 'patient_bp', 'doctor_bp', 'appointment_bp', 'time_slot_bp', 'health_bp']
