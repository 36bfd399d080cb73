from .decorators import require_role, current_user_id, current_role, is_staff, can_access_patient

from .audit import log_audit

from .parsing import parse_date, parse_time, parse_datetime, parse_bool, parse_int, require_json

__all__ = [
    # Decorators
    "require_role",
    "current_user_id",
    "current_role",
    "is_staff",
    "can_access_patient",
    # Audit
    "log_audit",
    # Parsing
    "parse_date",
    "parse_time",
    "parse_datetime",
    "parse_bool",
    "parse_int",
    "require_json",
]
