from functools import wraps
from flask import jsonify
from flask_jwt_extended import get_jwt_identity, get_jwt
from app.extensions import db
from app.models import User

STAFF_ROLES = ('admin', 'doctor', 'receptionist')


def current_user_id():
    """User id from the JWT identity (stored as a string)."""
    return int(get_jwt_identity())


def current_role():
    return get_jwt().get('role')


def is_staff():
    return current_role() in STAFF_ROLES


def can_access_patient(patient_id):
    """Staff see every patient; a patient only their own record."""
    if is_staff():
        return True
    return get_jwt().get('patient_id') == patient_id


def require_role(*roles):
    """
    Decorator to require specific roles
    Usage: @require_role('admin', 'receptionist')
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Runs after @jwt_required(), so an identity is present
            try:
                user = db.session.get(User, current_user_id())
            except (TypeError, ValueError):
                user = None

            if not user or not user.is_active:
                return jsonify({
                    'success': False,
                    'error': 'Authentication required'
                }), 401

            if not user.has_any_role(*roles):
                return jsonify({
                    'success': False,
                    'error': f'Permission denied. Required roles: {", ".join(roles)}'
                }), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator
