from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from app.extensions import db
from app.models import User
from app.services import auth_service
from app.services.auth_service import AuthFailure
from app.utils.audit import log_audit

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _failure(result: AuthFailure):
    return jsonify({
        'success': False,
        'error': result.reason
    }), result.status


def _token_payload(result, message):
    payload = {
        'success': True,
        'message': message,
        'data': result.user.to_dict(),
    }
    payload.update(result.tokens.to_dict())
    return payload


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Patient self-registration.
    Body: { "email", "password", "first_name", "last_name", "phone"? }
    Creates the patient record and the login, and returns tokens.
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({
            'success': False,
            'error': 'Request body must be JSON'
        }), 400

    result = auth_service.register(
        email=data.get('email'),
        password=data.get('password'),
        first_name=data.get('first_name'),
        last_name=data.get('last_name'),
        phone=data.get('phone'),
    )
    if not result.ok:
        return _failure(result)

    log_audit('user', 'register', user_id=result.user.id, entity_id=result.user.id,
              details={'patient_id': result.user.patient_id})
    return jsonify(_token_payload(result, result.message)), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Login endpoint - authenticates a user and returns JWT tokens"""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({
            'success': False,
            'error': 'Request body must be JSON'
        }), 400

    result = auth_service.login(data.get('email'), data.get('password'))
    if not result.ok:
        return _failure(result)

    return jsonify(_token_payload(result, result.message)), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """Exchange a refresh token for a new token pair. Each refresh token works once."""
    result = auth_service.refresh(int(get_jwt_identity()), get_jwt()['jti'])
    if not result.ok:
        return _failure(result)

    return jsonify(_token_payload(result, result.message)), 200


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """Revoke the refresh token; the client discards the access token"""
    user_id = int(get_jwt_identity())
    auth_service.revoke(user_id)
    return jsonify({
        'success': True,
        'message': 'Logged out successfully'
    }), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    """Get the logged-in user, with the linked patient or doctor profile"""
    user = db.session.get(User, int(get_jwt_identity()))
    if not user:
        return jsonify({'success': False, 'error': 'User not found'}), 404

    data = user.to_dict()
    if user.patient is not None:
        data['patient'] = user.patient.to_dict()
    if user.doctor is not None:
        data['doctor'] = user.doctor.to_dict()

    return jsonify({
        'success': True,
        'data': data
    }), 200


@auth_bp.route('/change-password', methods=['POST'])
@jwt_required()
def change_password():
    """
    Body: { "current_password": "...", "new_password": "..." }
    """
    data = request.get_json(silent=True) or {}
    user_id = int(get_jwt_identity())
    result = auth_service.change_password(user_id, data.get('current_password'), data.get('new_password'))
    if not result.ok:
        return _failure(result)

    log_audit('user', 'change_password', user_id=user_id, entity_id=user_id)
    return jsonify({
        'success': True,
        'message': result.message
    }), 200
