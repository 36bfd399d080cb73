from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from app.services import patient_service
from app.services.scheduling import get_clock
from app.utils.decorators import require_role, can_access_patient, current_user_id, STAFF_ROLES
from app.utils.audit import log_audit
from app.utils.parsing import parse_date, require_json

patient_bp = Blueprint('patient', __name__, url_prefix='/api/patients')


def _forbidden():
    return jsonify({
        'success': False,
        'error': 'Permission denied'
    }), 403


@patient_bp.route('', methods=['GET'])
@jwt_required()
@require_role(*STAFF_ROLES)
def list_patients():
    """
    List patients with pagination and search
    Query params: page, limit, search (name or email)
    """
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', 20, type=int)
    search = request.args.get('search', '', type=str).strip()

    if page < 1:
        page = 1
    if limit < 1 or limit > 100:
        limit = 20

    patients = patient_service.list_patients(search or None)
    total = len(patients)
    pages = (total + limit - 1) // limit
    items = patients[(page - 1) * limit: page * limit]

    return jsonify({
        'success': True,
        'data': [p.to_dict() for p in items],
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'pages': pages,
            'has_next': page < pages,
            'has_prev': page > 1
        }
    }), 200


@patient_bp.route('/<int:patient_id>', methods=['GET'])
@jwt_required()
def get_patient(patient_id):
    """Get single patient by ID"""
    if not can_access_patient(patient_id):
        return _forbidden()

    patient = patient_service.get_patient(patient_id)
    data = patient.to_dict()
    data['age'] = patient.age(get_clock()().date())
    return jsonify({
        'success': True,
        'data': data
    }), 200


@patient_bp.route('', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def create_patient():
    """
    Register a patient
    Body: { "first_name", "last_name", "email", "phone"?, "date_of_birth"? }
    """
    data = require_json()

    patient = patient_service.register_patient(
        first_name=data.get('first_name'),
        last_name=data.get('last_name'),
        email=data.get('email'),
        phone=data.get('phone'),
        date_of_birth=parse_date(data.get('date_of_birth'), 'date_of_birth', required=False),
    )
    log_audit('patient', 'create', user_id=current_user_id(), entity_id=patient.id)

    return jsonify({
        'success': True,
        'message': 'Patient created successfully',
        'data': patient.to_dict()
    }), 201


@patient_bp.route('/<int:patient_id>', methods=['PUT'])
@jwt_required()
def update_patient(patient_id):
    """
    Update basic details
    Body: { "first_name", "last_name", "email", "phone"? }
    """
    if not can_access_patient(patient_id):
        return _forbidden()
    data = require_json()

    patient = patient_service.update_patient(
        patient_id,
        first_name=data.get('first_name'),
        last_name=data.get('last_name'),
        email=data.get('email'),
        phone=data.get('phone'),
    )
    log_audit('patient', 'update', user_id=current_user_id(), entity_id=patient.id)

    return jsonify({
        'success': True,
        'message': 'Patient updated successfully',
        'data': patient.to_dict()
    }), 200


@patient_bp.route('/<int:patient_id>/profile', methods=['PUT'])
@jwt_required()
def update_profile(patient_id):
    """
    Replace the extended profile (DOB, gender, address, insurance,
    emergency contact, medical fields). Recomputes is_profile_complete.
    """
    if not can_access_patient(patient_id):
        return _forbidden()
    data = require_json()

    profile = {field: data.get(field) for field in patient_service.PROFILE_FIELDS}
    patient = patient_service.update_profile(
        patient_id,
        first_name=data.get('first_name'),
        last_name=data.get('last_name'),
        phone=data.get('phone'),
        date_of_birth=parse_date(data.get('date_of_birth'), 'date_of_birth', required=False),
        gender=data.get('gender') or 'not_specified',
        **profile
    )
    log_audit('patient', 'update_profile', user_id=current_user_id(), entity_id=patient.id,
              details={'is_profile_complete': patient.is_profile_complete})

    return jsonify({
        'success': True,
        'message': 'Profile updated successfully',
        'data': patient.to_dict()
    }), 200


@patient_bp.route('/<int:patient_id>', methods=['DELETE'])
@jwt_required()
@require_role('admin')
def delete_patient(patient_id):
    """Hard delete (admin only); patients with appointments are kept"""
    if not patient_service.delete_patient(patient_id):
        return jsonify({
            'success': False,
            'error': f'Patient with ID {patient_id} not found'
        }), 404

    log_audit('patient', 'delete', user_id=current_user_id(), entity_id=patient_id)
    return jsonify({
        'success': True,
        'message': 'Patient deleted successfully'
    }), 200
