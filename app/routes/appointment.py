from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt
from app.services.scheduling import appointment_scheduler
from app.utils.decorators import require_role, can_access_patient, current_user_id, is_staff, STAFF_ROLES
from app.utils.audit import log_audit
from app.utils.parsing import parse_bool, parse_date, parse_int, parse_time, require_json

appointment_bp = Blueprint('appointment', __name__, url_prefix='/api/appointments')


def _appointment_to_dict(appointment):
    """Appointment with patient and doctor display names."""
    data = appointment.to_dict()
    data['patient_name'] = appointment.patient.full_name if appointment.patient else None
    data['doctor_name'] = appointment.doctor.full_name if appointment.doctor else None
    return data


def _forbidden():
    return jsonify({
        'success': False,
        'error': 'Permission denied'
    }), 403


def _respond(appointment, message, action, details=None):
    log_audit('appointment', action, user_id=current_user_id(), entity_id=appointment.id,
              details=details or {'status': appointment.to_dict()['status']})
    return jsonify({
        'success': True,
        'message': message,
        'data': _appointment_to_dict(appointment)
    }), 200


@appointment_bp.route('', methods=['GET'])
@jwt_required()
def list_appointments():
    """
    List appointments
    Query params: patient_id, doctor_id, start_date + end_date, upcoming=true
    Patients only ever see their own appointments.
    """
    scheduler = appointment_scheduler()
    patient_id = parse_int(request.args.get('patient_id'), 'patient_id', required=False)
    doctor_id = parse_int(request.args.get('doctor_id'), 'doctor_id', required=False)
    upcoming = parse_bool(request.args.get('upcoming'), 'upcoming', default=False)

    if not is_staff():
        own = get_jwt().get('patient_id')
        if own is None or (patient_id is not None and patient_id != own):
            return _forbidden()
        patient_id = own

    if upcoming:
        appointments = scheduler.list_upcoming(doctor_id=doctor_id, patient_id=patient_id)
    elif request.args.get('start_date') or request.args.get('end_date'):
        appointments = scheduler.list_between(
            parse_date(request.args.get('start_date'), 'start_date'),
            parse_date(request.args.get('end_date'), 'end_date'),
        )
        if patient_id is not None:
            appointments = [a for a in appointments if a.patient_id == patient_id]
        if doctor_id is not None:
            appointments = [a for a in appointments if a.doctor_id == doctor_id]
    elif patient_id is not None:
        appointments = scheduler.list_for_patient(patient_id)
        if doctor_id is not None:
            appointments = [a for a in appointments if a.doctor_id == doctor_id]
    elif doctor_id is not None:
        appointments = scheduler.list_for_doctor(doctor_id)
    else:
        appointments = scheduler.list_all()

    return jsonify({
        'success': True,
        'data': [_appointment_to_dict(a) for a in appointments],
        'count': len(appointments)
    }), 200


@appointment_bp.route('/<int:appointment_id>', methods=['GET'])
@jwt_required()
def get_appointment(appointment_id):
    appointment = appointment_scheduler().get(appointment_id)
    if not can_access_patient(appointment.patient_id):
        return _forbidden()

    return jsonify({
        'success': True,
        'data': _appointment_to_dict(appointment)
    }), 200


@appointment_bp.route('', methods=['POST'])
@jwt_required()
def create_appointment():
    """
    Book an appointment
    Body: { "patient_id", "doctor_id", "date": "YYYY-MM-DD", "time": "HH:MM",
            "duration_minutes"?: 30, "reason"?, "notes"? }
    Patients may omit patient_id and can only book for themselves.
    """
    data = require_json()
    patient_id = parse_int(data.get('patient_id'), 'patient_id', required=False)
    if not is_staff():
        own = get_jwt().get('patient_id')
        if own is None or (patient_id is not None and patient_id != own):
            return _forbidden()
        patient_id = own
    if patient_id is None:
        return jsonify({
            'success': False,
            'error': 'Field "patient_id" is required'
        }), 400

    appointment = appointment_scheduler().schedule(
        patient_id=patient_id,
        doctor_id=parse_int(data.get('doctor_id'), 'doctor_id'),
        appointment_date=parse_date(data.get('date'), 'date'),
        appointment_time=parse_time(data.get('time'), 'time'),
        duration_minutes=parse_int(data.get('duration_minutes', 30), 'duration_minutes'),
        reason=data.get('reason'),
        notes=data.get('notes'),
    )
    log_audit('appointment', 'create', user_id=current_user_id(), entity_id=appointment.id,
              details={'patient_id': appointment.patient_id, 'doctor_id': appointment.doctor_id,
                       'starts_at': appointment.starts_at.isoformat()})

    return jsonify({
        'success': True,
        'message': 'Appointment created successfully',
        'data': _appointment_to_dict(appointment)
    }), 201


@appointment_bp.route('/<int:appointment_id>', methods=['PUT'])
@jwt_required()
@require_role(*STAFF_ROLES)
def update_appointment(appointment_id):
    """
    Reschedule or edit an appointment
    Body: { "date", "time", "duration_minutes", "status", "reason"?, "notes"? }
    """
    data = require_json()
    appointment_date = parse_date(data.get('date'), 'date')
    appointment_time = parse_time(data.get('time'), 'time')
    duration_minutes = parse_int(data.get('duration_minutes'), 'duration_minutes', required=False)

    scheduler = appointment_scheduler()
    current = scheduler.get(appointment_id)
    if duration_minutes is None:
        duration_minutes = current.duration_minutes
    appointment = scheduler.update(
        appointment_id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        duration_minutes=duration_minutes,
        status=data.get('status') or current.status,
        reason=data.get('reason'),
        notes=data.get('notes'),
    )
    return _respond(appointment, 'Appointment updated successfully', 'update',
                    details={'status': appointment.to_dict()['status'],
                             'starts_at': appointment.starts_at.isoformat()})


@appointment_bp.route('/<int:appointment_id>/confirm', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def confirm_appointment(appointment_id):
    appointment = appointment_scheduler().confirm(appointment_id)
    return _respond(appointment, 'Appointment confirmed', 'confirm')


@appointment_bp.route('/<int:appointment_id>/start', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def start_appointment(appointment_id):
    appointment = appointment_scheduler().start(appointment_id)
    return _respond(appointment, 'Appointment started', 'start')


@appointment_bp.route('/<int:appointment_id>/complete', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def complete_appointment(appointment_id):
    appointment = appointment_scheduler().complete(appointment_id)
    return _respond(appointment, 'Appointment completed', 'complete')


@appointment_bp.route('/<int:appointment_id>/cancel', methods=['POST'])
@jwt_required()
def cancel_appointment(appointment_id):
    """
    Cancel an appointment
    Body (optional): { "reason": "..." }. Patients may cancel their own appointments.
    """
    scheduler = appointment_scheduler()
    if not can_access_patient(scheduler.get(appointment_id).patient_id):
        return _forbidden()

    data = request.get_json(silent=True) or {}
    appointment = scheduler.cancel(appointment_id, data.get('reason'))
    return _respond(appointment, 'Appointment cancelled', 'cancel',
                    details={'reason': appointment.cancellation_reason})


@appointment_bp.route('/<int:appointment_id>/restore', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def restore_appointment(appointment_id):
    appointment = appointment_scheduler().restore(appointment_id)
    return _respond(appointment, 'Appointment restored', 'restore')


@appointment_bp.route('/<int:appointment_id>/no-show', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def mark_no_show(appointment_id):
    appointment = appointment_scheduler().mark_no_show(appointment_id)
    return _respond(appointment, 'Appointment marked as no-show', 'no_show')


@appointment_bp.route('/<int:appointment_id>', methods=['DELETE'])
@jwt_required()
@require_role('admin', 'receptionist')
def delete_appointment(appointment_id):
    """Hard delete, bypassing the state machine (admin, receptionist)"""
    if not appointment_scheduler().delete(appointment_id):
        return jsonify({
            'success': False,
            'error': f'Appointment with ID {appointment_id} not found'
        }), 404

    log_audit('appointment', 'delete', user_id=current_user_id(), entity_id=appointment_id)
    return jsonify({
        'success': True,
        'message': 'Appointment deleted successfully'
    }), 200
