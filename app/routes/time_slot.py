from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from app.services.scheduling import time_slot_manager
from app.utils.decorators import require_role, current_user_id, STAFF_ROLES
from app.utils.audit import log_audit
from app.utils.parsing import parse_bool, parse_date, parse_datetime, parse_int, parse_time, require_json

time_slot_bp = Blueprint('time_slot', __name__, url_prefix='/api/time-slots')


@time_slot_bp.route('', methods=['GET'])
@jwt_required()
def list_time_slots():
    """
    List persisted time slots
    Query params: doctor_id, date, start_date + end_date (inclusive)
    """
    manager = time_slot_manager()
    doctor_id = parse_int(request.args.get('doctor_id'), 'doctor_id', required=False)

    if request.args.get('start_date') or request.args.get('end_date'):
        start_date = parse_date(request.args.get('start_date'), 'start_date')
        end_date = parse_date(request.args.get('end_date'), 'end_date')
        if doctor_id is not None:
            slots = manager.list_for_doctor_between(doctor_id, start_date, end_date)
        else:
            slots = manager.list_between(start_date, end_date)
    elif request.args.get('date'):
        day = parse_date(request.args.get('date'), 'date')
        slots = manager.list_for_doctor_on(doctor_id, day) if doctor_id is not None else manager.list_on(day)
    elif doctor_id is not None:
        slots = manager.list_for_doctor(doctor_id)
    else:
        slots = manager.list_all()

    return jsonify({
        'success': True,
        'data': [s.to_dict() for s in slots],
        'count': len(slots)
    }), 200


@time_slot_bp.route('/<int:slot_id>', methods=['GET'])
@jwt_required()
def get_time_slot(slot_id):
    slot = time_slot_manager().get(slot_id)
    return jsonify({
        'success': True,
        'data': slot.to_dict()
    }), 200


@time_slot_bp.route('/doctor/<int:doctor_id>/available', methods=['GET'])
@jwt_required()
def available_for_doctor(doctor_id):
    """
    Bookable slots for a doctor
    Query params: date, or start_date + end_date. Without dates, the
    doctor's persisted slots that are currently usable.
    """
    manager = time_slot_manager()
    if request.args.get('start_date') or request.args.get('end_date'):
        slots = manager.available_between(
            doctor_id,
            parse_date(request.args.get('start_date'), 'start_date'),
            parse_date(request.args.get('end_date'), 'end_date'),
        )
    elif request.args.get('date'):
        slots = manager.available_on(doctor_id, parse_date(request.args.get('date'), 'date'))
    else:
        slots = manager.list_available_for_doctor(doctor_id)

    return jsonify({
        'success': True,
        'data': [s.to_dict() for s in slots],
        'count': len(slots)
    }), 200


@time_slot_bp.route('', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def create_time_slot():
    """
    Create one slot
    Body: { "doctor_id", "start_time": ISO datetime (UTC), "end_time": ISO datetime (UTC) }
    """
    data = require_json()
    slot = time_slot_manager().create(
        parse_int(data.get('doctor_id'), 'doctor_id'),
        parse_datetime(data.get('start_time'), 'start_time'),
        parse_datetime(data.get('end_time'), 'end_time'),
    )
    log_audit('time_slot', 'create', user_id=current_user_id(), entity_id=slot.id,
              details={'doctor_id': slot.doctor_id, 'start_time': slot.start_time.isoformat()})

    return jsonify({
        'success': True,
        'message': 'Time slot created successfully',
        'data': slot.to_dict()
    }), 201


@time_slot_bp.route('/bulk', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def bulk_create_time_slots():
    """
    Fill a window of one day with back-to-back slots
    Body: { "doctor_id", "date": "YYYY-MM-DD", "start_time": "HH:MM", "end_time": "HH:MM",
            "slot_minutes"?: SLOT_DEFAULT_MINUTES }
    Candidates overlapping existing slots are skipped.
    """
    data = require_json()
    slot_minutes = data.get('slot_minutes', current_app.config['SLOT_DEFAULT_MINUTES'])
    slots = time_slot_manager().bulk_create(
        parse_int(data.get('doctor_id'), 'doctor_id'),
        parse_date(data.get('date'), 'date'),
        parse_time(data.get('start_time'), 'start_time'),
        parse_time(data.get('end_time'), 'end_time'),
        parse_int(slot_minutes, 'slot_minutes'),
    )
    log_audit('time_slot', 'bulk_create', user_id=current_user_id(), entity_id=data.get('doctor_id'),
              details={'date': data.get('date'), 'created': len(slots)})

    return jsonify({
        'success': True,
        'message': f'{len(slots)} time slots created',
        'data': [s.to_dict() for s in slots],
        'count': len(slots)
    }), 201


@time_slot_bp.route('/<int:slot_id>', methods=['PUT'])
@jwt_required()
@require_role(*STAFF_ROLES)
def update_time_slot(slot_id):
    """
    Body: { "start_time", "end_time", "is_available"?: true, "is_blocked"?: false, "block_reason"? }
    """
    data = require_json()
    slot = time_slot_manager().update(
        slot_id,
        parse_datetime(data.get('start_time'), 'start_time'),
        parse_datetime(data.get('end_time'), 'end_time'),
        is_available=parse_bool(data.get('is_available'), 'is_available', default=True),
        is_blocked=parse_bool(data.get('is_blocked'), 'is_blocked', default=False),
        block_reason=data.get('block_reason'),
    )
    log_audit('time_slot', 'update', user_id=current_user_id(), entity_id=slot.id)

    return jsonify({
        'success': True,
        'message': 'Time slot updated successfully',
        'data': slot.to_dict()
    }), 200


@time_slot_bp.route('/<int:slot_id>/block', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def block_time_slot(slot_id):
    data = request.get_json(silent=True) or {}
    slot = time_slot_manager().block(slot_id, data.get('reason'))
    log_audit('time_slot', 'block', user_id=current_user_id(), entity_id=slot.id,
              details={'reason': slot.block_reason})

    return jsonify({
        'success': True,
        'message': 'Time slot blocked',
        'data': slot.to_dict()
    }), 200


@time_slot_bp.route('/<int:slot_id>/unblock', methods=['POST'])
@jwt_required()
@require_role(*STAFF_ROLES)
def unblock_time_slot(slot_id):
    slot = time_slot_manager().unblock(slot_id)
    log_audit('time_slot', 'unblock', user_id=current_user_id(), entity_id=slot.id)

    return jsonify({
        'success': True,
        'message': 'Time slot unblocked',
        'data': slot.to_dict()
    }), 200


@time_slot_bp.route('/<int:slot_id>', methods=['DELETE'])
@jwt_required()
@require_role(*STAFF_ROLES)
def delete_time_slot(slot_id):
    if not time_slot_manager().delete(slot_id):
        return jsonify({
            'success': False,
            'error': f'TimeSlot with ID {slot_id} not found'
        }), 404

    log_audit('time_slot', 'delete', user_id=current_user_id(), entity_id=slot_id)
    return jsonify({
        'success': True,
        'message': 'Time slot deleted successfully'
    }), 200


@time_slot_bp.route('/doctor/<int:doctor_id>/date/<date_value>', methods=['DELETE'])
@jwt_required()
@require_role(*STAFF_ROLES)
def delete_doctor_slots_on(doctor_id, date_value):
    """Delete every slot of a doctor on one day"""
    count = time_slot_manager().delete_for_doctor_on(doctor_id, parse_date(date_value, 'date'))
    log_audit('time_slot', 'delete_for_day', user_id=current_user_id(), entity_id=doctor_id,
              details={'date': date_value, 'deleted': count})

    return jsonify({
        'success': True,
        'message': f'{count} time slots deleted',
        'data': {'deleted': count}
    }), 200
