from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt
from app.services import doctor_service
from app.services.scheduling import availability_resolver
from app.utils.decorators import require_role, current_user_id, current_role
from app.utils.audit import log_audit
from app.utils.parsing import parse_bool, parse_date, require_json


doctor_bp = Blueprint("doctor", __name__, url_prefix="/api/doctors")


@doctor_bp.route("", methods=["GET"])
@jwt_required()
def list_doctors():
    """
    List doctors.
    Query params: specialization, available (true/false)
    """
    doctors = doctor_service.list_doctors(
        specialization=request.args.get("specialization") or None,
        available=parse_bool(request.args.get("available"), "available"),
    )
    return jsonify({"success": True, "data": [d.to_dict() for d in doctors]}), 200


@doctor_bp.route("/<int:doctor_id>", methods=["GET"])
@jwt_required()
def get_doctor(doctor_id):
    doctor = doctor_service.get_doctor(doctor_id)
    return jsonify({"success": True, "data": doctor.to_dict()}), 200


@doctor_bp.route("", methods=["POST"])
@jwt_required()
@require_role("admin")
def create_doctor():
    """
    Register a doctor (admin only).
    Body: { "first_name", "last_name", "email", "specialization", "phone"?, "license_number"? }
    """
    data = require_json()
    doctor = doctor_service.register_doctor(
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        email=data.get("email"),
        specialization=data.get("specialization"),
        phone=data.get("phone"),
        license_number=data.get("license_number"),
    )
    log_audit("doctor", "create", user_id=current_user_id(), entity_id=doctor.id,
              details={"email": doctor.email, "specialization": doctor.specialization})
    return jsonify({
        "success": True,
        "message": "Doctor created successfully",
        "data": doctor.to_dict(),
    }), 201


@doctor_bp.route("/<int:doctor_id>", methods=["PUT"])
@jwt_required()
@require_role("admin")
def update_doctor(doctor_id):
    data = require_json()
    doctor = doctor_service.update_doctor(
        doctor_id,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        email=data.get("email"),
        specialization=data.get("specialization"),
        phone=data.get("phone"),
        license_number=data.get("license_number"),
        is_available=parse_bool(data.get("is_available"), "is_available"),
    )
    log_audit("doctor", "update", user_id=current_user_id(), entity_id=doctor.id)
    return jsonify({
        "success": True,
        "message": "Doctor updated successfully",
        "data": doctor.to_dict(),
    }), 200


@doctor_bp.route("/<int:doctor_id>/availability", methods=["PUT"])
@jwt_required()
@require_role("admin", "doctor")
def set_availability(doctor_id):
    """
    Toggle whether the doctor accepts new appointments.
    Body: { "is_available": true|false }. Doctors may only change their own flag.
    """
    if current_role() == "doctor" and get_jwt().get("doctor_id") != doctor_id:
        return jsonify({"success": False, "error": "Permission denied"}), 403

    data = require_json()
    is_available = parse_bool(data.get("is_available"), "is_available")
    if is_available is None:
        return jsonify({"success": False, "error": 'Field "is_available" is required'}), 400

    doctor = doctor_service.set_availability(doctor_id, is_available)
    log_audit("doctor", "set_availability", user_id=current_user_id(), entity_id=doctor.id,
              details={"is_available": doctor.is_available})
    return jsonify({"success": True, "data": doctor.to_dict()}), 200


@doctor_bp.route("/<int:doctor_id>", methods=["DELETE"])
@jwt_required()
@require_role("admin")
def delete_doctor(doctor_id):
    """Delete a doctor and their time slots (admin only)."""
    if not doctor_service.delete_doctor(doctor_id):
        return jsonify({"success": False, "error": f"Doctor with ID {doctor_id} not found"}), 404

    log_audit("doctor", "delete", user_id=current_user_id(), entity_id=doctor_id)
    return jsonify({"success": True, "message": "Doctor deleted successfully"}), 200


@doctor_bp.route("/<int:doctor_id>/availability", methods=["GET"])
@jwt_required()
def get_availability(doctor_id):
    """
    Bookable slots for a doctor.
    Query params: date=YYYY-MM-DD, or start_date + end_date (inclusive)
    """
    resolver = availability_resolver()
    if request.args.get("start_date") or request.args.get("end_date"):
        slots = resolver.resolve(
            doctor_id,
            parse_date(request.args.get("start_date"), "start_date"),
            parse_date(request.args.get("end_date"), "end_date"),
        )
    else:
        slots = resolver.resolve(doctor_id, parse_date(request.args.get("date"), "date"))

    return jsonify({
        "success": True,
        "data": [slot.to_dict() for slot in slots],
        "count": len(slots),
    }), 200
