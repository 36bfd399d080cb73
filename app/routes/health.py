"""
Probes for load balancers and container orchestration.
"""
import logging

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.scheduling.clock import utcnow

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__, url_prefix='/health')

SERVICE_NAME = 'clinic-booking'


def _probe(status, **extra):
    body = {'status': status, 'timestamp': utcnow().isoformat()}
    body.update(extra)
    return body


@health_bp.route('', methods=['GET'])
@health_bp.route('/ping', methods=['GET'])
def health_check():
    """Process is up; the database is not touched."""
    return jsonify(_probe('healthy', service=SERVICE_NAME)), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """Ready to take bookings once the database answers."""
    try:
        db.session.execute(db.text('SELECT 1'))
    except SQLAlchemyError as e:
        logger.error("Readiness probe failed: %s", e)
        db.session.rollback()
        body = _probe('not_ready', database='unavailable')
        if current_app.debug:
            body['error'] = str(e)
        return jsonify(body), 503

    return jsonify(_probe('ready', database='connected')), 200


@health_bp.route('/live', methods=['GET'])
def liveness_check():
    return jsonify(_probe('alive')), 200
