"""
Audit logging for booking changes: create, update, state transitions, delete.
"""
import json
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models import AuditLog
from app.scheduling.clock import utcnow

logger = logging.getLogger(__name__)


def log_audit(
    entity_type: str,
    action: str,
    user_id: Optional[int] = None,
    entity_id: Optional[Any] = None,
    details: Optional[dict] = None,
) -> None:
    """Append an audit log entry. A failed write is logged and never breaks the request."""
    try:
        entry = AuditLog(
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            action=action,
            user_id=user_id,
            details=json.dumps(details, default=str) if details else None,
            created_at=utcnow(),
        )
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError as e:
        logger.warning("Audit log failed: %s", e)
        db.session.rollback()
