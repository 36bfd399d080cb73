"""
Celery tasks for scheduling housekeeping
"""
import logging
from datetime import timedelta
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from app.extensions import celery, db
from app.services.scheduling import get_clock, time_slot_manager

logger = logging.getLogger(__name__)


@celery.task(name='tasks.purge_expired_time_slots')
def purge_expired_time_slots(days=None):
    """
    Delete time slots that ended more than ``days`` days ago
    (EXPIRED_SLOT_RETENTION_DAYS when not given)

    Returns:
        dict: Purge results
    """
    if days is None:
        days = current_app.config['EXPIRED_SLOT_RETENTION_DAYS']
    try:
        now = get_clock()()
        cutoff = now - timedelta(days=int(days))
        deleted = time_slot_manager().purge_expired(before=cutoff)

        return {
            'success': True,
            'deleted_count': deleted,
            'cutoff': cutoff.isoformat(),
            'timestamp': now.isoformat()
        }

    except SQLAlchemyError as e:
        logger.error(f"Error purging expired time slots: {e}", exc_info=True)
        db.session.rollback()
        return {'success': False, 'error': str(e)}


@celery.task(name='tasks.daily_maintenance')
def daily_maintenance():
    """
    Daily housekeeping entry point for celery beat

    Returns:
        dict: Results of each maintenance step
    """
    results = {
        'purge_expired_time_slots': purge_expired_time_slots(),
    }
    results['success'] = all(step.get('success') for step in results.values())
    logger.info("Daily maintenance finished: %s", results)
    return results
