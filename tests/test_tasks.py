from datetime import datetime

from app.extensions import db
from app.models import TimeSlot
from tasks.maintenance_tasks import daily_maintenance, purge_expired_time_slots


def add_slot(doctor, day):
    db.session.add(TimeSlot(
        doctor_id=doctor.id,
        start_time=datetime(2024, 1, day, 9, 0),
        end_time=datetime(2024, 1, day, 10, 0),
    ))
    db.session.commit()


def test_purge_keeps_recent_slots(app, doctor):
    add_slot(doctor, 1)
    add_slot(doctor, 7)

    result = purge_expired_time_slots(days=5)

    assert result['success'] is True
    assert result['deleted_count'] == 1
    assert result['cutoff'] == '2024-01-04T12:00:00'
    assert TimeSlot.query.count() == 1


def test_purge_uses_configured_retention(app, doctor):
    app.config['EXPIRED_SLOT_RETENTION_DAYS'] = 1
    add_slot(doctor, 1)
    add_slot(doctor, 7)

    assert purge_expired_time_slots()['deleted_count'] == 2


def test_daily_maintenance(app, doctor):
    add_slot(doctor, 1)

    result = daily_maintenance.delay().get()

    assert result['success'] is True
    assert result['purge_expired_time_slots']['deleted_count'] == 0
