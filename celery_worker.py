#!/usr/bin/env python3
"""
Celery Worker Entry Point
Run with: celery -A celery_worker.celery worker --loglevel=info
Beat:     celery -A celery_worker.celery beat --loglevel=info
"""
from celery.schedules import crontab
from app import create_app
from app.extensions import celery

# Create Flask app to initialize Celery
app = create_app()

# Import tasks so Celery can discover them
from tasks import maintenance_tasks  # noqa: E402,F401

celery.conf.beat_schedule = {
    'daily-maintenance': {
        'task': 'tasks.daily_maintenance',
        'schedule': crontab(hour=3, minute=0),
    },
}

if __name__ == '__main__':
    # For development: run worker directly
    celery.worker_main([
        'worker',
        '--loglevel=info',
        '--concurrency=4'
    ])
