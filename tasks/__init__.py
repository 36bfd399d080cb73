"""
Celery tasks module
Import all tasks here so Celery can discover them
"""
from . import maintenance_tasks

__all__ = ['maintenance_tasks']
