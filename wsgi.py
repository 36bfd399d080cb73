"""
WSGI entry point for production deployment
gunicorn "wsgi:app" -w 4 -b 0.0.0.0:8000
"""
from app import create_app

application = app = create_app()
