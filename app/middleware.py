"""
Request logging and security headers
"""
from flask import request, g
import logging
import time

logger = logging.getLogger(__name__)


def setup_middleware(app):
    """Register request logging and response headers"""

    @app.before_request
    def before_request():
        """Remember when the request started"""
        g.request_started = time.perf_counter()

    @app.after_request
    def after_request(response):
        """Log the request and add security headers"""
        started = g.pop('request_started', None)
        if started is not None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info("%s %s -> %s (%.1f ms) from %s", request.method, request.path,
                        response.status_code, elapsed_ms, request.remote_addr)

        if not app.debug:
            # Prevent clickjacking
            response.headers['X-Frame-Options'] = 'DENY'
            # Prevent MIME type sniffing
            response.headers['X-Content-Type-Options'] = 'nosniff'
            response.headers['X-XSS-Protection'] = '1; mode=block'
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
            # Only add HSTS if using HTTPS
            if request.is_secure:
                response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response
