"""
CORS Configuration
Centralized CORS settings for the API
"""

CORS_CONFIG = {
    "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    "allow_headers": [
        "Content-Type",
        "Authorization",
        "X-Requested-With",
        "Accept",
        "Origin",
    ],
    "expose_headers": [
        "Content-Type",
        "Authorization",
    ],
    "max_age": 86400,  # 24 hours
}


def _origins(app):
    """CORS_ORIGINS is '*' or a comma-separated list of origins."""
    raw = app.config.get('CORS_ORIGINS', '*') or '*'
    if raw.strip() == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


def init_cors(app):
    """
    Initialize CORS for the API and health endpoints
    """
    from flask_cors import CORS

    origins = _origins(app)
    CORS(app,
         resources={r"/api/*": {"origins": origins}, r"/health*": {"origins": origins}},
         methods=CORS_CONFIG["methods"],
         allow_headers=CORS_CONFIG["allow_headers"],
         expose_headers=CORS_CONFIG["expose_headers"],
         # Credentialed requests are only allowed for an explicit origin list
         supports_credentials=origins != '*',
         max_age=CORS_CONFIG["max_age"])

    app.logger.info("CORS enabled for origins: %s", origins)
