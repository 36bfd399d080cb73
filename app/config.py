import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default='false'):
    return os.getenv(name, default).lower() == 'true'


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///clinic_booking.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # JWT
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.getenv('JWT_ACCESS_TOKEN_MINUTES', '60')))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.getenv('JWT_REFRESH_TOKEN_DAYS', '7')))

    # Working-day grid used when a doctor has no explicit time slots
    SLOT_DAY_START_HOUR = int(os.getenv('SLOT_DAY_START_HOUR', '9'))
    SLOT_DAY_END_HOUR = int(os.getenv('SLOT_DAY_END_HOUR', '17'))
    SLOT_DEFAULT_MINUTES = int(os.getenv('SLOT_DEFAULT_MINUTES', '30'))

    # Exclude generated slots only when a booking starts at exactly the same
    # instant (legacy behaviour) instead of on any interval overlap
    AVAILABILITY_EXACT_START_MATCH = _env_bool('AVAILABILITY_EXACT_START_MATCH')

    # Callable returning naive UTC "now"; None means the wall clock
    SCHEDULING_CLOCK = None

    # Housekeeping
    EXPIRED_SLOT_RETENTION_DAYS = int(os.getenv('EXPIRED_SLOT_RETENTION_DAYS', '30'))

    # Celery Configuration
    CELERY_BROKER_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    CELERY_RESULT_BACKEND = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    CELERY_ACCEPT_CONTENT = ['json']
    CELERY_TASK_SERIALIZER = 'json'
    CELERY_RESULT_SERIALIZER = 'json'
    CELERY_TIMEZONE = 'UTC'
    CELERY_ENABLE_UTC = True
    CELERY_TASK_ALWAYS_EAGER = False

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', 'logs/app.log')

    # Comma-separated origins, or '*'
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Accept reserved domains such as .test in e-mail addresses
    EMAIL_TEST_ENVIRONMENT = _env_bool('EMAIL_TEST_ENVIRONMENT')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 3600,
        'pool_size': 20,
        'max_overflow': 40,
        'connect_args': {
            'connect_timeout': 10,
            'options': '-c statement_timeout=30000'
        }
    }

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')

    @staticmethod
    def validate(app):
        """Ensure SECRET_KEY is set"""
        secret = app.config.get('SECRET_KEY')
        if not secret or secret == 'dev-secret-key-change-in-production':
            raise ValueError("SECRET_KEY environment variable must be set in production and must not be the default value")


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv('TEST_DATABASE_URL', 'sqlite:///:memory:')
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = 'testing-jwt-secret-key-with-enough-length'
    BCRYPT_LOG_ROUNDS = 4
    CELERY_TASK_ALWAYS_EAGER = True
    EMAIL_TEST_ENVIRONMENT = True


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get configuration based on FLASK_ENV"""
    env = os.getenv('FLASK_ENV', 'development')
    return config.get(env, config['default'])
