from flask import Flask, jsonify, has_app_context
from werkzeug.exceptions import HTTPException
from .extensions import db, migrate, bcrypt, jwt, celery
from .scheduling.errors import SchedulingError, InvalidArgument, NotFound, Conflict
import logging
import os

logger = logging.getLogger(__name__)

# Scheduling errors and the HTTP status they map to
ERROR_STATUS = (
    (InvalidArgument, 400),
    (NotFound, 404),
    (Conflict, 409),
)


def _configure_logging(app):
    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s'
    )

    if app.debug or app.testing:
        return

    from logging.handlers import RotatingFileHandler

    log_file = app.config['LOG_FILE']
    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    file_handler = RotatingFileHandler(log_file, maxBytes=10240000, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    ))
    file_handler.setLevel(logging.INFO)
    app.logger.addHandler(file_handler)
    app.logger.setLevel(logging.INFO)
    app.logger.info('Application startup')


def _init_jwt(app):
    jwt.init_app(app)

    def _unauthorized(message):
        return jsonify({'success': False, 'error': message}), 401

    @jwt.unauthorized_loader
    def missing_token(reason):
        return _unauthorized('Authentication required')

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return _unauthorized(f'Invalid token: {reason}')

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return _unauthorized('Token has expired')

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return _unauthorized('Token has been revoked')


def _init_celery(app):
    celery.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        task_serializer=app.config['CELERY_TASK_SERIALIZER'],
        accept_content=app.config['CELERY_ACCEPT_CONTENT'],
        result_serializer=app.config['CELERY_RESULT_SERIALIZER'],
        timezone=app.config['CELERY_TIMEZONE'],
        enable_utc=app.config['CELERY_ENABLE_UTC'],
        task_always_eager=app.config['CELERY_TASK_ALWAYS_EAGER'],
    )

    class FlaskAppContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""
        def __call__(self, *args, **kwargs):
            if has_app_context():
                return self.run(*args, **kwargs)
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = FlaskAppContextTask


def _register_error_handlers(app):
    @app.errorhandler(SchedulingError)
    def scheduling_error(error):
        status = 500
        for error_class, code in ERROR_STATUS:
            if isinstance(error, error_class):
                status = code
                break
        db.session.rollback()
        logger.warning("%s: %s", type(error).__name__, error.message)
        return jsonify({
            'success': False,
            'error': error.message
        }), status

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Endpoint not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method not allowed'
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal Server Error: {error}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Internal server error. Check server logs for details.'
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({
                'success': False,
                'error': e.description
            }), e.code
        db.session.rollback()
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Internal server error. Check server logs for details.'
        }), 500


def register_cli(app):
    """flask create-db / drop-db / seed-demo"""
    import click

    @app.cli.command('create-db')
    def create_db():
        """Create all tables (use flask db upgrade for managed schemas)."""
        db.create_all()
        click.echo('Database tables created')

    @app.cli.command('drop-db')
    @click.confirmation_option(prompt='This deletes every table. Continue?')
    def drop_db():
        db.drop_all()
        click.echo('Database tables dropped')

    @app.cli.command('seed-demo')
    @click.option('--password', default='ChangeMe123!', show_default=True,
                  help='Password given to every demo login.')
    def seed_demo(password):
        """Create demo staff users and doctors."""
        from app.seeds import seed_demo_data
        created = seed_demo_data(password=password)
        click.echo(f"Created {created['users']} users and {created['doctors']} doctors")


def create_app(config_name=None):
    """Create Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from app.config import config
        config_class = config.get(config_name, config['default'])
    else:
        from app.config import get_config
        config_class = get_config()
    app.config.from_object(config_class)

    validate = getattr(config_class, 'validate', None)
    if validate is not None:
        validate(app)

    _configure_logging(app)

    # Initialize extensions first (before error handlers)
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    _init_jwt(app)

    from app.utils.cors import init_cors
    init_cors(app)

    _init_celery(app)
    _register_error_handlers(app)

    from app.middleware import setup_middleware
    setup_middleware(app)

    with app.app_context():
        from . import models  # noqa: F401  registers tables with SQLAlchemy

        from .routes import auth_bp, patient_bp, doctor_bp, appointment_bp, time_slot_bp, health_bp
        app.register_blueprint(health_bp)
        app.register_blueprint(auth_bp)
        app.register_blueprint(patient_bp)
        app.register_blueprint(doctor_bp)
        app.register_blueprint(appointment_bp)
        app.register_blueprint(time_slot_bp)

    register_cli(app)

    return app
