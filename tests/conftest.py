"""
Shared pytest fixtures for all tests.

The app runs on TestingConfig (SQLite in-memory) with the scheduling clock
pinned to NOW, so "tomorrow" is always 2024-01-10.
"""
import itertools
from datetime import date, datetime

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from app.extensions import db
from app.models import Doctor, Patient, User
from app.services.auth_service import token_claims

NOW = datetime(2024, 1, 9, 12, 0)
TODAY = NOW.date()
TOMORROW = date(2024, 1, 10)

DEFAULT_PASSWORD = 'Secret123!'


def fixed_clock():
    return NOW


# ============================================================================
# APPLICATION
# ============================================================================


@pytest.fixture
def app():
    """Flask app with fresh tables and the pinned clock."""
    app = create_app('testing')
    app.config['SCHEDULING_CLOCK'] = fixed_clock

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


# ============================================================================
# FACTORIES
# ============================================================================


@pytest.fixture
def make_doctor(app):
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        fields = {
            'first_name': 'Gregory',
            'last_name': f'House{n}',
            'email': f'doctor{n}@clinic.test',
            'specialization': 'Diagnostics',
            'is_available': True,
        }
        fields.update(overrides)
        doctor = Doctor(**fields)
        db.session.add(doctor)
        db.session.commit()
        return doctor

    return _make


@pytest.fixture
def make_patient(app):
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        fields = {
            'first_name': 'Ada',
            'last_name': f'Lovelace{n}',
            'email': f'patient{n}@clinic.test',
        }
        fields.update(overrides)
        patient = Patient(**fields)
        db.session.add(patient)
        db.session.commit()
        return patient

    return _make


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make(role='patient', password=DEFAULT_PASSWORD, **overrides):
        n = next(counter)
        fields = {
            'email': f'{role}{n}@users.test',
            'first_name': role.title(),
            'last_name': f'User{n}',
            'role': role,
            'is_active': True,
        }
        fields.update(overrides)
        user = User(**fields)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def auth_headers(app):
    """Authorization header carrying an access token for ``user``."""
    def _headers(user):
        token = create_access_token(identity=str(user.id), additional_claims=token_claims(user))
        return {'Authorization': f'Bearer {token}'}

    return _headers


@pytest.fixture
def doctor(make_doctor):
    return make_doctor()


@pytest.fixture
def patient(make_patient):
    return make_patient()


@pytest.fixture
def admin_headers(make_user, auth_headers):
    return auth_headers(make_user('admin'))


@pytest.fixture
def receptionist_headers(make_user, auth_headers):
    return auth_headers(make_user('receptionist'))
