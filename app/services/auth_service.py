"""
Auth Service
Registration, login and token lifecycle for API users.

Every flow returns an AuthResult: AuthSuccess carrying the user (and tokens
when issued), or AuthFailure carrying the reason and the HTTP status to use.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from flask import current_app
from flask_jwt_extended import create_access_token, create_refresh_token, decode_token

from app.extensions import db
from app.models import Patient, User
from app.scheduling.errors import InvalidArgument
from app.services.scheduling import get_clock
from app.utils.validators import normalize_email, require_password, require_text

logger = logging.getLogger(__name__)


@dataclass
class AuthTokens:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = 'bearer'

    def to_dict(self):
        return {
            'access_token': self.access_token,
            'refresh_token': self.refresh_token,
            'token_type': self.token_type,
            'expires_in': self.expires_in,
        }


@dataclass
class AuthSuccess:
    user: User
    tokens: Optional[AuthTokens] = None
    message: str = 'OK'

    ok = True


@dataclass
class AuthFailure:
    reason: str
    status: int = 400
    details: dict = field(default_factory=dict)

    ok = False


AuthResult = Union[AuthSuccess, AuthFailure]


def token_claims(user: User) -> dict:
    """Additional JWT claims; identity is the user id."""
    return {
        'email': user.email,
        'role': user.role,
        'patient_id': user.patient_id,
        'doctor_id': user.doctor_id,
    }


def issue_tokens(user: User) -> AuthTokens:
    """
    Create an access/refresh pair and remember the refresh token's JTI.

    Only the most recently issued refresh token is accepted by refresh().
    The caller commits the session.
    """
    identity = str(user.id)
    claims = token_claims(user)
    access_token = create_access_token(identity=identity, additional_claims=claims, fresh=True)
    refresh_token = create_refresh_token(identity=identity, additional_claims=claims)

    decoded = decode_token(refresh_token)
    user.refresh_token_jti = decoded['jti']
    user.refresh_token_expires_at = get_clock()() + current_app.config['JWT_REFRESH_TOKEN_EXPIRES']

    expires_in = int(current_app.config['JWT_ACCESS_TOKEN_EXPIRES'].total_seconds())
    return AuthTokens(access_token=access_token, refresh_token=refresh_token, expires_in=expires_in)


def register(email: str, password: str, first_name: str, last_name: str,
             phone: Optional[str] = None) -> AuthResult:
    """Self-registration: creates a Patient and a patient User linked to it, then logs in."""
    try:
        email = normalize_email(email)
        require_password(password)
        first_name = require_text(first_name, 'First name')
        last_name = require_text(last_name, 'Last name')
    except InvalidArgument as e:
        return AuthFailure(e.message, 400)

    if User.query.filter_by(email=email).first() is not None:
        return AuthFailure('Email is already registered', 409)
    if Patient.query.filter_by(email=email).first() is not None:
        return AuthFailure('Email is already registered', 409)

    now = get_clock()()
    phone = phone.strip() if phone and phone.strip() else None
    patient = Patient(first_name=first_name, last_name=last_name, email=email, phone=phone, created_at=now)
    patient.refresh_profile_completeness()
    db.session.add(patient)
    db.session.flush()

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        role='patient',
        is_active=True,
        patient_id=patient.id,
        created_at=now,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.flush()

    tokens = issue_tokens(user)
    user.last_login_at = now
    user.login_count = 1
    db.session.commit()
    logger.info("User registered: %s (patient %s)", user.email, patient.id)
    return AuthSuccess(user, tokens, 'Registration successful')


def login(email: str, password: str) -> AuthResult:
    if not email or not password:
        return AuthFailure('Email and password are required', 400)

    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None or not user.check_password(password):
        logger.warning("Failed login for %s", email)
        return AuthFailure('Invalid email or password', 401)
    if not user.is_active:
        return AuthFailure('Account is deactivated. Please contact support.', 403)

    tokens = issue_tokens(user)
    user.last_login_at = get_clock()()
    user.login_count = (user.login_count or 0) + 1
    db.session.commit()
    logger.info("User %s logged in", user.id)
    return AuthSuccess(user, tokens, 'Login successful')


def refresh(user_id: int, jti: str) -> AuthResult:
    """Rotate tokens for a presented refresh token (identified by its JTI)."""
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return AuthFailure('Invalid token', 401)

    now = get_clock()()
    if (user.refresh_token_jti is None or user.refresh_token_jti != jti
            or user.refresh_token_expires_at is None or user.refresh_token_expires_at <= now):
        logger.warning("Rejected refresh token for user %s", user_id)
        return AuthFailure('Invalid or expired refresh token', 401)

    tokens = issue_tokens(user)
    db.session.commit()
    return AuthSuccess(user, tokens, 'Token refreshed successfully')


def revoke(user_id: int) -> bool:
    """Invalidate the user's refresh token. Returns False for unknown users."""
    user = db.session.get(User, user_id)
    if user is None:
        return False
    user.refresh_token_jti = None
    user.refresh_token_expires_at = None
    db.session.commit()
    logger.info("Refresh token revoked for user %s", user_id)
    return True


def change_password(user_id: int, current_password: str, new_password: str) -> AuthResult:
    user = db.session.get(User, user_id)
    if user is None:
        return AuthFailure('User not found', 404)
    if not current_password or not user.check_password(current_password):
        return AuthFailure('Current password is incorrect', 400)
    try:
        require_password(new_password, 'New password')
    except InvalidArgument as e:
        return AuthFailure(e.message, 400)

    user.set_password(new_password)
    # Existing refresh tokens stop working after a password change
    user.refresh_token_jti = None
    user.refresh_token_expires_at = None
    user.updated_at = get_clock()()
    db.session.commit()
    logger.info("Password changed for user %s", user_id)
    return AuthSuccess(user, message='Password changed successfully')
