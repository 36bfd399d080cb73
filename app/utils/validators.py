"""
Field validators shared by the profile and auth services.
All raise InvalidArgument so the API answers 400.
"""
from email_validator import EmailNotValidError, validate_email
from flask import current_app

from app.scheduling.errors import InvalidArgument

MIN_PASSWORD_LENGTH = 8


def require_text(value, label):
    """Return the trimmed value, or raise when it is missing or blank."""
    if value is None or not str(value).strip():
        raise InvalidArgument(f"{label} cannot be empty")
    return str(value).strip()


def normalize_email(value):
    """Syntax-check an address (no DNS lookup) and return it lower-cased."""
    email = require_text(value, 'Email')
    try:
        validated = validate_email(
            email,
            check_deliverability=False,
            test_environment=current_app.config.get('EMAIL_TEST_ENVIRONMENT', False),
        )
    except EmailNotValidError as e:
        current_app.logger.debug("Rejected email %r: %s", email, e)
        raise InvalidArgument("Email format is invalid")
    # Accounts are looked up case-insensitively
    return validated.normalized.lower()


def require_password(value, label='Password'):
    if not value or len(value) < MIN_PASSWORD_LENGTH:
        raise InvalidArgument(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters")
    return value
