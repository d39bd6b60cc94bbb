"""
Auth Service — email/password login.

Returns the serialized user on success. Session issuance is left to the
client; the platform identifies callers by ``userId`` on each request.
"""

import logging
import re

from sqlalchemy import func, select

from crowdtest.core.exceptions import AuthenticationError, ValidationError
from crowdtest.models import db
from crowdtest.models.user import User
from crowdtest.utils.crypto import verify_password

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def authenticate(data) -> User:
    """Validate a login payload and return the matching user.

    Raises:
        ValidationError: email malformed or password shorter than 6 chars.
        AuthenticationError: unknown email or wrong password (same message).
    """
    data = data if isinstance(data, dict) else {}
    email = data.get("email")
    password = data.get("password")

    errors = {}
    if not isinstance(email, str) or not _EMAIL_RE.match(email.strip()):
        errors["email"] = "must be a valid email address"
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"must be at least {MIN_PASSWORD_LENGTH} characters"
    if errors:
        raise ValidationError("Invalid login payload", details=errors)

    user = db.session.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    ).scalar_one_or_none()

    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for %s", email.strip().lower())
        raise AuthenticationError()

    logger.info("User %s logged in", user.id)
    return user
