"""
Crypto utilities — bcrypt password hashing for platform logins.

Every stored ``User.password_hash`` is written by ``hash_password``; anything
that is not a bcrypt hash (including an empty column) never verifies.
"""

import bcrypt

_BCRYPT_PREFIXES = ("$2b$", "$2a$", "$2y$")


def hash_password(plain_password: str, rounds: int = 12) -> str:
    """Hash a plain-text password with bcrypt (12 rounds by default)."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    """Check a plain-text password against a stored bcrypt hash."""
    if not password_hash or not password_hash.startswith(_BCRYPT_PREFIXES):
        return False
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        password_hash.encode("utf-8"),
    )
