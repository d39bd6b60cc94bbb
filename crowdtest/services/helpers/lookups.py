"""
Identifier validation and point lookups shared by the services.

Every service that takes a ``userId`` from the outside runs it through
``require_id`` first, so malformed input is rejected before any query is
issued, then resolves it with ``get_or_raise``.

Usage:
    user_id = require_id(raw_user_id, field="userId")
    user = get_or_raise(User, user_id)
"""

import logging
import re

from sqlalchemy import select

from crowdtest.core.exceptions import NotFoundError, ValidationError
from crowdtest.models import db

logger = logging.getLogger(__name__)

MAX_ID_LENGTH = 64
# Opaque ids: seeded slugs ("user-tester-ava") and uuid4 hex both match.
_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-]*$")


def require_id(value, *, field: str = "id") -> str:
    """Return a stripped identifier or raise ValidationError.

    Raises:
        ValidationError: ``required=True`` when the value is missing or
            blank; otherwise when it is not a string, too long, or contains
            characters outside ``[A-Za-z0-9_-]``.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing {field}", details={field: "required"}, required=True)
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field}", details={field: "must be a string"})

    value = value.strip()
    if len(value) > MAX_ID_LENGTH:
        raise ValidationError(
            f"Invalid {field}",
            details={field: f"must be at most {MAX_ID_LENGTH} characters"},
        )
    if not _ID_PATTERN.match(value):
        raise ValidationError(f"Invalid {field}", details={field: "malformed identifier"})
    return value


def get_or_raise(model, pk: str):
    """Fetch a single entity by primary key.

    Raises:
        NotFoundError: If no row has this key.
    """
    result = db.session.execute(select(model).where(model.id == pk)).scalar_one_or_none()
    if result is None:
        logger.debug("get_or_raise: %s id=%s not found", model.__name__, pk)
        raise NotFoundError(resource=model.__name__, resource_id=pk)
    return result
