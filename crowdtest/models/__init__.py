"""
CrowdTest Platform
SQLAlchemy models package.

The shared ``db`` handle lives here so every model module can do
``from crowdtest.models import db`` without importing the app factory.
"""

import uuid
from datetime import timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def new_id() -> str:
    """Opaque string primary key for new rows."""
    return uuid.uuid4().hex


def utc_iso(value):
    """ISO-8601 string for a stored timestamp, always with a UTC offset.

    SQLite hands ``DateTime(timezone=True)`` columns back as naive values;
    those are stored as UTC, so the offset is restored here.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
