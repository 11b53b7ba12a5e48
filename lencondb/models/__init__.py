"""
LenconDB
SQLAlchemy extension instance and shared column helpers.

Every model module imports ``db`` from here; the application factory binds
it to the Flask app with ``db.init_app(app)``.
"""

import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def new_uuid() -> str:
    """Primary-key default for all tables (UUID4 as text)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso(value):
    """Serialize a date/datetime column value (or None) for API responses."""
    return value.isoformat() if value else None
