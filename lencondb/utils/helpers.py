"""Shared helpers for blueprints and services.

parse_date:          lenient date parsing (returns None on bad input)
parse_date_input:    strict date parsing (raises ValueError on bad input)
parse_float:         strict number parsing for hours / amounts
parse_text:          strict string parsing for names and free text
parse_bool:          strict boolean parsing for flags
missing_fields:      names of required body fields that are empty
db_commit_or_error:  commit the request's unit of work, mapping failures to JSON errors
"""
import logging
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError, OperationalError

from lencondb.models import db
from lencondb.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD
    - YYYY-MM-DDTHH:MM:SS (datetime ISO → .date())
    - DD.MM.YYYY
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(str(value), "%d.%m.%Y").date()
    except (ValueError, TypeError):
        return None


def parse_date_input(value, field="date"):
    """Parse a date, raising ValueError on bad input.

    Empty input returns None; callers decide whether the field is required.
    """
    if value in (None, ""):
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"{field}: invalid date format. Use YYYY-MM-DD or DD.MM.YYYY.")
    return parsed


def parse_float(value, field):
    """Parse a number from JSON/form input, raising ValueError on bad input."""
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    try:
        return float(value)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"{field} must be a number") from exc


def parse_text(value, field):
    """Strip a text value from JSON input. None reads as an empty string.

    Raises ValueError for numbers, lists and other non-string values.
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    return value.strip()


_TRUE = ("true", "1", "yes")
_FALSE = ("false", "0", "no")


def parse_bool(value, field):
    """Parse a JSON boolean; the strings true/false, 1/0 and yes/no are accepted too."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE + _FALSE:
        return value.strip().lower() in _TRUE
    raise ValueError(f"{field} must be true or false")


def missing_fields(data: dict, *fields: str) -> list[str]:
    """Return the required fields that are absent or blank in ``data``."""
    missing = []
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


# ── Database commit helper ───────────────────────────────────────────────────

def db_commit_or_error():
    """Commit the current SQLAlchemy session, returning an error response on failure.

    Returns:
        None on success.
        (response, status_code) tuple on failure — ready for ``return``.

    Usage::

        err = db_commit_or_error()
        if err:
            return err

    IntegrityError → 409 (duplicate / constraint violation)
    OperationalError → 500 (connection / lock issues)
    """
    try:
        db.session.commit()
        return None
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error on commit: %s", exc.orig)
        return api_error(E.CONFLICT_DUPLICATE, "Duplicate or constraint violation")
    except OperationalError:
        db.session.rollback()
        logger.exception("Database operational error on commit")
        return api_error(E.DATABASE, "Database error")
