"""
LenconDB
Blueprint registry and shared request helpers.
"""

from flask import g, request

from lencondb.models import db
from lencondb.services import project_service
from lencondb.utils.errors import E, api_error
from lencondb.utils.helpers import missing_fields, parse_date_input


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_fields(data: dict, *fields: str):
    """Return a 400 error tuple naming missing fields, or None."""
    missing = missing_fields(data, *fields)
    if missing:
        return api_error(
            E.VALIDATION_REQUIRED,
            f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
            details={"missing": missing},
        )
    return None


def query_date(name: str):
    """Parse an optional ISO date query parameter (ValueError on bad input)."""
    return parse_date_input(request.args.get(name), name)


def current_user_id() -> str | None:
    return getattr(g, "jwt_user_id", None)


def current_role() -> str | None:
    return getattr(g, "jwt_role", None)


def ensure_project_visible(project_id: str):
    """404 for an unknown project, 403 when the caller is not on its team (Employee/Trial)."""
    project = project_service.get_project(project_id)
    project_service.ensure_can_view(project, current_user_id(), current_role())
    return project


def visible_project_ids():
    return project_service.visible_project_ids(current_user_id(), current_role())


def register_input_errors(bp):
    """Answer malformed input (ValueError from parsing helpers) with 400."""

    @bp.errorhandler(ValueError)
    def _handle_bad_input(error: ValueError):
        db.session.rollback()
        return api_error(E.VALIDATION_INVALID, str(error))

    return bp

