"""JSON error envelope shared by every LenconDB endpoint.

Every error body has the same shape::

    {"error": "Project not found", "code": "ERR_NOT_FOUND", "request_id": "4f1c0e9a2b7d"}

plus an optional ``details`` object (field errors, counts of blocking rows).

    from lencondb.utils.errors import api_error, E

    return api_error(E.VALIDATION_REQUIRED, "project_id is required")
    return api_error(E.CONFLICT_STATE, "Company has 2 linked project(s)")
"""

from __future__ import annotations

from flask import g, has_request_context, jsonify


class E:
    """Error codes. The HTTP status each one maps to is in ``_STATUS``."""

    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"    # missing field / file
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"      # unparsable value
    BUSINESS_RULE = "ERR_BUSINESS_RULE"                # parsable, but breaks a rule
    UNAUTHORIZED = "ERR_UNAUTHORIZED"
    FORBIDDEN = "ERR_FORBIDDEN"
    NOT_FOUND = "ERR_NOT_FOUND"
    METHOD_NOT_ALLOWED = "ERR_METHOD_NOT_ALLOWED"
    CONFLICT_DUPLICATE = "ERR_CONFLICT_DUPLICATE"      # unique email, one plan per day, ...
    CONFLICT_STATE = "ERR_CONFLICT_STATE"              # row still referenced
    PAYLOAD_TOO_LARGE = "ERR_PAYLOAD_TOO_LARGE"
    RATE_LIMITED = "ERR_RATE_LIMITED"
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.BUSINESS_RULE: 422,
    E.UNAUTHORIZED: 401,
    E.FORBIDDEN: 403,
    E.NOT_FOUND: 404,
    E.METHOD_NOT_ALLOWED: 405,
    E.CONFLICT_DUPLICATE: 409,
    E.CONFLICT_STATE: 409,
    E.PAYLOAD_TOO_LARGE: 413,
    E.RATE_LIMITED: 429,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}


def api_error(code: str, message: str, *, status: int | None = None, details: dict | None = None):
    """Build ``(response, status)`` for a Flask view or error handler.

    ``status`` overrides the code's default; unknown codes fall back to 400.
    """
    body: dict = {"error": message, "code": code}
    if details:
        body["details"] = details
    if has_request_context() and getattr(g, "request_id", None):
        body["request_id"] = g.request_id
    return jsonify(body), status or _STATUS.get(code, 400)
