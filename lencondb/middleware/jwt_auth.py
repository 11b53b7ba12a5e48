"""
JWT Auth Middleware — authorization gate for the REST API.

Every ``/api/v1/*`` request outside ``JWT_SKIP_PREFIXES`` must carry
``Authorization: Bearer <access token>``. The token is decoded and the
user's current ``token_version`` is re-read from the database, so bumping
the counter (logout, password change, admin invalidation) revokes every
token issued before.

On success the request context holds:
    g.current_user  — decoded payload dict
    g.jwt_user_id   — user id (payload "sub")
    g.jwt_role      — role name
"""

import logging

import jwt as pyjwt
from flask import g, request

from lencondb.models import db
from lencondb.models.user import User
from lencondb.services.jwt_service import decode_access_token
from lencondb.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/v1/auth/login",
    "/api/v1/auth/refresh",
    "/api/v1/health",
)


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.current_user = None
        g.jwt_user_id = None
        g.jwt_role = None

        path = request.path
        if not path.startswith("/api/v1/") or request.method == "OPTIONS":
            return None
        if path.startswith(JWT_SKIP_PREFIXES):
            return None

        token = _bearer_token()
        if not token:
            return api_error(E.UNAUTHORIZED, "No token provided")

        try:
            payload = decode_access_token(token)
        except pyjwt.InvalidTokenError as exc:
            logger.info("Rejected token on %s: %s", path, exc)
            return api_error(E.UNAUTHORIZED, "Invalid or expired token")

        user = db.session.get(User, payload.get("sub"))
        if user is None or (user.token_version or 0) != payload.get("token_version"):
            logger.info("Rejected stale session for user=%s on %s", payload.get("sub"), path)
            return api_error(E.UNAUTHORIZED, "Session has been invalidated")

        g.current_user = payload
        g.jwt_user_id = user.id
        # Role is read from the row so a role change applies immediately
        g.jwt_role = user.role
        return None
