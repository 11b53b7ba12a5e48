"""
Auth Blueprint — JWT authentication endpoints.

Endpoints:
  POST  /api/v1/auth/login            — email + password → user + JWT pair
  POST  /api/v1/auth/refresh          — refresh token → new JWT pair
  POST  /api/v1/auth/check            — current user profile
  POST  /api/v1/auth/logout           — revoke every token of the caller
  PATCH /api/v1/auth/change-password  — verify current password, set new one
  POST  /api/v1/auth/register         — create a user (Admin)
"""

import logging

from flask import Blueprint, jsonify

from lencondb import limiter
from lencondb.blueprints import current_user_id, json_body, register_input_errors, require_fields
from lencondb.middleware.rate_limiter import LOGIN_LIMIT
from lencondb.middleware.role_guards import admin_required
from lencondb.services import user_service
from lencondb.services.jwt_service import generate_token_pair
from lencondb.services.user_service import MIN_PASSWORD_LENGTH
from lencondb.utils.errors import E, api_error
from lencondb.utils.helpers import db_commit_or_error, parse_text

logger = logging.getLogger(__name__)

auth_bp = register_input_errors(Blueprint("auth", __name__, url_prefix="/api/v1/auth"))


def _session_payload(user, tokens: dict) -> dict:
    return {
        "user": user.to_dict(),
        "access_token": tokens["access_token"],
        "refresh_token": tokens["refresh_token"],
        "token_type": tokens["token_type"],
        "expires_in": tokens["expires_in"],
    }


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
@limiter.limit(LOGIN_LIMIT)
def login():
    """
    Authenticate with email + password, return JWT pair.

    Body: { "email": "...", "password": "..." }
    """
    data = json_body()
    err = require_fields(data, "email", "password")
    if err:
        return err
    email = parse_text(data["email"], "email")
    if not isinstance(data["password"], str):
        raise ValueError("password must be a string")
    if len(data["password"]) < MIN_PASSWORD_LENGTH:
        return api_error(
            E.VALIDATION_INVALID,
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    user, tokens = user_service.authenticate(email, data["password"])
    return jsonify(_session_payload(user, tokens)), 200


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/refresh
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    """
    Exchange a refresh token for a new token pair.

    Body: { "refresh_token": "..." }
    """
    data = json_body()
    err = require_fields(data, "refresh_token")
    if err:
        return err

    user, tokens = user_service.refresh_tokens(data["refresh_token"])
    return jsonify(_session_payload(user, tokens)), 200


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/check
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/check", methods=["POST", "GET"])
def check():
    """Return the authenticated user's profile."""
    user = user_service.get_user(current_user_id())
    return jsonify({"user": user.to_dict()}), 200


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/logout
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/logout", methods=["POST"])
def logout():
    """Invalidate every access and refresh token issued to the caller."""
    user = user_service.get_user(current_user_id())
    user_service.bump_token_version(user)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify({"message": "Logged out"}), 200


# ═══════════════════════════════════════════════════════════════
# PATCH /api/v1/auth/change-password
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/change-password", methods=["PATCH"])
def change_password():
    """
    Body: { "current_password": "...", "new_password": "..." }

    On success every existing session is invalidated; the response carries
    a fresh token pair so the caller stays signed in.
    """
    data = json_body()
    err = require_fields(data, "current_password", "new_password")
    if err:
        return err

    user = user_service.get_user(current_user_id())
    user_service.change_password(user, data["current_password"], data["new_password"])
    err = db_commit_or_error()
    if err:
        return err

    return jsonify({
        "message": "Password changed",
        **_session_payload(user, generate_token_pair(user)),
    }), 200


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/register  (Admin)
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/register", methods=["POST"])
@admin_required
def register():
    """
    Create a user account.

    Body: { first_name, last_name, email, phone, password, role?,
            telegram_id?, salary?, date_birth? }
    """
    data = json_body()
    err = require_fields(data, "first_name", "last_name", "email", "phone", "password")
    if err:
        return err

    user = user_service.create_user(data)
    err = db_commit_or_error()
    if err:
        return err
    return jsonify(user.to_dict()), 201
