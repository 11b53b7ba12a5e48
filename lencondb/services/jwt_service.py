"""
JWT Service — Token generation and verification.

Access token:  15 minutes (JWT_ACCESS_EXPIRES), signed with JWT_ACCESS_SECRET
Refresh token: 7 days     (JWT_REFRESH_EXPIRES), signed with JWT_REFRESH_SECRET
Algorithm:     HS256

Token payload (access):
{
    "sub": <user_id>,
    "email": <email>,
    "role": "Manager",
    "token_version": <users.token_version at issue time>,
    "type": "access",
    "iat": <issued_at>,
    "exp": <expires_at>,
    "jti": <unique_id>
}

The refresh payload carries the same identity with ``"type": "refresh"``.
A token is only honoured while its ``token_version`` equals the user's
current counter (see ``user_service.bump_token_version``).
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app


# ─── Defaults ────────────────────────────────────────────────
DEFAULT_ACCESS_EXPIRES = 900       # 15 minutes
DEFAULT_REFRESH_EXPIRES = 604800   # 7 days
ALGORITHM = "HS256"


def _get_secret(token_type: str) -> str:
    if token_type == "refresh":
        return current_app.config.get("JWT_REFRESH_SECRET") or current_app.config["SECRET_KEY"]
    return current_app.config.get("JWT_ACCESS_SECRET") or current_app.config["SECRET_KEY"]


def _get_access_expires() -> int:
    return current_app.config.get("JWT_ACCESS_EXPIRES", DEFAULT_ACCESS_EXPIRES)


def _get_refresh_expires() -> int:
    return current_app.config.get("JWT_REFRESH_EXPIRES", DEFAULT_REFRESH_EXPIRES)


def _build_payload(user, token_type: str, lifetime: int) -> dict:
    now = datetime.now(timezone.utc)
    return {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "token_version": user.token_version or 0,
        "type": token_type,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
        "jti": str(uuid.uuid4()),
    }


# ═══════════════════════════════════════════════════════════════
# Token Generation
# ═══════════════════════════════════════════════════════════════
def generate_access_token(user) -> str:
    """Generate a short-lived access token for a User."""
    payload = _build_payload(user, "access", _get_access_expires())
    return jwt.encode(payload, _get_secret("access"), algorithm=ALGORITHM)


def generate_refresh_token(user) -> str:
    """Generate a long-lived refresh token for a User."""
    payload = _build_payload(user, "refresh", _get_refresh_expires())
    return jwt.encode(payload, _get_secret("refresh"), algorithm=ALGORITHM)


def generate_token_pair(user) -> dict:
    """Generate both access + refresh tokens."""
    return {
        "access_token": generate_access_token(user),
        "refresh_token": generate_refresh_token(user),
        "token_type": "Bearer",
        "expires_in": _get_access_expires(),
    }


# ═══════════════════════════════════════════════════════════════
# Token Verification
# ═══════════════════════════════════════════════════════════════
def decode_token(token: str, expected_type: str = "access") -> dict:
    """
    Decode and verify a JWT token.

    Returns the payload dict on success.
    Raises jwt.exceptions on failure (ExpiredSignatureError, InvalidTokenError, etc.)
    """
    payload = jwt.decode(token, _get_secret(expected_type), algorithms=[ALGORITHM])

    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Expected {expected_type} token, got {payload.get('type')}")

    return payload


def decode_access_token(token: str) -> dict:
    """Decode an access token — convenience wrapper."""
    return decode_token(token, expected_type="access")


def decode_refresh_token(token: str) -> dict:
    """Decode a refresh token — convenience wrapper."""
    return decode_token(token, expected_type="refresh")
