"""
User service — authentication, session versioning and user administration.

Transaction policy: functions flush, never commit. The route handler owns
the commit via ``db_commit_or_error()``.

Session model: there is no refresh-token table. Each user row carries a
``token_version`` counter embedded into every token; ``bump_token_version``
invalidates all outstanding access and refresh tokens at once.
"""

import logging
from datetime import date

import jwt as pyjwt
from email_validator import EmailNotValidError, validate_email
from flask import current_app
from sqlalchemy import select

from lencondb.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from lencondb.models import db
from lencondb.models.project import Project
from lencondb.models.user import ROLE_EMPLOYEE, ROLES, WORKFORCE_ROLES, User
from lencondb.models.workload import WorkloadPlan
from lencondb.services.jwt_service import decode_refresh_token, generate_token_pair
from lencondb.utils.crypto import hash_password, verify_password
from lencondb.utils.helpers import parse_date, parse_text

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

# Fields an Admin may change through PATCH /users/<id>
UPDATABLE_FIELDS = ("first_name", "last_name", "phone", "telegram_id", "salary", "date_birth")


# ── Lookups ──────────────────────────────────────────────────────────────


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError(resource="User", resource_id=user_id)
    return user


def get_user_by_email(email: str) -> User | None:
    return User.query.filter(db.func.lower(User.email) == email.strip().lower()).first()


def list_users() -> list[User]:
    return User.query.order_by(User.created_at.desc()).all()


def list_available_employees(on_date: date) -> list[User]:
    """Employees and Managers with no workload plan on ``on_date``."""
    planned = select(WorkloadPlan.user_id).where(WorkloadPlan.date == on_date)
    return (
        User.query
        .filter(User.role.in_(WORKFORCE_ROLES), User.id.not_in(planned))
        .order_by(User.last_name, User.first_name)
        .all()
    )


# ── Validation helpers ───────────────────────────────────────────────────


def normalize_email(email: str) -> str:
    """Validate and normalise an e-mail address (syntax only, no DNS)."""
    email = parse_text(email, "email")
    try:
        return validate_email(email, check_deliverability=False).normalized.lower()
    except EmailNotValidError as exc:
        raise ValidationError("Invalid email address", details={"email": str(exc)}) from exc


def _check_password(password: str, field: str = "password") -> None:
    if not isinstance(password, str):
        raise ValueError(f"{field} must be a string")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            details={field: "too short"},
        )


def _hash(password: str) -> str:
    return hash_password(password, rounds=current_app.config.get("BCRYPT_ROUNDS", 12))


def _ensure_unique(email: str | None = None, phone: str | None = None, exclude_id: str | None = None):
    if email:
        q = User.query.filter(db.func.lower(User.email) == email.lower())
        if exclude_id:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise ConflictError(resource="User", field="email", value=email)
    if phone:
        q = User.query.filter(User.phone == phone)
        if exclude_id:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise ConflictError(resource="User", field="phone", value=phone)


# ═══════════════════════════════════════════════════════════════
# Authentication
# ═══════════════════════════════════════════════════════════════


def authenticate(email: str, password: str) -> tuple[User, dict]:
    """Check credentials and issue a token pair.

    Raises:
        AuthenticationError: unknown e-mail or wrong password (same message for both).
    """
    user = get_user_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise AuthenticationError("Invalid email or password")
    logger.info("User %s logged in", user.id)
    return user, generate_token_pair(user)


def refresh_tokens(refresh_token: str) -> tuple[User, dict]:
    """Exchange a refresh token for a new pair.

    The token must verify, still belong to an existing user and carry the
    user's current ``token_version``.
    """
    try:
        payload = decode_refresh_token(refresh_token)
    except pyjwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid or expired refresh token") from exc

    user = db.session.get(User, payload.get("sub"))
    if user is None or (user.token_version or 0) != payload.get("token_version"):
        raise AuthenticationError("Session has been invalidated")
    return user, generate_token_pair(user)


def bump_token_version(user: User) -> int:
    """Increment the user's token counter, revoking every issued token."""
    user.token_version = (user.token_version or 0) + 1
    db.session.flush()
    logger.info("Sessions invalidated for user %s (token_version=%d)", user.id, user.token_version)
    return user.token_version


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        logger.warning("Password change rejected for user %s: wrong current password", user.id)
        raise AuthenticationError("Current password is incorrect")
    _check_password(new_password, field="new_password")
    user.password_hash = _hash(new_password)
    bump_token_version(user)


# ═══════════════════════════════════════════════════════════════
# Administration
# ═══════════════════════════════════════════════════════════════


def create_user(data: dict) -> User:
    """Register a user (Admin operation).

    Required: first_name, last_name, email, phone, password.
    Optional: role (default Employee), telegram_id, salary, date_birth.
    """
    email = normalize_email(data["email"])
    phone = str(data["phone"]).strip()
    _check_password(data.get("password", ""))

    role = data.get("role") or ROLE_EMPLOYEE
    if role not in ROLES:
        raise ValidationError(f"Invalid role: {role}", details={"role": f"one of {', '.join(ROLES)}"})

    _ensure_unique(email=email, phone=phone)

    user = User(
        first_name=parse_text(data["first_name"], "first_name"),
        last_name=parse_text(data["last_name"], "last_name"),
        email=email,
        phone=phone,
        password_hash=_hash(data["password"]),
        role=role,
        telegram_id=data.get("telegram_id"),
        salary=data.get("salary"),
        date_birth=parse_date(data.get("date_birth")),
    )
    db.session.add(user)
    db.session.flush()
    logger.info("User %s registered with role %s", user.id, role)
    return user


def update_user(user: User, data: dict) -> User:
    if "email" in data:
        email = normalize_email(data["email"])
        _ensure_unique(email=email, exclude_id=user.id)
        user.email = email
    if "phone" in data:
        _ensure_unique(phone=str(data["phone"]).strip(), exclude_id=user.id)

    for field in UPDATABLE_FIELDS:
        if field in data:
            value = data[field]
            if field == "date_birth":
                value = parse_date(value)
            elif field in ("first_name", "last_name"):
                value = parse_text(value, field)
            elif field == "phone":
                value = str(value).strip()
            setattr(user, field, value)

    if "role" in data:
        if data["role"] not in ROLES:
            raise ValidationError(f"Invalid role: {data['role']}")
        user.role = data["role"]

    if data.get("password"):
        _check_password(data["password"])
        user.password_hash = _hash(data["password"])
        bump_token_version(user)

    db.session.flush()
    return user


def delete_user(user: User) -> None:
    """Delete a user and their personal rows.

    Refused while the user manages a project.
    """
    managed = Project.query.filter_by(manager_id=user.id).count()
    if managed:
        raise ConflictError(
            resource="User",
            message=f"User manages {managed} project(s); reassign them first",
        )
    db.session.delete(user)
    db.session.flush()
    logger.info("User %s deleted", user.id)
