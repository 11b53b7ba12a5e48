"""
Role guards — decorators restricting a route to a set of roles.

All guards come from one factory, ``require_roles(*roles)``:

    admin_required              Admin
    manager_required            Admin, Manager
    manager_or_trial_required   Admin, Manager, Trial
    not_trial_required          Admin, Manager, Employee

Usage:
    @company_bp.route("", methods=["POST"])
    @admin_required
    def create_company():
        ...

The JWT middleware has already authenticated the caller; a request that
reaches a guard without ``g.jwt_role`` is answered with 401.
"""

import functools
import logging

from flask import g, request

from lencondb.models.user import ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_TRIAL
from lencondb.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def require_roles(*roles: str):
    """Build a decorator that allows only callers whose role is in ``roles``."""
    allowed = frozenset(roles)

    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            role = getattr(g, "jwt_role", None)
            if role is None:
                return api_error(E.UNAUTHORIZED, "Authentication required")
            if role not in allowed:
                logger.warning(
                    "User %s (%s) denied on %s %s: requires one of %s",
                    getattr(g, "jwt_user_id", None), role,
                    request.method, request.path, sorted(allowed),
                )
                return api_error(E.FORBIDDEN, "Insufficient permissions")
            return f(*args, **kwargs)
        return decorated
    return decorator


admin_required = require_roles(ROLE_ADMIN)
manager_required = require_roles(ROLE_ADMIN, ROLE_MANAGER)
manager_or_trial_required = require_roles(ROLE_ADMIN, ROLE_MANAGER, ROLE_TRIAL)
not_trial_required = require_roles(ROLE_ADMIN, ROLE_MANAGER, ROLE_EMPLOYEE)


def is_manager_or_admin(role: str | None = None) -> bool:
    """True when the caller (or the given role) is Admin or Manager."""
    role = role if role is not None else getattr(g, "jwt_role", None)
    return role in (ROLE_ADMIN, ROLE_MANAGER)
