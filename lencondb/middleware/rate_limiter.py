"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter. The Limiter
instance is created in lencondb/__init__.py with no default limits; this
module applies granular limits per route category.

Usage:
    from lencondb.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

LOGIN_LIMIT = "10/minute"
WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"

# Blueprints whose routes mostly mutate data
WRITE_BLUEPRINTS = (
    "company", "project", "construction", "document", "payment_schedule",
    "workload_plan", "workload_actual", "users", "chat_log",
)


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Login:            10/minute  (declared on the route in auth_bp)
        - Write blueprints: 60/minute
        - Analytics:        200/minute (read-only reports)
        - Health check:     exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    for bp_name in WRITE_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    bp = app.blueprints.get("analytics")
    if bp:
        limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info(
        "Rate limiter configured — login: %s, write: %s, read: %s",
        LOGIN_LIMIT, WRITE_LIMIT, READ_LIMIT,
    )
