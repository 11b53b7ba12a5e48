"""
Health check blueprint (no auth).

Endpoints:
    GET /api/v1/health        — basic status
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — database round-trip with latency
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from lencondb.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("", methods=["GET"])
def health():
    return jsonify({"status": "ok", "app": "LenconDB"}), 200


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Liveness check with database status."""
    checks = {}
    overall = True

    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
    except SQLAlchemyError as exc:
        db.session.rollback()
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    checks["app"] = {
        "name": "LenconDB",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
