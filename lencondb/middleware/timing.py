"""
Per-request id and timing.

Every response gets ``X-Request-ID`` (echoed from the client when sent) and
``X-Request-Duration-Ms``. Requests slower than ``SLOW_REQUEST_MS`` or ending
in a 5xx are logged with the caller's id and role.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000

# Probed by the load balancer every few seconds
_QUIET_PATHS = ("/api/v1/health",)


def _level_for(status: int, duration_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if duration_ms > SLOW_REQUEST_MS:
        return logging.WARNING
    return logging.DEBUG


def init_request_timing(app: Flask):
    @app.before_request
    def _begin():
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.started_at = time.perf_counter()

    @app.after_request
    def _finish(response):
        started = g.get("started_at")
        if started is None:
            return response
        elapsed = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = g.request_id
        response.headers["X-Request-Duration-Ms"] = f"{elapsed:.1f}"

        if request.path.startswith(_QUIET_PATHS) and response.status_code < 500:
            return response
        logger.log(
            _level_for(response.status_code, elapsed),
            "%s %s -> %d in %.0fms",
            request.method, request.path, response.status_code, elapsed,
            extra={
                "request_id": g.request_id,
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": elapsed,
                "user_id": g.get("jwt_user_id"),
                "role": g.get("jwt_role"),
            },
        )
        return response
