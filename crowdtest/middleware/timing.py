"""
Request timing middleware.

Stamps every response with ``X-Request-ID`` and ``X-Request-Duration-Ms`` and
writes one access-log line per API request, tagged with the blueprint, the
``userId`` query parameter and, once a route has resolved it, the caller's
role (``g.user_role``). Dashboard builds fan out into several queries, so
their slow-request budget is wider than the plain list endpoints.
"""

import logging
import re
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

DEFAULT_SLOW_MS = 500
SLOW_MS_BY_BLUEPRINT = {
    "dashboard": 1500,
    "auth_bp": 1000,          # bcrypt verify dominates
}

# Incoming ids are echoed back, so only accept short opaque tokens.
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._\-]{1,64}$")


def _request_id() -> str:
    incoming = request.headers.get("X-Request-ID", "")
    if _REQUEST_ID_RE.match(incoming):
        return incoming
    return uuid.uuid4().hex[:12]


def slow_threshold_ms(blueprint: str | None) -> int:
    return SLOW_MS_BY_BLUEPRINT.get(blueprint, DEFAULT_SLOW_MS)


def init_request_timing(app: Flask):
    """Register before/after hooks for request timing."""

    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()
        g.request_id = _request_id()
        g.user_role = None

    @app.after_request
    def _log_request(response):
        start = getattr(g, "request_start", None)
        if start is None:
            return response

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        response.headers["X-Request-ID"] = g.request_id

        # Probes are polled constantly; keep them out of the access log.
        if request.blueprint == "health_bp" or not request.path.startswith("/api/"):
            return response

        extra = {
            "method": request.method,
            "path": request.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
            "blueprint": request.blueprint,
            "role": g.user_role,
        }
        msg = "%s %s %d (%.0fms) role=%s"
        args = (request.method, request.path, response.status_code, duration_ms, g.user_role or "-")

        if response.status_code >= 500:
            logger.error("Server error: " + msg, *args, extra=extra)
        elif duration_ms > slow_threshold_ms(request.blueprint):
            logger.warning("Slow request: " + msg, *args, extra=extra)
        else:
            logger.debug(msg, *args, extra=extra)

        return response
