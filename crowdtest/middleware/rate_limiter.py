"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter.
The Limiter instance is created in crowdtest/__init__.py with no default
limits; this module applies granular limits per route category.

Usage:
    from crowdtest.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

READ_LIMIT = "200/minute"
WRITE_LIMIT = "60/minute"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Login:          LOGIN_RATE_LIMIT config (default 10/minute)
        - Bug filing:     60/minute
        - Dashboard/read: 200/minute
        - Health check:   exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    login_limit = app.config.get("LOGIN_RATE_LIMIT", "10/minute")
    bp = app.blueprints.get("auth_bp")
    if bp:
        limiter.limit(login_limit)(bp)

    bp = app.blueprints.get("bug_reports")
    if bp:
        limiter.limit(WRITE_LIMIT, methods=["POST"])(bp)

    for bp_name in ("dashboard", "test_cycles"):
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health_bp")
    if bp:
        limiter.exempt(bp)

    app.logger.info(
        "Rate limiter configured — login: %s, write: %s, read: %s",
        login_limit, WRITE_LIMIT, READ_LIMIT,
    )
