"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready    — database answers; reports whether demo data is loaded
    GET /api/v1/health/live     — database latency plus users per role
    GET /api/v1/health/db-diag  — row count per platform model
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from crowdtest.models import db
from crowdtest.models.payout import Payout
from crowdtest.models.project import Project
from crowdtest.models.testing import BugComment, BugReport, TestAssignment, TestCycle
from crowdtest.models.user import USER_ROLES, User
from crowdtest.services import bootstrap

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")

_DIAG_MODELS = (User, Project, TestCycle, TestAssignment, BugReport, BugComment, Payout)


def _users_by_role() -> dict:
    rows = db.session.execute(
        select(User.role, func.count(User.id)).group_by(User.role)
    ).all()
    counts = dict.fromkeys(USER_ROLES, 0)
    counts.update({role: n for role, n in rows})
    return counts


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Ready once the database answers.

    ``seeded`` is False on an empty database; with AUTO_SEED on, the first
    API request loads the demo dataset.
    """
    try:
        seeded = bootstrap.is_seeded()
    except SQLAlchemyError as exc:
        logger.error("Readiness check — database unavailable: %s", exc)
        return jsonify({"status": "unavailable"}), 503
    return jsonify({
        "status": "ok",
        "seeded": seeded,
        "autoSeed": bool(current_app.config.get("AUTO_SEED")),
    }), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Database round-trip latency and the user mix the dashboards are built from."""
    t0 = time.perf_counter()
    try:
        users = _users_by_role()
    except SQLAlchemyError as exc:
        logger.error("Health check — database failed: %s", exc)
        return jsonify({
            "status": "degraded",
            "checks": {"database": {"status": "error", "detail": str(exc)}},
        }), 503

    return jsonify({
        "status": "healthy",
        "checks": {
            "database": {
                "status": "ok",
                "latency_ms": round((time.perf_counter() - t0) * 1000, 1),
            },
            "dataset": {"usersByRole": users},
        },
    }), 200


@health_bp.route("/db-diag", methods=["GET"])
def db_diagnostic():
    """Row count for each platform model; a failing table is reported, not raised."""
    tables = {}
    for model in _DIAG_MODELS:
        try:
            count = db.session.scalar(select(func.count()).select_from(model))
            tables[model.__tablename__] = {"status": "ok", "count": count}
        except SQLAlchemyError as exc:
            db.session.rollback()
            tables[model.__tablename__] = {"status": "error", "detail": str(exc)}
            logger.warning("db-diag: %s not queryable: %s", model.__tablename__, exc)
    return jsonify(tables), 200
