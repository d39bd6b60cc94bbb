"""
Dashboard Blueprint — role-aware landing dashboard.

Routes (url_prefix=/api/v1/dashboard):
    GET ?userId=<id>   — DashboardSummary for the user's role
"""

from flask import Blueprint, g, jsonify, request

from crowdtest.blueprints import seed_on_first_access
from crowdtest.services import dashboard_service as svc
from crowdtest.utils.errors import register_error_handlers

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")
register_error_handlers(dashboard_bp)


@dashboard_bp.route("", methods=["GET"])
def get_dashboard():
    """Per-role summary: stats, focus projects, recent issues (and payouts for testers)."""
    seed_on_first_access()
    summary = svc.build_dashboard(request.args.get("userId"))
    g.user_role = summary["user"]["role"]
    return jsonify(summary), 200
