"""
Bug Report Blueprint.

Routes (url_prefix=/api/v1/bug-reports):
    GET  ?userId=<id>  — reports filed by a tester / filed on a client's projects
    POST               — file a new report (testers only)
"""

from flask import Blueprint, jsonify, request

from crowdtest.blueprints import seed_on_first_access
from crowdtest.services import bug_report_service as svc
from crowdtest.utils.errors import register_error_handlers

bug_report_bp = Blueprint("bug_reports", __name__, url_prefix="/api/v1/bug-reports")
register_error_handlers(bug_report_bp)


@bug_report_bp.route("", methods=["GET"])
def list_bug_reports():
    seed_on_first_access()
    reports = svc.list_bug_reports(request.args.get("userId"))
    return jsonify([r.to_dict() for r in reports]), 200


@bug_report_bp.route("", methods=["POST"])
def create_bug_report():
    """
    File a bug report.

    Body: { "userId", "title", "severity", "stepsToReproduce",
            "expectedResult", "actualResult", "environment",
            "testCycleId", "attachments"? }
    """
    seed_on_first_access()
    bug = svc.create_bug_report(request.get_json(silent=True))
    return jsonify(bug.to_dict()), 201
