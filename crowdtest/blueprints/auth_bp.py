"""
Auth Blueprint — email/password login.

Routes (url_prefix=/api/v1/auth):
    POST /login   — { "email", "password" } → { "user": {...} }
"""

from flask import Blueprint, g, jsonify, request

from crowdtest.blueprints import seed_on_first_access
from crowdtest.services import auth_service as svc
from crowdtest.utils.errors import register_error_handlers

auth_bp = Blueprint("auth_bp", __name__, url_prefix="/api/v1/auth")
register_error_handlers(auth_bp)


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
def login():
    """Authenticate with email + password and return the user profile."""
    seed_on_first_access()
    user = svc.authenticate(request.get_json(silent=True))
    g.user_role = user.role
    return jsonify({"user": user.to_dict()}), 200
