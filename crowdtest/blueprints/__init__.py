"""
CrowdTest Platform
Blueprint registry.
"""

from flask import current_app


def seed_on_first_access():
    """Seed the demo dataset before serving, when AUTO_SEED is enabled.

    Runs ahead of any service call so services never seed as a side effect.
    """
    if current_app.config.get("AUTO_SEED"):
        from crowdtest.services.bootstrap import ensure_database_seeded
        ensure_database_seeded()
