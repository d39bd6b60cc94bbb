"""Test Cycle Service — cycles visible to a user, latest start first."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from crowdtest.models import db, utc_iso
from crowdtest.models.project import Project
from crowdtest.models.testing import TestAssignment, TestCycle
from crowdtest.models.user import User
from crowdtest.services.helpers.lookups import get_or_raise, require_id

logger = logging.getLogger(__name__)


def list_test_cycles(user_id) -> list[dict]:
    """
    Return the cycles a user can file reports against or follow.

    Testers get the cycles they are assigned to; every other role gets the
    cycles of the projects they own.

    Returns:
        List of dicts with id, name, scope, status, startDate, endDate and
        a {id, name} project stub.
    """
    user_id = require_id(user_id, field="userId")
    user = get_or_raise(User, user_id)

    stmt = select(TestCycle).options(joinedload(TestCycle.project))
    if user.is_tester:
        stmt = stmt.where(
            TestCycle.assignments.any(TestAssignment.tester_id == user.id)
        )
    else:
        stmt = stmt.where(TestCycle.project.has(Project.owner_id == user.id))
    cycles = db.session.execute(
        stmt.order_by(TestCycle.start_date.desc(), TestCycle.id)
    ).scalars().all()

    return [
        {
            "id": c.id,
            "name": c.name,
            "scope": c.scope,
            "status": c.status,
            "startDate": utc_iso(c.start_date),
            "endDate": utc_iso(c.end_date),
            "project": {"id": c.project.id, "name": c.project.name},
        }
        for c in cycles
    ]
