"""
Bug Report Service — listing and filing issues against test cycles.

Visibility:
  - testers see the reports they filed
  - every other role sees the reports filed on projects they own

Only testers may file reports. The service layer validates the payload,
owns the commit, and raises crowdtest.core.exceptions types.
"""

import logging
from urllib.parse import urlparse

from sqlalchemy import select
from sqlalchemy.orm import contains_eager, joinedload

from crowdtest.core.exceptions import PermissionDeniedError, ValidationError
from crowdtest.models import db
from crowdtest.models.project import Project
from crowdtest.models.testing import SEVERITIES, BugReport, TestCycle
from crowdtest.models.user import User
from crowdtest.services.helpers.lookups import get_or_raise, require_id

logger = logging.getLogger(__name__)

# payload key → (model attribute, minimum length)
_TEXT_FIELDS = {
    "title": ("title", 3),
    "stepsToReproduce": ("steps_to_reproduce", 5),
    "expectedResult": ("expected_result", 3),
    "actualResult": ("actual_result", 3),
    "environment": ("environment", 3),
}


def list_bug_reports(user_id) -> list[BugReport]:
    """Return the reports visible to ``user_id``, newest first."""
    user_id = require_id(user_id, field="userId")
    user = get_or_raise(User, user_id)

    stmt = (
        select(BugReport)
        .join(BugReport.test_cycle)
        .join(TestCycle.project)
        .options(contains_eager(BugReport.test_cycle).contains_eager(TestCycle.project))
        .order_by(BugReport.created_at.desc(), BugReport.id.desc())
    )
    if user.is_tester:
        stmt = stmt.where(BugReport.reporter_id == user.id)
    else:
        stmt = stmt.where(Project.owner_id == user.id)
    return db.session.execute(stmt).scalars().all()


def _validate_payload(data: dict) -> dict:
    """Check the create payload and return the cleaned model kwargs."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid bug report payload", details={"body": "must be a JSON object"})

    errors: dict[str, str] = {}
    cleaned: dict = {}

    for key, (attr, min_len) in _TEXT_FIELDS.items():
        value = data.get(key)
        if not isinstance(value, str) or len(value.strip()) < min_len:
            errors[key] = f"must be a string of at least {min_len} characters"
        else:
            cleaned[attr] = value.strip()

    severity = data.get("severity")
    if severity not in SEVERITIES:
        errors["severity"] = f"must be one of {', '.join(SEVERITIES)}"
    else:
        cleaned["severity"] = severity

    attachments = data.get("attachments") or []
    if not isinstance(attachments, list) or not all(_is_url(a) for a in attachments):
        errors["attachments"] = "must be a list of http(s) URLs"
    else:
        cleaned["attachments"] = attachments

    for key in ("userId", "testCycleId"):
        value = data.get(key)
        if not isinstance(value, str) or len(value.strip()) < 3:
            errors[key] = "must be a string of at least 3 characters"

    if errors:
        raise ValidationError("Invalid bug report payload", details=errors)
    return cleaned


def _is_url(value) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def create_bug_report(data: dict) -> BugReport:
    """
    File a new bug report.

    Args:
        data: camelCase payload — userId, title, severity, stepsToReproduce,
            expectedResult, actualResult, environment, testCycleId and
            optional attachments.

    Returns:
        The committed BugReport with its cycle and project loaded.

    Raises:
        ValidationError: payload fails validation.
        NotFoundError: userId or testCycleId does not resolve.
        PermissionDeniedError: the user is not a tester.
    """
    cleaned = _validate_payload(data)
    user_id = require_id(data["userId"], field="userId")
    cycle_id = require_id(data["testCycleId"], field="testCycleId")

    tester = get_or_raise(User, user_id)
    if not tester.is_tester:
        raise PermissionDeniedError("Only testers can submit issues")
    cycle = get_or_raise(TestCycle, cycle_id)

    bug = BugReport(reporter_id=tester.id, test_cycle_id=cycle.id, **cleaned)
    db.session.add(bug)
    db.session.commit()
    logger.info("Bug report %s filed by %s on cycle %s [%s]", bug.id, tester.id, cycle.id, bug.severity)

    return db.session.execute(
        select(BugReport)
        .where(BugReport.id == bug.id)
        .options(joinedload(BugReport.test_cycle).joinedload(TestCycle.project))
    ).scalar_one()
