"""
Shared pytest fixtures for the CrowdTest Platform test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - factory: ORM helpers for building users, projects, cycles, etc.
"""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from crowdtest import create_app
from crowdtest.models import db as _db
from crowdtest.models.payout import Payout
from crowdtest.models.project import Project
from crowdtest.models.testing import BugReport, TestAssignment, TestCycle
from crowdtest.models.user import ROLE_CLIENT, ROLE_MANAGER, ROLE_TESTER, User


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── ORM helpers ──────────────────────────────────────────────────────────

BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class Factory:
    """Builds rows with predictable ids and strictly increasing timestamps.

    Each call advances an internal clock by one minute, so "most recent"
    ordering in tests follows creation order unless a timestamp is passed.
    """

    def __init__(self):
        self._seq = count(1)

    def _tick(self):
        return BASE_TIME + timedelta(minutes=next(self._seq))

    def _add(self, obj):
        _db.session.add(obj)
        _db.session.flush()
        return obj

    def user(self, id, role=ROLE_TESTER, **kw):
        kw.setdefault("email", f"{id}@example.test")
        kw.setdefault("name", id.replace("-", " ").title())
        return self._add(User(id=id, role=role, **kw))

    def tester(self, id="tester-1", **kw):
        return self.user(id, ROLE_TESTER, **kw)

    def client_user(self, id="client-1", **kw):
        return self.user(id, ROLE_CLIENT, **kw)

    def manager(self, id="manager-1", **kw):
        return self.user(id, ROLE_MANAGER, **kw)

    def project(self, id, owner, **kw):
        ts = kw.pop("created_at", None) or self._tick()
        kw.setdefault("name", f"Project {id}")
        kw.setdefault("status", "IN_PROGRESS")
        return self._add(Project(id=id, owner_id=owner.id, created_at=ts, updated_at=ts, **kw))

    def cycle(self, id, project, status="ACTIVE", end_date=None, **kw):
        ts = kw.pop("created_at", None) or self._tick()
        kw.setdefault("name", f"Cycle {id}")
        return self._add(TestCycle(
            id=id, project_id=project.id, status=status, start_date=ts,
            end_date=end_date, created_at=ts, updated_at=ts, **kw,
        ))

    def assignment(self, id, tester, cycle, status="IN_PROGRESS", **kw):
        ts = kw.pop("updated_at", None) or self._tick()
        return self._add(TestAssignment(
            id=id, tester_id=tester.id, test_cycle_id=cycle.id, status=status,
            created_at=ts, updated_at=ts, **kw,
        ))

    def bug(self, id, reporter, cycle, status="OPEN", severity="HIGH", **kw):
        ts = kw.pop("created_at", None) or self._tick()
        kw.setdefault("title", f"Bug {id}")
        return self._add(BugReport(
            id=id, reporter_id=reporter.id, test_cycle_id=cycle.id,
            status=status, severity=severity, created_at=ts, updated_at=ts, **kw,
        ))

    def payout(self, id, tester, amount, status="PAID", **kw):
        ts = kw.pop("created_at", None) or self._tick()
        return self._add(Payout(
            id=id, tester_id=tester.id, amount=amount, status=status, created_at=ts, **kw,
        ))


@pytest.fixture()
def factory():
    return Factory()
