"""
Demo data bootstrap — seeds the platform on first access.

Two entry points:
  - ensure_database_seeded(): idempotent; seeds only an empty users table.
    Called by the HTTP layer before serving a request when AUTO_SEED is on.
  - seed_demo_data(): clears every table and inserts the demo dataset.
    Used by ``flask seed-demo`` and scripts/seed_demo_data.py.

The "already seeded" decision is a query against the database, so it holds
across processes and restarts without any module-level flag.
"""

import logging
from datetime import datetime, timedelta, timezone

from flask import current_app
from sqlalchemy import func, select

from crowdtest.models import db
from crowdtest.models.payout import PAYOUT_PAID, PAYOUT_PENDING, Payout
from crowdtest.models.project import Project
from crowdtest.models.testing import (
    ASSIGNMENT_ASSIGNED,
    ASSIGNMENT_AWAITING_FEEDBACK,
    ASSIGNMENT_IN_PROGRESS,
    CYCLE_ACTIVE,
    BugComment,
    BugReport,
    TestAssignment,
    TestCycle,
)
from crowdtest.models.user import ROLE_CLIENT, ROLE_MANAGER, ROLE_TESTER, User
from crowdtest.utils.crypto import hash_password

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

# Delete order respects FKs: children first.
_ALL_MODELS = (BugComment, BugReport, TestAssignment, TestCycle, Project, Payout, User)

DEMO_USERS = [
    {
        "id": "user-manager",
        "email": "manager@crowdtest.io",
        "name": "Morgan Rivera",
        "role": ROLE_MANAGER,
        "bio": "Seasoned QA director overseeing distributed testing teams.",
        "skills": ["Leadership", "Test Strategy", "Automation"],
        "tester_reputation": 0,
    },
    {
        "id": "user-client-finpulse",
        "email": "product@finpulse.io",
        "name": "FinPulse PM",
        "role": ROLE_CLIENT,
        "bio": "Fintech product owner focused on mobile banking excellence.",
        "skills": ["Mobile QA", "Payments", "Compliance"],
    },
    {
        "id": "user-client-healthsync",
        "email": "cto@healthsync.io",
        "name": "HealthSync CTO",
        "role": ROLE_CLIENT,
        "bio": "Healthcare platform innovator working on patient apps.",
        "skills": ["Healthcare", "Security", "Accessibility"],
    },
    {
        "id": "user-tester-ava",
        "email": "ava.dawson@testers.io",
        "name": "Ava Dawson",
        "role": ROLE_TESTER,
        "bio": "Mobile QA specialist with a passion for fintech apps.",
        "skills": ["iOS", "Android", "Mobile Banking", "Payments"],
        "tester_reputation": 820,
    },
    {
        "id": "user-tester-leon",
        "email": "leon.kim@testers.io",
        "name": "Leon Kim",
        "role": ROLE_TESTER,
        "bio": "Automation-first QA with CI/CD integration expertise.",
        "skills": ["Web", "API", "Cypress", "Postman"],
        "tester_reputation": 910,
    },
    {
        "id": "user-tester-valentina",
        "email": "valentina.ortiz@testers.io",
        "name": "Valentina Ortiz",
        "role": ROLE_TESTER,
        "bio": "Accessibility advocate ensuring inclusive user experiences.",
        "skills": ["Accessibility", "WCAG", "Screen Readers"],
        "tester_reputation": 740,
    },
]


def is_seeded() -> bool:
    """True when at least one user exists."""
    return (db.session.scalar(select(func.count(User.id))) or 0) > 0


def ensure_database_seeded() -> bool:
    """Seed the demo dataset if the database is empty.

    Returns:
        True if this call seeded, False if data was already present.
    """
    if is_seeded():
        return False
    logger.info("Empty database detected — seeding demo data")
    seed_demo_data(clear=False)
    return True


def _clear_all():
    for model in _ALL_MODELS:
        db.session.query(model).delete()
    db.session.flush()


def seed_demo_data(clear: bool = True) -> dict:
    """Insert the demo dataset and commit.

    Args:
        clear: Delete all existing rows first.

    Returns:
        Dict of model name → rows inserted.
    """
    if clear:
        _clear_all()

    now = datetime.now(timezone.utc)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    password_hash = hash_password(DEMO_PASSWORD, rounds=rounds)

    users = {}
    for data in DEMO_USERS:
        user = User(password_hash=password_hash, **data)
        db.session.add(user)
        users[user.id] = user
    db.session.flush()

    finpulse = Project(
        id="project-finpulse",
        name="FinPulse Banking App",
        description=(
            "Consumer mobile banking application supporting peer-to-peer "
            "payments and card management."
        ),
        status="IN_PROGRESS",
        owner_id="user-client-finpulse",
    )
    healthsync = Project(
        id="project-healthsync",
        name="HealthSync Patient Portal",
        description="Web portal enabling patients to manage appointments and medical records.",
        status="RECRUITING_TESTERS",
        owner_id="user-client-healthsync",
    )
    db.session.add_all([finpulse, healthsync])

    beta = TestCycle(
        id="cycle-beta-launch",
        name="Beta Launch Cycle",
        scope="Regression testing across iOS and Android releases with focus on payments.",
        status=CYCLE_ACTIVE,
        start_date=now,
        project=finpulse,
    )
    db.session.add(beta)

    assignments = [
        TestAssignment(
            id="assignment-ava-beta", tester_id="user-tester-ava",
            test_cycle=beta, status=ASSIGNMENT_IN_PROGRESS,
        ),
        TestAssignment(
            id="assignment-leon-beta", tester_id="user-tester-leon",
            test_cycle=beta, status=ASSIGNMENT_ASSIGNED,
        ),
        TestAssignment(
            id="assignment-valentina-beta", tester_id="user-tester-valentina",
            test_cycle=beta, status=ASSIGNMENT_AWAITING_FEEDBACK,
            notes="Need accessibility audit for voiceover and high contrast mode coverage.",
        ),
    ]
    db.session.add_all(assignments)

    bug = BugReport(
        id="bug-payment-freeze",
        title="Payment confirmation screen freezes",
        severity="HIGH",
        steps_to_reproduce=(
            "1. Initiate transfer\n2. Confirm with FaceID\n"
            "3. Observe freeze on confirmation screen"
        ),
        expected_result="App should display success message and updated balance",
        actual_result="Confirmation screen hangs indefinitely without updating balance.",
        environment="iPhone 14 Pro, iOS 17.2, WiFi",
        reporter_id="user-tester-ava",
        test_cycle=beta,
        attachments=[],
    )
    db.session.add(bug)
    db.session.add(BugComment(
        id="comment-payment-followup",
        content="Engineering reproduced on debug build; investigating network retries.",
        bug_report=bug,
        author_id="user-manager",
    ))

    payouts = [
        Payout(
            id="payout-ava-1", tester_id="user-tester-ava", amount=250,
            status=PAYOUT_PAID, paid_at=now - timedelta(days=7),
        ),
        Payout(
            id="payout-leon-1", tester_id="user-tester-leon", amount=180,
            status=PAYOUT_PENDING,
        ),
        Payout(
            id="payout-valentina-1", tester_id="user-tester-valentina", amount=320,
            status=PAYOUT_PAID, paid_at=now - timedelta(days=3),
        ),
    ]
    db.session.add_all(payouts)
    db.session.commit()

    counts = {
        "User": len(users),
        "Project": 2,
        "TestCycle": 1,
        "TestAssignment": len(assignments),
        "BugReport": 1,
        "BugComment": 1,
        "Payout": len(payouts),
    }
    logger.info("Demo data seeded: %s", counts)
    return counts
