"""
Dashboard Service — per-role summary views for the landing dashboard.

Resolves the requesting user, dispatches on their role to one of three
views, and folds the view's read queries into a single DashboardSummary:

    {
        "user": {...},
        "stats": {name: number},
        "activeAssignments": [...],
        "focusProjects": [...],
        "recentIssues": [...],
        "payouts": [...],          # tester view only
    }

Views:
  - TesterDashboard:  own assignments, own bug reports, own payouts
  - ClientDashboard:  owned projects and the issues filed against them
  - ManagerDashboard: platform-wide activity (also the fallback role)

All queries are read-only; no commits. Page sizes come from the
``DASHBOARD_LIMITS`` config mapping.
"""

import logging

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.orm import contains_eager, joinedload, selectinload

from crowdtest.models import db, utc_iso
from crowdtest.models.payout import PAYOUT_PAID, Payout
from crowdtest.models.project import Project
from crowdtest.models.testing import (
    ASSIGNMENT_COMPLETED,
    CYCLE_ACTIVE,
    CYCLE_PLANNING,
    BugReport,
    TestAssignment,
    TestCycle,
)
from crowdtest.models.user import ROLE_CLIENT, ROLE_TESTER, User
from crowdtest.services.helpers.lookups import get_or_raise, require_id

logger = logging.getLogger(__name__)

DEFAULT_LIMITS = {
    "tester_assignments": 6,
    "tester_issues": 5,
    "tester_payouts": 6,
    "client_issues": 6,
    "manager_assignments": 8,
    "manager_issues": 8,
    "manager_focus_projects": 6,
}


# ── Shared folding helpers ───────────────────────────────────────────────


def count_open_issues(issues, project_id: str, *, unresolved_only: bool = True) -> int:
    """Count the issues in ``issues`` that belong to ``project_id``.

    With ``unresolved_only`` (the default) RESOLVED issues are skipped.
    Issues whose cycle is not loaded never match.
    """
    return sum(
        1
        for issue in issues
        if issue.project_id == project_id and (issue.is_open or not unresolved_only)
    )


def focus_project(project: Project, *, open_issues: int, cycle_status: str, next_milestone) -> dict:
    """Project dict enriched with the dashboard-only fields."""
    result = project.to_dict()
    result.update({
        "openIssues": open_issues,
        "cycleStatus": cycle_status,
        "nextMilestone": next_milestone,
    })
    return result


# ── Views ────────────────────────────────────────────────────────────────


class DashboardView:
    """Base class: one subclass per role, each producing a full summary."""

    def __init__(self, user: User, limits: dict | None = None):
        self.user = user
        self.limits = {**DEFAULT_LIMITS, **(limits or {})}

    def build(self) -> dict:
        raise NotImplementedError

    def _summary(self, *, stats, active_assignments, focus_projects, recent_issues, payouts=None) -> dict:
        summary = {
            "user": self.user.to_dict(),
            "stats": stats,
            "activeAssignments": active_assignments,
            "focusProjects": focus_projects,
            "recentIssues": recent_issues,
        }
        if payouts is not None:
            summary["payouts"] = payouts
        return summary


class TesterDashboard(DashboardView):
    """Tester view: recent assignments, own reports, payout history.

    ``lifetimeEarnings`` only sums PAID payouts inside the fetched page,
    while ``totalBugsFiled`` is a full count.
    """

    def build(self) -> dict:
        uid = self.user.id

        assignments = db.session.execute(
            select(TestAssignment)
            .where(TestAssignment.tester_id == uid)
            .options(joinedload(TestAssignment.test_cycle).joinedload(TestCycle.project))
            .order_by(TestAssignment.updated_at.desc(), TestAssignment.id.desc())
            .limit(self.limits["tester_assignments"])
        ).scalars().all()

        issues = db.session.execute(
            select(BugReport)
            .where(BugReport.reporter_id == uid)
            .options(joinedload(BugReport.test_cycle).joinedload(TestCycle.project))
            .order_by(BugReport.created_at.desc(), BugReport.id.desc())
            .limit(self.limits["tester_issues"])
        ).scalars().all()

        payouts = db.session.execute(
            select(Payout)
            .where(Payout.tester_id == uid)
            .order_by(Payout.created_at.desc(), Payout.id.desc())
            .limit(self.limits["tester_payouts"])
        ).scalars().all()

        total_bugs = db.session.scalar(
            select(func.count(BugReport.id)).where(BugReport.reporter_id == uid)
        ) or 0

        # First assignment referencing a project wins.
        focus: dict[str, dict] = {}
        for assignment in assignments:
            cycle = assignment.test_cycle
            if cycle is None or cycle.project is None or cycle.project.id in focus:
                continue
            focus[cycle.project.id] = focus_project(
                cycle.project,
                open_issues=count_open_issues(issues, cycle.project.id),
                cycle_status=cycle.status,
                next_milestone=utc_iso(cycle.end_date),
            )

        stats = {
            "activeAssignments": sum(1 for a in assignments if a.status != ASSIGNMENT_COMPLETED),
            "totalBugsFiled": int(total_bugs),
            "lifetimeEarnings": float(sum(p.amount or 0 for p in payouts if p.status == PAYOUT_PAID)),
        }

        return self._summary(
            stats=stats,
            active_assignments=[a.to_dict() for a in assignments],
            focus_projects=list(focus.values()),
            recent_issues=[i.to_dict() for i in issues],
            payouts=[p.to_dict() for p in payouts],
        )


class ClientDashboard(DashboardView):
    """Client view: every owned project plus the latest issues filed on them.

    ``totalIssues`` is the size of the fetched recent-issues page, not a
    full count.
    """

    def build(self) -> dict:
        uid = self.user.id

        projects = db.session.execute(
            select(Project)
            .where(Project.owner_id == uid)
            .options(selectinload(Project.test_cycles).selectinload(TestCycle.issues))
            .order_by(Project.created_at, Project.id)
        ).scalars().all()

        recent_issues = db.session.execute(
            select(BugReport)
            .join(BugReport.test_cycle)
            .join(TestCycle.project)
            .where(Project.owner_id == uid)
            .options(contains_eager(BugReport.test_cycle).contains_eager(TestCycle.project))
            .order_by(BugReport.created_at.desc(), BugReport.id.desc())
            .limit(self.limits["client_issues"])
        ).scalars().all()

        project_ids = [p.id for p in projects]
        testers_assigned = 0
        if project_ids:
            testers_assigned = db.session.scalar(
                select(func.count(TestAssignment.id))
                .join(TestAssignment.test_cycle)
                .where(TestCycle.project_id.in_(project_ids))
            ) or 0

        focus_projects = []
        for project in projects:
            first_cycle = project.test_cycles[0] if project.test_cycles else None
            project_issues = [issue for cycle in project.test_cycles for issue in cycle.issues]
            focus_projects.append(focus_project(
                project,
                open_issues=count_open_issues(project_issues, project.id),
                cycle_status=first_cycle.status if first_cycle else CYCLE_PLANNING,
                next_milestone=utc_iso(first_cycle.end_date) if first_cycle else None,
            ))

        stats = {
            "activeCycles": sum(
                1 for p in projects for c in p.test_cycles if c.status == CYCLE_ACTIVE
            ),
            "totalIssues": len(recent_issues),
            "testersAssigned": int(testers_assigned),
        }

        return self._summary(
            stats=stats,
            active_assignments=[],
            focus_projects=focus_projects,
            recent_issues=[i.to_dict() for i in recent_issues],
        )


class ManagerDashboard(DashboardView):
    """Manager view: platform-wide throughput and payouts."""

    def build(self) -> dict:
        assignments = db.session.execute(
            select(TestAssignment)
            .options(
                joinedload(TestAssignment.test_cycle).joinedload(TestCycle.project),
                joinedload(TestAssignment.tester),
            )
            .order_by(TestAssignment.updated_at.desc(), TestAssignment.id.desc())
            .limit(self.limits["manager_assignments"])
        ).scalars().all()

        projects = db.session.execute(
            select(Project)
            .options(selectinload(Project.test_cycles))
            .order_by(Project.created_at, Project.id)
        ).scalars().all()

        recent_issues = db.session.execute(
            select(BugReport)
            .options(
                joinedload(BugReport.test_cycle).joinedload(TestCycle.project),
                joinedload(BugReport.reporter),
            )
            .order_by(BugReport.created_at.desc(), BugReport.id.desc())
            .limit(self.limits["manager_issues"])
        ).scalars().all()

        total_payouts = db.session.scalar(
            select(func.coalesce(func.sum(Payout.amount), 0))
        )
        testers_engaged = db.session.scalar(
            select(func.count(User.id)).where(User.role == ROLE_TESTER)
        ) or 0
        active_cycles = db.session.scalar(
            select(func.count(TestCycle.id)).where(TestCycle.status == CYCLE_ACTIVE)
        ) or 0

        focus_projects = []
        for project in projects[: self.limits["manager_focus_projects"]]:
            active = next((c for c in project.test_cycles if c.status == CYCLE_ACTIVE), None)
            end_dates = sorted(utc_iso(c.end_date) for c in project.test_cycles if c.end_date)
            focus_projects.append(focus_project(
                project,
                # Every fetched issue counts here, resolved or not.
                open_issues=count_open_issues(recent_issues, project.id, unresolved_only=False),
                cycle_status=active.status if active else CYCLE_PLANNING,
                next_milestone=end_dates[0] if end_dates else None,
            ))

        stats = {
            "testersEngaged": int(testers_engaged),
            "activeCycles": int(active_cycles),
            "totalPayouts": float(total_payouts or 0),
        }

        return self._summary(
            stats=stats,
            active_assignments=[a.to_dict(include_tester=True) for a in assignments],
            focus_projects=focus_projects,
            recent_issues=[i.to_dict(include_reporter=True) for i in recent_issues],
        )


_VIEWS = {
    ROLE_TESTER: TesterDashboard,
    ROLE_CLIENT: ClientDashboard,
}


def view_for(user: User, limits: dict | None = None) -> DashboardView:
    """Pick the view for the user's role; unknown roles get the manager view."""
    return _VIEWS.get(user.role, ManagerDashboard)(user, limits)


def build_dashboard(user_id, limits: dict | None = None) -> dict:
    """
    Build the DashboardSummary for one user.

    Args:
        user_id: Opaque user identifier (validated before any query).
        limits: Optional page-size overrides; defaults to the app's
            ``DASHBOARD_LIMITS`` config merged over DEFAULT_LIMITS.

    Returns:
        DashboardSummary dict.

    Raises:
        ValidationError: user_id missing or malformed.
        NotFoundError: user_id does not resolve to a user.
    """
    user_id = require_id(user_id, field="userId")
    if limits is None:
        limits = current_app.config.get("DASHBOARD_LIMITS")

    user = get_or_raise(User, user_id)
    view = view_for(user, limits)
    summary = view.build()

    logger.info(
        "Dashboard built user=%s role=%s view=%s focus_projects=%d",
        user.id, user.role, type(view).__name__, len(summary["focusProjects"]),
    )
    return summary
