"""
CrowdTest Platform
Testing domain models.

Models:
    - TestCycle:       bounded testing effort within a project
    - TestAssignment:  binding of one tester to one test cycle
    - BugReport:       issue filed by a tester against a cycle
    - BugComment:      discussion thread entry on a bug report
"""

from datetime import datetime, timezone

from crowdtest.models import db, new_id, utc_iso

CYCLE_PLANNING = "PLANNING"
CYCLE_ACTIVE = "ACTIVE"
CYCLE_COMPLETED = "COMPLETED"

ASSIGNMENT_ASSIGNED = "ASSIGNED"
ASSIGNMENT_IN_PROGRESS = "IN_PROGRESS"
ASSIGNMENT_AWAITING_FEEDBACK = "AWAITING_FEEDBACK"
ASSIGNMENT_COMPLETED = "COMPLETED"

BUG_OPEN = "OPEN"
BUG_TRIAGED = "TRIAGED"
BUG_RESOLVED = "RESOLVED"

SEVERITIES = ("CRITICAL", "HIGH", "MEDIUM", "LOW")


# ═════════════════════════════════════════════════════════════════════════════
# TEST CYCLE
# ═════════════════════════════════════════════════════════════════════════════


class TestCycle(db.Model):
    """
    Testing window within a project.

    e.g. "Beta Launch Cycle", "Accessibility Sweep"
    Holds the tester assignments and the bug reports filed during it.
    """

    __tablename__ = "test_cycles"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    project_id = db.Column(
        db.String(64),
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(200), nullable=False)
    scope = db.Column(db.Text, nullable=False, default="")
    status = db.Column(
        db.String(30), nullable=False, default=CYCLE_PLANNING, index=True,
        comment="PLANNING | ACTIVE | COMPLETED",
    )
    start_date = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships
    project = db.relationship("Project", back_populates="test_cycles")
    assignments = db.relationship(
        "TestAssignment", back_populates="test_cycle",
        cascade="all, delete-orphan",
    )
    issues = db.relationship(
        "BugReport", back_populates="test_cycle",
        cascade="all, delete-orphan",
        order_by="[BugReport.created_at, BugReport.id]",
    )

    def to_dict(self, include_project=False):
        result = {
            "id": self.id,
            "name": self.name,
            "scope": self.scope,
            "status": self.status,
            "startDate": utc_iso(self.start_date),
            "endDate": utc_iso(self.end_date),
            "projectId": self.project_id,
            "createdAt": utc_iso(self.created_at),
            "updatedAt": utc_iso(self.updated_at),
        }
        if include_project and self.project is not None:
            result["project"] = self.project.to_dict()
        return result

    def __repr__(self):
        return f"<TestCycle {self.id}: {self.name}>"


# ═════════════════════════════════════════════════════════════════════════════
# TEST ASSIGNMENT
# ═════════════════════════════════════════════════════════════════════════════


class TestAssignment(db.Model):
    __tablename__ = "test_assignments"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    tester_id = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    test_cycle_id = db.Column(
        db.String(64), db.ForeignKey("test_cycles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    status = db.Column(
        db.String(30), nullable=False, default=ASSIGNMENT_ASSIGNED,
        comment="ASSIGNED | IN_PROGRESS | AWAITING_FEEDBACK | COMPLETED",
    )
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        index=True,
    )

    __table_args__ = (
        db.UniqueConstraint("tester_id", "test_cycle_id", name="uq_assignment_tester_cycle"),
    )

    tester = db.relationship("User", back_populates="assignments")
    test_cycle = db.relationship("TestCycle", back_populates="assignments")

    def to_dict(self, include_tester=False):
        result = {
            "id": self.id,
            "testerId": self.tester_id,
            "testCycleId": self.test_cycle_id,
            "status": self.status,
            "notes": self.notes,
            "createdAt": utc_iso(self.created_at),
            "updatedAt": utc_iso(self.updated_at),
        }
        if self.test_cycle is not None:
            result["testCycle"] = self.test_cycle.to_dict(include_project=True)
        if include_tester and self.tester is not None:
            result["tester"] = self.tester.to_dict()
        return result

    def __repr__(self):
        return f"<TestAssignment {self.id}: {self.tester_id} -> {self.test_cycle_id}>"


# ═════════════════════════════════════════════════════════════════════════════
# BUG REPORT
# ═════════════════════════════════════════════════════════════════════════════


class BugReport(db.Model):
    """
    Issue filed by a tester during a test cycle.

    Lifecycle: OPEN → TRIAGED → RESOLVED. Anything not RESOLVED counts
    as open on the dashboards.
    """

    __tablename__ = "bug_reports"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    title = db.Column(db.String(300), nullable=False)
    severity = db.Column(
        db.String(20), nullable=False, default="MEDIUM",
        comment="CRITICAL | HIGH | MEDIUM | LOW",
    )
    steps_to_reproduce = db.Column(db.Text, nullable=False, default="")
    expected_result = db.Column(db.Text, nullable=False, default="")
    actual_result = db.Column(db.Text, nullable=False, default="")
    environment = db.Column(db.String(300), nullable=False, default="")
    status = db.Column(
        db.String(30), nullable=False, default=BUG_OPEN, index=True,
        comment="OPEN | TRIAGED | RESOLVED",
    )
    attachments = db.Column(db.JSON, default=list)
    reporter_id = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    test_cycle_id = db.Column(
        db.String(64), db.ForeignKey("test_cycles.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    reporter = db.relationship("User", back_populates="bug_reports")
    test_cycle = db.relationship("TestCycle", back_populates="issues")
    comments = db.relationship(
        "BugComment", back_populates="bug_report", lazy="dynamic",
        cascade="all, delete-orphan",
    )

    @property
    def project_id(self):
        """Project the report belongs to, via its cycle (None if unloaded)."""
        return self.test_cycle.project_id if self.test_cycle is not None else None

    @property
    def is_open(self) -> bool:
        return self.status != BUG_RESOLVED

    def to_dict(self, include_reporter=False):
        result = {
            "id": self.id,
            "title": self.title,
            "severity": self.severity,
            "stepsToReproduce": self.steps_to_reproduce,
            "expectedResult": self.expected_result,
            "actualResult": self.actual_result,
            "environment": self.environment,
            "status": self.status,
            "attachments": list(self.attachments or []),
            "reporterId": self.reporter_id,
            "testCycleId": self.test_cycle_id,
            "createdAt": utc_iso(self.created_at),
            "updatedAt": utc_iso(self.updated_at),
        }
        if self.test_cycle is not None:
            result["testCycle"] = self.test_cycle.to_dict(include_project=True)
        if include_reporter and self.reporter is not None:
            result["reporter"] = self.reporter.to_dict()
        return result

    def __repr__(self):
        return f"<BugReport {self.id}: [{self.severity}] {self.title[:40]}>"


class BugComment(db.Model):
    __tablename__ = "bug_comments"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    content = db.Column(db.Text, nullable=False)
    bug_report_id = db.Column(
        db.String(64), db.ForeignKey("bug_reports.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    author_id = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    bug_report = db.relationship("BugReport", back_populates="comments")
    author = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "content": self.content,
            "bugReportId": self.bug_report_id,
            "authorId": self.author_id,
            "createdAt": utc_iso(self.created_at),
        }
