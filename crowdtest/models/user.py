"""
User model — testers, clients and managers share one table.

The role column is the only discriminator; dashboards and permission
checks branch on it.
"""

from datetime import datetime, timezone

from crowdtest.models import db, new_id, utc_iso

ROLE_TESTER = "TESTER"
ROLE_CLIENT = "CLIENT"
ROLE_MANAGER = "MANAGER"
USER_ROLES = (ROLE_TESTER, ROLE_CLIENT, ROLE_MANAGER)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    email = db.Column(db.String(200), unique=True, nullable=False)
    name = db.Column(db.String(200), nullable=False)
    role = db.Column(
        db.String(20), nullable=False, default=ROLE_TESTER, index=True,
        comment="TESTER | CLIENT | MANAGER",
    )
    password_hash = db.Column(db.String(256))
    avatar_url = db.Column(db.String(500))
    bio = db.Column(db.Text)
    tester_reputation = db.Column(db.Integer, nullable=False, default=0)
    skills = db.Column(db.JSON, default=list)
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    projects = db.relationship("Project", back_populates="owner", lazy="dynamic")
    assignments = db.relationship(
        "TestAssignment", back_populates="tester", lazy="dynamic",
        cascade="all, delete-orphan",
    )
    bug_reports = db.relationship(
        "BugReport", back_populates="reporter", lazy="dynamic",
        cascade="all, delete-orphan",
    )
    payouts = db.relationship(
        "Payout", back_populates="tester", lazy="dynamic",
        cascade="all, delete-orphan",
    )

    @property
    def is_tester(self) -> bool:
        return self.role == ROLE_TESTER

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "avatarUrl": self.avatar_url,
            "bio": self.bio,
            "testerReputation": self.tester_reputation or 0,
            "skills": list(self.skills or []),
            "createdAt": utc_iso(self.created_at),
            "updatedAt": utc_iso(self.updated_at),
        }

    def __repr__(self):
        return f"<User {self.id}: {self.email} ({self.role})>"
