"""Project domain model — a client's product under crowdsourced test."""

from datetime import datetime, timezone

from crowdtest.models import db, new_id, utc_iso


class Project(db.Model):
    """Owned by exactly one CLIENT user; contains zero or more test cycles."""

    __tablename__ = "projects"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    status = db.Column(
        db.String(30), nullable=False, default="DRAFT",
        comment="DRAFT | RECRUITING_TESTERS | IN_PROGRESS | COMPLETED",
    )
    owner_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    owner = db.relationship("User", back_populates="projects")
    # Cycle order is "fetch order" for the dashboards: oldest cycle first.
    test_cycles = db.relationship(
        "TestCycle", back_populates="project",
        cascade="all, delete-orphan",
        order_by="[TestCycle.created_at, TestCycle.id]",
    )

    def to_dict(self) -> dict:
        """Serialize core project fields for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "ownerId": self.owner_id,
            "createdAt": utc_iso(self.created_at),
            "updatedAt": utc_iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Project {self.id}: {self.name}>"
