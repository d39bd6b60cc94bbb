"""Payout model — recorded or pending disbursement to a tester."""

from datetime import datetime, timezone

from crowdtest.models import db, new_id, utc_iso

PAYOUT_PENDING = "PENDING"
PAYOUT_PAID = "PAID"


class Payout(db.Model):
    __tablename__ = "payouts"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    tester_id = db.Column(
        db.String(64), db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default="USD")
    status = db.Column(
        db.String(20), nullable=False, default=PAYOUT_PENDING,
        comment="PENDING | PAID",
    )
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    tester = db.relationship("User", back_populates="payouts")

    def to_dict(self):
        return {
            "id": self.id,
            "testerId": self.tester_id,
            "amount": float(self.amount or 0),
            "currency": self.currency,
            "status": self.status,
            "paidAt": utc_iso(self.paid_at),
            "createdAt": utc_iso(self.created_at),
        }

    def __repr__(self):
        return f"<Payout {self.id}: {self.amount} {self.currency} ({self.status})>"
