import uuid

from sqlalchemy import CheckConstraint

from filmmania.extensions import db
from filmmania.models.enums import FundingStatus, check_in
from filmmania.utils.time import utcnow


class AdminFunding(db.Model):
    """
    Audit record of an admin granting free subscription months.

    Rows are append-only apart from status; they are never reconciled against
    the subscription they extended.
    """

    __tablename__ = "admin_funding"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    months_funded = db.Column(db.Integer, nullable=False, default=3)
    start_date = db.Column(db.DateTime(timezone=True), nullable=False)
    end_date = db.Column(db.DateTime(timezone=True), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=FundingStatus.ACTIVE.value)
    created_by = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        CheckConstraint(check_in("status", FundingStatus), name="valid_funding_status"),
        CheckConstraint("months_funded > 0", name="positive_months_funded"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "amount": str(self.amount) if self.amount is not None else None,
            "monthsFunded": self.months_funded,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "status": self.status,
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
