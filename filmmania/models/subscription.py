import uuid

from sqlalchemy import CheckConstraint, Index

from filmmania.extensions import db
from filmmania.models.enums import PlanType, SubscriptionStatus, check_in
from filmmania.utils.time import utcnow


def _iso(value):
    return value.isoformat() if value else None


class Subscription(db.Model):
    __tablename__ = "subscriptions"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Null for admin-funded rows that never touched the vendor
    stripe_subscription_id = db.Column(db.String(255), unique=True, nullable=True, index=True)

    status = db.Column(db.String(20), nullable=False, default=SubscriptionStatus.INACTIVE.value)
    plan_type = db.Column(db.String(20), nullable=False, default=PlanType.MONTHLY.value)

    start_date = db.Column(db.DateTime(timezone=True), nullable=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)
    current_period_start = db.Column(db.DateTime(timezone=True), nullable=True)
    current_period_end = db.Column(db.DateTime(timezone=True), nullable=True)

    funded_by_admin = db.Column(db.Boolean, default=False, nullable=False)
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", back_populates="subscriptions")
    payments = db.relationship("Payment", back_populates="subscription", lazy="dynamic", passive_deletes=True)

    __table_args__ = (
        CheckConstraint(check_in("status", SubscriptionStatus), name="valid_subscription_status"),
        CheckConstraint(check_in("plan_type", PlanType), name="valid_plan_type"),
        Index("idx_subscriptions_user_created", "user_id", "created_at"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "stripeSubscriptionId": self.stripe_subscription_id,
            "status": self.status,
            "planType": self.plan_type,
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "currentPeriodStart": _iso(self.current_period_start),
            "currentPeriodEnd": _iso(self.current_period_end),
            "fundedByAdmin": self.funded_by_admin,
            "cancelledAt": _iso(self.cancelled_at),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Subscription {self.id} {self.status}>"
