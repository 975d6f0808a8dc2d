import uuid

from sqlalchemy import CheckConstraint

from filmmania.extensions import db
from filmmania.models.enums import PaymentStatus, check_in
from filmmania.utils.time import utcnow


class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subscription_id = db.Column(
        db.String(36), db.ForeignKey("subscriptions.id", ondelete="SET NULL"), nullable=True, index=True
    )
    stripe_payment_intent_id = db.Column(db.String(255), nullable=True, index=True)

    # Decimal currency units, never minor units
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="USD")
    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = db.Column(db.String(50), nullable=True)
    # "metadata" is reserved on declarative models
    payment_metadata = db.Column("metadata", db.JSON, nullable=True, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    subscription = db.relationship("Subscription", back_populates="payments")

    __table_args__ = (
        CheckConstraint(check_in("status", PaymentStatus), name="valid_payment_status"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "subscriptionId": self.subscription_id,
            "stripePaymentIntentId": self.stripe_payment_intent_id,
            "amount": str(self.amount) if self.amount is not None else None,
            "currency": self.currency,
            "status": self.status,
            "paymentMethod": self.payment_method,
            "metadata": self.payment_metadata or {},
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Payment {self.stripe_payment_intent_id} {self.status}>"
