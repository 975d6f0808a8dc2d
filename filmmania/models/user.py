import uuid

from sqlalchemy import CheckConstraint
from werkzeug.security import check_password_hash, generate_password_hash

from filmmania.extensions import db
from filmmania.models.enums import UserSubscriptionStatus, check_in
from filmmania.utils.time import utcnow


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)

    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Billing
    stripe_customer_id = db.Column(db.String(255), unique=True, nullable=True)
    # Denormalised copy of the entitlement, kept for fast reads
    subscription_status = db.Column(
        db.String(20), nullable=False, default=UserSubscriptionStatus.INACTIVE.value
    )

    last_login = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    subscriptions = db.relationship(
        "Subscription",
        back_populates="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            check_in("subscription_status", UserSubscriptionStatus),
            name="valid_user_subscription_status",
        ),
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def full_name(self):
        return " ".join(part for part in (self.first_name, self.last_name) if part) or None

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "isAdmin": self.is_admin,
            "isActive": self.is_active,
            "subscriptionStatus": self.subscription_status,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<User {self.email}>"
