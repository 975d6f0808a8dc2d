from .admin_funding import AdminFunding
from .enums import (
    FundingStatus,
    PaymentStatus,
    PlanType,
    SubscriptionStatus,
    UserSubscriptionStatus,
)
from .payment import Payment
from .subscription import Subscription
from .user import User

__all__ = [
    "AdminFunding",
    "FundingStatus",
    "Payment",
    "PaymentStatus",
    "PlanType",
    "Subscription",
    "SubscriptionStatus",
    "User",
    "UserSubscriptionStatus",
]
