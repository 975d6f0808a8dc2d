"""
Narrow persistence capabilities the reconciliation engine depends on.

The SQLAlchemy DAOs satisfy these structurally; tests may pass any object
with the same methods.
"""

from typing import Optional, Protocol

from filmmania.models import Payment, Subscription, User


class UserStore(Protocol):
    def get_by_id(self, user_id: str) -> Optional[User]:
        ...


class SubscriptionStore(Protocol):
    def get_by_stripe_id(self, stripe_subscription_id: str) -> Optional[Subscription]:
        ...

    def latest_for_user(self, user_id: str) -> Optional[Subscription]:
        ...

    def save(self, instance: Subscription) -> Subscription:
        ...


class PaymentStore(Protocol):
    def get_by_intent_id(self, payment_intent_id: str) -> Optional[Payment]:
        ...

    def save(self, instance: Payment) -> Payment:
        ...
