import logging
from typing import Optional

from filmmania.billing.gateway import StripeGateway
from filmmania.billing.reconciliation import ReconciliationEngine
from filmmania.dao import payment_dao, subscription_dao, user_dao
from filmmania.errors import NotFoundError
from filmmania.models import Subscription, SubscriptionStatus
from filmmania.utils.time import utcnow

logger = logging.getLogger(__name__)


class SubscriptionService:
    """User-facing subscription operations that go through Stripe."""

    def __init__(self, gateway: StripeGateway, users=user_dao, subscriptions=subscription_dao,
                 payments=payment_dao):
        self.gateway = gateway
        self.users = users
        self.subscriptions = subscriptions
        self.engine = ReconciliationEngine(users=users, subscriptions=subscriptions, payments=payments)

    def current_subscription(self, user_id: str) -> Optional[Subscription]:
        return self.subscriptions.latest_for_user(user_id)

    def get_subscription(self, subscription_id: str) -> Subscription:
        subscription = self.subscriptions.get_by_id(subscription_id)
        if subscription is None:
            raise NotFoundError("Subscription not found")
        return subscription

    def list_subscriptions(self):
        return self.subscriptions.list_all()

    def ensure_customer(self, user) -> str:
        if user.stripe_customer_id:
            return user.stripe_customer_id
        customer_id = self.gateway.create_customer(
            email=user.email, name=user.full_name, metadata={"userId": user.id}
        )
        self.users.set_stripe_customer_id(user, customer_id)
        return customer_id

    def create_subscription(self, user_id: str, price_id: str):
        """
        Start a Stripe subscription and reconcile it right away.

        The matching customer.subscription.created webhook later overwrites
        the same row, so both paths converge.
        """
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        customer_id = self.ensure_customer(user)
        vendor = self.gateway.create_subscription(customer_id, price_id, metadata={"userId": user.id})
        subscription = self.engine.sync_subscription(vendor)
        logger.info(
            "Subscription created",
            extra={"user_id": user.id, "stripe_subscription_id": vendor.id},
        )
        return subscription

    def cancel_subscription(self, user_id: str, subscription_id: Optional[str] = None,
                            immediate: bool = False) -> Subscription:
        if subscription_id:
            subscription = self.subscriptions.get_by_id(subscription_id)
            if subscription is not None and subscription.user_id != user_id:
                subscription = None
        else:
            subscription = self.subscriptions.latest_for_user(user_id)

        if subscription is None or not subscription.stripe_subscription_id:
            raise NotFoundError("Subscription not found")

        self.gateway.cancel_subscription(subscription.stripe_subscription_id, immediate=immediate)

        if immediate:
            subscription.status = SubscriptionStatus.CANCELLED.value
            subscription.cancelled_at = utcnow()
            self.subscriptions.save(subscription)

        logger.info(
            "Subscription cancellation requested",
            extra={"subscription_id": subscription.id, "immediate": immediate},
        )
        return subscription
