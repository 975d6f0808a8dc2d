"""
Webhook-driven reconciliation of local subscription and payment rows.

Every upsert is a full overwrite keyed by the vendor id, so replaying an
event converges on the same row. There is no ordering protection: the last
event processed wins.
"""

import logging
from decimal import Decimal
from typing import Mapping, Optional

from flask import current_app, has_app_context
from sqlalchemy.exc import SQLAlchemyError

from filmmania.billing.events import (
    SUBSCRIPTION_DELETED,
    PaymentIntentEvent,
    SubscriptionEvent,
    UnhandledEvent,
    VendorEvent,
    VendorPaymentIntent,
    VendorSubscription,
)
from filmmania.billing.stores import PaymentStore, SubscriptionStore, UserStore
from filmmania.config.base import BaseConfig
from filmmania.errors import MissingOwnerError, ReconciliationError
from filmmania.models import Payment, PaymentStatus, PlanType, Subscription, SubscriptionStatus
from filmmania.utils.time import from_timestamp, utcnow

logger = logging.getLogger(__name__)


SUBSCRIPTION_STATUS_MAP = {
    "active": SubscriptionStatus.ACTIVE,
    "trialing": SubscriptionStatus.TRIALING,
    "past_due": SubscriptionStatus.PAST_DUE,
    "canceled": SubscriptionStatus.CANCELLED,
    "unpaid": SubscriptionStatus.INACTIVE,
    "incomplete": SubscriptionStatus.INACTIVE,
    "incomplete_expired": SubscriptionStatus.INACTIVE,
    "paused": SubscriptionStatus.INACTIVE,
}


def map_subscription_status(vendor_status: Optional[str]) -> SubscriptionStatus:
    """Map a Stripe subscription status; anything unknown is inactive."""
    return SUBSCRIPTION_STATUS_MAP.get(vendor_status or "", SubscriptionStatus.INACTIVE)


def map_payment_status(vendor_status: Optional[str], table: Optional[Mapping[str, str]] = None,
                       default: Optional[str] = None) -> PaymentStatus:
    """
    Map a Stripe payment-intent status through the configured table.

    The table defaults to PAYMENT_STATUS_MAP from the app config (or the
    base config outside an app context).
    """
    if table is None:
        table = _config_value("PAYMENT_STATUS_MAP")
    if default is None:
        default = _config_value("PAYMENT_STATUS_DEFAULT")
    return PaymentStatus(table.get(vendor_status or "", default))


def derive_plan_type(interval: Optional[str]) -> PlanType:
    return PlanType.YEARLY if interval == "year" else PlanType.MONTHLY


def minor_units_to_decimal(amount: int) -> Decimal:
    return (Decimal(amount) / Decimal(100)).quantize(Decimal("0.01"))


def _config_value(name):
    if has_app_context():
        return current_app.config.get(name, getattr(BaseConfig, name))
    return getattr(BaseConfig, name)


class ReconciliationEngine:
    """Applies verified vendor events to the local store."""

    def __init__(self, users: UserStore, subscriptions: SubscriptionStore, payments: PaymentStore):
        self.users = users
        self.subscriptions = subscriptions
        self.payments = payments

    def _require_owner(self, owner_id, object_type, object_id):
        if not owner_id:
            raise MissingOwnerError(object_type, object_id)
        if self.users.get_by_id(owner_id) is None:
            raise MissingOwnerError(object_type, object_id, owner_id=owner_id)
        return owner_id

    def handle_event(self, event: VendorEvent):
        """
        Dispatch one event. Returns the touched row, or None when the event
        was ignored.

        Raises MissingOwnerError for owner-less vendor objects and
        ReconciliationError when the store fails.
        """
        log_extra = {"event_id": event.id, "event_type": event.type}
        logger.info("Reconciling webhook event", extra=log_extra)

        try:
            if isinstance(event, SubscriptionEvent):
                if event.type == SUBSCRIPTION_DELETED:
                    return self.mark_subscription_deleted(event.subscription.id)
                return self.sync_subscription(event.subscription)
            if isinstance(event, PaymentIntentEvent):
                return self.sync_payment(event.payment_intent)
        except SQLAlchemyError as e:
            logger.error(f"Store failure while reconciling: {e}", extra=log_extra)
            raise ReconciliationError() from e

        if isinstance(event, UnhandledEvent):
            logger.info(f"Unhandled event type: {event.type}", extra=log_extra)
        return None

    def sync_subscription(self, vendor: VendorSubscription) -> Subscription:
        owner_id = self._require_owner(vendor.owner_id, "subscription", vendor.id)

        subscription = self.subscriptions.get_by_stripe_id(vendor.id)
        created = subscription is None
        if created:
            subscription = Subscription(stripe_subscription_id=vendor.id)

        subscription.user_id = owner_id
        subscription.stripe_subscription_id = vendor.id
        subscription.status = map_subscription_status(vendor.status).value
        subscription.plan_type = derive_plan_type(vendor.interval).value
        subscription.start_date = from_timestamp(vendor.created)
        subscription.end_date = from_timestamp(vendor.cancel_at or vendor.current_period_end)
        subscription.current_period_start = from_timestamp(vendor.current_period_start)
        subscription.current_period_end = from_timestamp(vendor.current_period_end)
        subscription.funded_by_admin = False
        subscription.cancelled_at = from_timestamp(vendor.canceled_at)

        self.subscriptions.save(subscription)
        logger.info(
            "Subscription created from webhook" if created else "Subscription updated from webhook",
            extra={
                "subscription_id": subscription.id,
                "stripe_subscription_id": vendor.id,
                "status": subscription.status,
            },
        )
        return subscription

    def mark_subscription_deleted(self, vendor_subscription_id: str) -> Optional[Subscription]:
        subscription = self.subscriptions.get_by_stripe_id(vendor_subscription_id)
        if subscription is None:
            logger.info(
                "Deleted subscription not found locally",
                extra={"stripe_subscription_id": vendor_subscription_id},
            )
            return None

        subscription.status = SubscriptionStatus.CANCELLED.value
        subscription.cancelled_at = utcnow()
        self.subscriptions.save(subscription)
        logger.info(
            "Subscription cancelled from webhook",
            extra={"subscription_id": subscription.id, "stripe_subscription_id": vendor_subscription_id},
        )
        return subscription

    def sync_payment(self, intent: VendorPaymentIntent) -> Payment:
        owner_id = self._require_owner(intent.owner_id, "payment_intent", intent.id)

        latest = self.subscriptions.latest_for_user(owner_id)
        payment = self.payments.get_by_intent_id(intent.id)
        if payment is None:
            payment = Payment(stripe_payment_intent_id=intent.id)

        payment.user_id = owner_id
        payment.subscription_id = latest.id if latest else None
        payment.amount = minor_units_to_decimal(intent.amount)
        payment.currency = intent.currency
        payment.status = map_payment_status(intent.status).value
        payment.payment_method = intent.payment_method
        payment.payment_metadata = {"payment_method": intent.payment_method}

        self.payments.save(payment)
        logger.info(
            "Payment reconciled",
            extra={
                "payment_id": payment.id,
                "payment_intent_id": intent.id,
                "status": payment.status,
            },
        )
        return payment
