"""
Billing Gateway Adapter.

Wraps the Stripe SDK behind a small interface that speaks the project's own
vendor types. The adapter never writes local state; reconciliation happens
when the matching webhook arrives.
"""

import json
import logging
from contextlib import contextmanager
from functools import wraps
from typing import Any, Dict, Optional

import stripe

from filmmania.billing.events import (
    VendorEvent,
    VendorPaymentIntent,
    VendorSubscription,
    parse_event,
)
from filmmania.errors import EventPayloadError, GatewayError, NotConfiguredError, SignatureError

logger = logging.getLogger(__name__)


def gateway_configured(func):
    """Refuse vendor calls while billing is disabled."""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        if not self.enabled:
            logger.warning(
                "Stripe operation blocked: billing disabled",
                extra={"stripe_operation": func.__name__},
            )
            raise NotConfiguredError()
        return func(self, *args, **kwargs)

    return wrapper


def _to_dict(resource):
    if hasattr(resource, "to_dict"):
        return resource.to_dict()
    return dict(resource)


class StripeGateway:
    """
    Stripe client bound to a Flask app's configuration.

    Without STRIPE_SECRET_KEY the gateway stays disabled and every operation
    raises NotConfiguredError; production refuses to start in that state.
    """

    def __init__(self, app=None):
        self._api_key: Optional[str] = None
        self._api_version: Optional[str] = None
        self._webhook_tolerance = stripe.Webhook.DEFAULT_TOLERANCE
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._api_key = app.config.get("STRIPE_SECRET_KEY") or None
        self._api_version = app.config.get("STRIPE_API_VERSION") or None
        self._webhook_tolerance = app.config.get(
            "STRIPE_WEBHOOK_TOLERANCE", stripe.Webhook.DEFAULT_TOLERANCE
        )
        stripe.max_network_retries = app.config.get("STRIPE_MAX_NETWORK_RETRIES", 0)
        app.extensions["billing_gateway"] = self

        if self.enabled:
            logger.info("Stripe billing enabled")
        else:
            logger.warning("STRIPE_SECRET_KEY not set; billing disabled")

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _request_options(self) -> Dict[str, Any]:
        options = {"api_key": self._api_key}
        if self._api_version:
            options["stripe_version"] = self._api_version
        return options

    @contextmanager
    def _vendor_call(self, operation: str, **context):
        try:
            yield
        except stripe.StripeError as e:
            logger.error(
                f"Stripe {operation} failed: {e.user_message or e}",
                extra={"stripe_operation": operation, "stripe_code": e.code, **context},
            )
            raise GatewayError(e.user_message or str(e), vendor_code=e.code) from e

    @gateway_configured
    def create_customer(self, email: str, name: Optional[str] = None,
                        metadata: Optional[Dict[str, str]] = None) -> str:
        params = {"email": email, "metadata": metadata or {}}
        if name:
            params["name"] = name
        with self._vendor_call("create_customer"):
            customer = stripe.Customer.create(**params, **self._request_options())
        customer_id = _to_dict(customer)["id"]
        logger.info("Stripe customer created", extra={"customer_id": customer_id})
        return customer_id

    @gateway_configured
    def create_subscription(self, customer_ref: str, price_ref: str,
                            metadata: Optional[Dict[str, str]] = None) -> VendorSubscription:
        with self._vendor_call("create_subscription", customer_id=customer_ref, price_id=price_ref):
            subscription = stripe.Subscription.create(
                customer=customer_ref,
                items=[{"price": price_ref}],
                metadata=metadata or {},
                payment_behavior="default_incomplete",
                payment_settings={"save_default_payment_method": "on_subscription"},
                expand=["latest_invoice.payment_intent"],
                **self._request_options(),
            )
        result = VendorSubscription.from_dict(_to_dict(subscription))
        logger.info(
            "Stripe subscription created",
            extra={"subscription_id": result.id, "customer_id": customer_ref},
        )
        return result

    @gateway_configured
    def cancel_subscription(self, vendor_subscription_id: str, immediate: bool = False) -> VendorSubscription:
        with self._vendor_call("cancel_subscription", subscription_id=vendor_subscription_id):
            if immediate:
                subscription = stripe.Subscription.cancel(
                    vendor_subscription_id, **self._request_options()
                )
            else:
                subscription = stripe.Subscription.modify(
                    vendor_subscription_id,
                    cancel_at_period_end=True,
                    **self._request_options(),
                )
        logger.info(
            "Stripe subscription cancelled",
            extra={"subscription_id": vendor_subscription_id, "immediate": immediate},
        )
        return VendorSubscription.from_dict(_to_dict(subscription))

    @gateway_configured
    def get_subscription(self, vendor_subscription_id: str) -> VendorSubscription:
        with self._vendor_call("get_subscription", subscription_id=vendor_subscription_id):
            subscription = stripe.Subscription.retrieve(
                vendor_subscription_id, **self._request_options()
            )
        return VendorSubscription.from_dict(_to_dict(subscription))

    @gateway_configured
    def create_payment_intent(self, amount: int, currency: str = "usd",
                              metadata: Optional[Dict[str, str]] = None) -> VendorPaymentIntent:
        with self._vendor_call("create_payment_intent", amount=amount, currency=currency):
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                metadata=metadata or {},
                automatic_payment_methods={"enabled": True},
                **self._request_options(),
            )
        return VendorPaymentIntent.from_dict(_to_dict(intent))

    def verify_webhook_signature(self, raw_payload: bytes, signature_header: str,
                                 shared_secret: str) -> VendorEvent:
        """
        Authenticate a webhook body and return the typed event.

        Works while billing is disabled: verification only needs the
        webhook secret, not an API key.
        """
        try:
            payload = raw_payload.decode("utf-8") if isinstance(raw_payload, bytes) else raw_payload
        except UnicodeDecodeError as e:
            raise SignatureError() from e

        try:
            stripe.WebhookSignature.verify_header(
                payload, signature_header, shared_secret, self._webhook_tolerance
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature verification failed", extra={"reason": str(e)})
            raise SignatureError() from e

        try:
            envelope = json.loads(payload)
        except ValueError as e:
            raise EventPayloadError("Webhook body is not valid JSON") from e

        return parse_event(envelope)
