"""
Typed vendor objects and webhook events.

Stripe payloads are validated once, here, and turned into small frozen
dataclasses. Nothing past this module touches raw vendor dictionaries.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from filmmania.errors import EventPayloadError

SUBSCRIPTION_CREATED = "customer.subscription.created"
SUBSCRIPTION_UPDATED = "customer.subscription.updated"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"
PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"

SUBSCRIPTION_EVENT_TYPES = frozenset({SUBSCRIPTION_CREATED, SUBSCRIPTION_UPDATED, SUBSCRIPTION_DELETED})
PAYMENT_INTENT_EVENT_TYPES = frozenset({PAYMENT_INTENT_SUCCEEDED, PAYMENT_INTENT_FAILED})

OWNER_METADATA_KEY = "userId"


def _require_mapping(value, what):
    if not isinstance(value, dict):
        raise EventPayloadError(f"Expected an object for {what}")
    return value


def _require_id(obj, what):
    object_id = obj.get("id")
    if not object_id or not isinstance(object_id, str):
        raise EventPayloadError(f"Missing id on {what}")
    return object_id


def _metadata(obj):
    metadata = obj.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise EventPayloadError("metadata must be an object")
    return {str(k): v for k, v in metadata.items()}


def _first_item(obj):
    items = obj.get("items") or {}
    data = items.get("data") if isinstance(items, dict) else None
    if data and isinstance(data[0], dict):
        return data[0]
    return {}


def _interval(item):
    price = item.get("price") or {}
    recurring = price.get("recurring") or {}
    if recurring.get("interval"):
        return recurring["interval"]
    # Legacy plan objects still appear on older API versions
    return (item.get("plan") or {}).get("interval")


@dataclass(frozen=True)
class VendorSubscription:
    id: str
    status: str
    customer: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created: Optional[int] = None
    cancel_at: Optional[int] = None
    canceled_at: Optional[int] = None
    current_period_start: Optional[int] = None
    current_period_end: Optional[int] = None
    interval: Optional[str] = None
    cancel_at_period_end: bool = False

    @property
    def owner_id(self) -> Optional[str]:
        return self.metadata.get(OWNER_METADATA_KEY) or None

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "VendorSubscription":
        obj = _require_mapping(obj, "subscription")
        item = _first_item(obj)
        customer = obj.get("customer")
        if isinstance(customer, dict):
            customer = customer.get("id")
        return cls(
            id=_require_id(obj, "subscription"),
            status=str(obj.get("status") or ""),
            customer=customer,
            metadata=_metadata(obj),
            created=obj.get("created"),
            cancel_at=obj.get("cancel_at"),
            canceled_at=obj.get("canceled_at"),
            # Newer API versions only report periods per item
            current_period_start=obj.get("current_period_start") or item.get("current_period_start"),
            current_period_end=obj.get("current_period_end") or item.get("current_period_end"),
            interval=_interval(item),
            cancel_at_period_end=bool(obj.get("cancel_at_period_end")),
        )


@dataclass(frozen=True)
class VendorPaymentIntent:
    id: str
    status: str
    amount: int
    currency: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    payment_method_types: List[str] = field(default_factory=list)
    client_secret: Optional[str] = None

    @property
    def owner_id(self) -> Optional[str]:
        return self.metadata.get(OWNER_METADATA_KEY) or None

    @property
    def payment_method(self) -> Optional[str]:
        return self.payment_method_types[0] if self.payment_method_types else None

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "VendorPaymentIntent":
        obj = _require_mapping(obj, "payment_intent")
        amount = obj.get("amount")
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise EventPayloadError("payment_intent amount must be an integer")
        return cls(
            id=_require_id(obj, "payment_intent"),
            status=str(obj.get("status") or ""),
            amount=amount,
            currency=str(obj.get("currency") or "usd"),
            metadata=_metadata(obj),
            payment_method_types=list(obj.get("payment_method_types") or []),
            client_secret=obj.get("client_secret"),
        )


@dataclass(frozen=True)
class SubscriptionEvent:
    id: str
    type: str
    subscription: VendorSubscription


@dataclass(frozen=True)
class PaymentIntentEvent:
    id: str
    type: str
    payment_intent: VendorPaymentIntent


@dataclass(frozen=True)
class UnhandledEvent:
    id: str
    type: str


VendorEvent = Union[SubscriptionEvent, PaymentIntentEvent, UnhandledEvent]


def parse_event(envelope: Dict[str, Any]) -> VendorEvent:
    """Turn a verified Stripe event envelope into a typed event."""
    envelope = _require_mapping(envelope, "event")
    event_type = envelope.get("type")
    if not event_type or not isinstance(event_type, str):
        raise EventPayloadError("Missing event type")
    event_id = str(envelope.get("id") or "")

    if event_type not in SUBSCRIPTION_EVENT_TYPES and event_type not in PAYMENT_INTENT_EVENT_TYPES:
        return UnhandledEvent(id=event_id, type=event_type)

    data = _require_mapping(envelope.get("data"), "event data")
    obj = data.get("object")

    if event_type in SUBSCRIPTION_EVENT_TYPES:
        return SubscriptionEvent(
            id=event_id, type=event_type, subscription=VendorSubscription.from_dict(obj)
        )
    return PaymentIntentEvent(
        id=event_id, type=event_type, payment_intent=VendorPaymentIntent.from_dict(obj)
    )
