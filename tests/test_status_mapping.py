import pytest

from filmmania.billing.reconciliation import (
    derive_plan_type,
    map_payment_status,
    map_subscription_status,
    minor_units_to_decimal,
)
from filmmania.models import PaymentStatus, PlanType, SubscriptionStatus


@pytest.mark.parametrize("vendor_status, expected", [
    ("active", SubscriptionStatus.ACTIVE),
    ("trialing", SubscriptionStatus.TRIALING),
    ("past_due", SubscriptionStatus.PAST_DUE),
    ("canceled", SubscriptionStatus.CANCELLED),
    ("unpaid", SubscriptionStatus.INACTIVE),
    ("incomplete", SubscriptionStatus.INACTIVE),
    ("incomplete_expired", SubscriptionStatus.INACTIVE),
    ("paused", SubscriptionStatus.INACTIVE),
    ("something_new", SubscriptionStatus.INACTIVE),
    ("", SubscriptionStatus.INACTIVE),
    (None, SubscriptionStatus.INACTIVE),
])
def test_subscription_status_mapping_is_total(vendor_status, expected):
    assert map_subscription_status(vendor_status) is expected


@pytest.mark.parametrize("vendor_status, expected", [
    ("succeeded", PaymentStatus.SUCCEEDED),
    ("pending", PaymentStatus.PENDING),
    ("processing", PaymentStatus.PENDING),
    ("failed", PaymentStatus.FAILED),
    ("requires_payment_method", PaymentStatus.PENDING),
    ("requires_action", PaymentStatus.PENDING),
    (None, PaymentStatus.PENDING),
])
def test_payment_status_mapping(vendor_status, expected):
    assert map_payment_status(vendor_status) is expected


def test_canceled_payment_maps_to_failed():
    """Pinned decision: a canceled payment intent is recorded as failed."""
    assert map_payment_status("canceled") is PaymentStatus.FAILED


def test_payment_status_table_comes_from_app_config(app):
    app.config["PAYMENT_STATUS_MAP"] = {"canceled": "refunded"}
    assert map_payment_status("canceled") is PaymentStatus.REFUNDED
    assert map_payment_status("succeeded") is PaymentStatus.PENDING


def test_plan_type_from_interval():
    assert derive_plan_type("year") is PlanType.YEARLY
    assert derive_plan_type("month") is PlanType.MONTHLY
    assert derive_plan_type("week") is PlanType.MONTHLY
    assert derive_plan_type(None) is PlanType.MONTHLY


def test_minor_units_conversion():
    assert str(minor_units_to_decimal(1999)) == "19.99"
    assert str(minor_units_to_decimal(5)) == "0.05"
    assert str(minor_units_to_decimal(100000)) == "1000.00"
