from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from conftest import epoch, event_envelope, payment_intent_object, subscription_object
from filmmania.billing.events import parse_event
from filmmania.billing.reconciliation import ReconciliationEngine
from filmmania.dao import payment_dao, subscription_dao, user_dao
from filmmania.errors import MissingOwnerError, ReconciliationError
from filmmania.models import Payment, Subscription

MAPPED_FIELDS = (
    "user_id", "stripe_subscription_id", "status", "plan_type", "start_date", "end_date",
    "current_period_start", "current_period_end", "funded_by_admin", "cancelled_at",
)


@pytest.fixture()
def engine(app):
    return ReconciliationEngine(users=user_dao, subscriptions=subscription_dao, payments=payment_dao)


def snapshot(subscription):
    return {field: getattr(subscription, field) for field in MAPPED_FIELDS}


@pytest.mark.db
def test_subscription_created_inserts_row(engine, user):
    event = parse_event(event_envelope("customer.subscription.created", subscription_object(user.id)))

    engine.handle_event(event)

    row = Subscription.query.one()
    assert row.user_id == user.id
    assert row.status == "active"
    assert row.plan_type == "monthly"
    assert row.funded_by_admin is False
    assert row.start_date == datetime(2024, 1, 1)
    assert row.end_date == datetime(2024, 2, 1)
    assert row.current_period_end == datetime(2024, 2, 1)


@pytest.mark.db
def test_replayed_update_is_idempotent(engine, user):
    event = parse_event(event_envelope(
        "customer.subscription.updated",
        subscription_object(user.id, status="past_due"),
    ))

    engine.handle_event(event)
    first = snapshot(Subscription.query.one())
    engine.handle_event(event)

    assert Subscription.query.count() == 1
    assert snapshot(Subscription.query.one()) == first


@pytest.mark.db
def test_update_overwrites_every_field(engine, user):
    engine.handle_event(parse_event(event_envelope(
        "customer.subscription.created",
        subscription_object(user.id, cancel_at=epoch(2024, 1, 20), canceled_at=epoch(2024, 1, 10)),
    )))

    yearly = subscription_object(user.id, status="canceled")
    yearly["items"]["data"][0]["price"]["recurring"]["interval"] = "year"
    engine.handle_event(parse_event(event_envelope("customer.subscription.updated", yearly)))

    row = Subscription.query.one()
    assert row.status == "cancelled"
    assert row.plan_type == "yearly"
    # cancel_at and canceled_at were cleared by the later event
    assert row.end_date == datetime(2024, 2, 1)
    assert row.cancelled_at is None


@pytest.mark.db
def test_update_clears_admin_funding_flag(engine, user):
    subscription_dao.save(Subscription(
        user_id=user.id, stripe_subscription_id="sub_test_123", status="active",
        plan_type="monthly", funded_by_admin=True,
    ))

    engine.handle_event(parse_event(event_envelope("customer.subscription.updated", subscription_object(user.id))))

    assert Subscription.query.one().funded_by_admin is False


@pytest.mark.db
def test_deleted_marks_cancelled(engine, user):
    engine.handle_event(parse_event(event_envelope("customer.subscription.created", subscription_object(user.id))))

    engine.handle_event(parse_event(event_envelope("customer.subscription.deleted", subscription_object(user.id))))

    row = Subscription.query.one()
    assert row.status == "cancelled"
    assert row.cancelled_at is not None


@pytest.mark.db
def test_deleted_unknown_subscription_is_noop(engine, user):
    result = engine.handle_event(parse_event(event_envelope(
        "customer.subscription.deleted", subscription_object(user.id, id="sub_unknown"),
    )))

    assert result is None
    assert Subscription.query.count() == 0


@pytest.mark.db
def test_owner_less_subscription_writes_nothing(engine):
    event = parse_event(event_envelope("customer.subscription.created", subscription_object(None)))

    with pytest.raises(MissingOwnerError):
        engine.handle_event(event)

    assert Subscription.query.count() == 0


@pytest.mark.payment
def test_payment_amount_converted_to_decimal_units(engine, user):
    engine.handle_event(parse_event(event_envelope("payment_intent.succeeded", payment_intent_object(user.id))))

    payment = Payment.query.one()
    assert payment.amount == Decimal("19.99")
    assert payment.currency == "usd"
    assert payment.status == "succeeded"
    assert payment.payment_metadata == {"payment_method": "card"}
    assert payment.subscription_id is None


@pytest.mark.payment
def test_payment_links_latest_subscription(engine, user):
    older = subscription_dao.save(Subscription(
        user_id=user.id, status="cancelled", plan_type="monthly", created_at=datetime(2023, 1, 1),
    ))
    newer = subscription_dao.save(Subscription(
        user_id=user.id, status="active", plan_type="monthly", created_at=datetime(2024, 1, 1),
    ))

    engine.handle_event(parse_event(event_envelope("payment_intent.succeeded", payment_intent_object(user.id))))

    payment = Payment.query.one()
    assert payment.subscription_id == newer.id
    assert payment.subscription_id != older.id


@pytest.mark.payment
def test_failed_payment_updates_existing_row(engine, user):
    engine.handle_event(parse_event(event_envelope(
        "payment_intent.succeeded", payment_intent_object(user.id, status="processing"),
    )))
    engine.handle_event(parse_event(event_envelope(
        "payment_intent.payment_failed",
        payment_intent_object(user.id, status="requires_payment_method", payment_method_types=[]),
    )))

    payment = Payment.query.one()
    assert payment.status == "pending"
    assert payment.payment_metadata == {"payment_method": None}


@pytest.mark.payment
def test_owner_less_payment_writes_nothing(engine):
    with pytest.raises(MissingOwnerError):
        engine.handle_event(parse_event(event_envelope("payment_intent.succeeded", payment_intent_object(None))))

    assert Payment.query.count() == 0


def test_unhandled_event_returns_none(engine):
    assert engine.handle_event(parse_event({"id": "evt_1", "type": "charge.refunded", "data": {}})) is None


@pytest.mark.db
def test_store_failure_becomes_reconciliation_error(engine, user):
    event = parse_event(event_envelope("customer.subscription.created", subscription_object(user.id)))

    with patch.object(subscription_dao, "save", side_effect=OperationalError("INSERT", {}, Exception("db down"))):
        with pytest.raises(ReconciliationError):
            engine.handle_event(event)


@pytest.mark.db
def test_unknown_owner_subscription_writes_nothing(engine):
    event = parse_event(event_envelope("customer.subscription.created", subscription_object("ghost-user")))

    with pytest.raises(MissingOwnerError) as exc_info:
        engine.handle_event(event)

    assert exc_info.value.owner_id == "ghost-user"
    assert Subscription.query.count() == 0


@pytest.mark.payment
def test_unknown_owner_payment_writes_nothing(engine):
    with pytest.raises(MissingOwnerError):
        engine.handle_event(parse_event(event_envelope(
            "payment_intent.succeeded", payment_intent_object("ghost-user"),
        )))

    assert Payment.query.count() == 0
