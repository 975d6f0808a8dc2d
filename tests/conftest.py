import hashlib
import hmac
import json
import time
from datetime import datetime, timezone

import pytest
from faker import Faker
from flask_jwt_extended import create_access_token

from filmmania import create_app
from filmmania.dao import user_dao
from filmmania.extensions import billing_gateway, db

fake = Faker()

WEBHOOK_SECRET = "whsec_test_secret"


def pytest_configure(config):
    config.addinivalue_line("markers", "db: mark test as database-intensive")
    config.addinivalue_line("markers", "auth: mark test as authentication-related")
    config.addinivalue_line("markers", "payment: mark test as payment-related")
    config.addinivalue_line("markers", "webhook: mark test as webhook-related")


@pytest.fixture()
def app():
    """Fresh application and in-memory database per test."""
    app = create_app("testing")
    app.config.update(STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def stripe_enabled(app):
    """Turn billing on with a mock key; Stripe calls must still be patched."""
    app.config["STRIPE_SECRET_KEY"] = "sk_test_mock"
    billing_gateway.init_app(app)
    yield billing_gateway
    app.config["STRIPE_SECRET_KEY"] = None
    billing_gateway.init_app(app)


@pytest.fixture()
def make_user(app):
    def _make_user(is_admin=False, password="Sup3rSecret!", **overrides):
        return user_dao.create(
            overrides.get("email", fake.unique.email()),
            password,
            first_name=overrides.get("first_name", fake.first_name()),
            last_name=overrides.get("last_name", fake.last_name()),
            is_admin=is_admin,
        )
    return _make_user


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def admin(make_user):
    return make_user(is_admin=True)


def auth_headers_for(user):
    token = create_access_token(identity=user.id, additional_claims={"is_admin": user.is_admin})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user_headers(user):
    return auth_headers_for(user)


@pytest.fixture()
def admin_headers(admin):
    return auth_headers_for(admin)


def sign_payload(payload, secret=WEBHOOK_SECRET, timestamp=None):
    """Build a Stripe-Signature header for the given raw body."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def epoch(year, month, day):
    return int(datetime(year, month, day, tzinfo=timezone.utc).timestamp())


def subscription_object(user_id, **overrides):
    obj = {
        "id": "sub_test_123",
        "object": "subscription",
        "customer": "cus_test_123",
        "status": "active",
        "created": epoch(2024, 1, 1),
        "current_period_start": epoch(2024, 1, 1),
        "current_period_end": epoch(2024, 2, 1),
        "cancel_at": None,
        "canceled_at": None,
        "cancel_at_period_end": False,
        "metadata": {"userId": user_id} if user_id else {},
        "items": {
            "data": [
                {"id": "si_test_1", "price": {"id": "price_monthly", "recurring": {"interval": "month"}}}
            ]
        },
    }
    obj.update(overrides)
    return obj


def payment_intent_object(user_id, **overrides):
    obj = {
        "id": "pi_test_123",
        "object": "payment_intent",
        "amount": 1999,
        "currency": "usd",
        "status": "succeeded",
        "payment_method_types": ["card"],
        "metadata": {"userId": user_id} if user_id else {},
    }
    obj.update(overrides)
    return obj


def event_envelope(event_type, obj, event_id="evt_test_1"):
    return {"id": event_id, "object": "event", "type": event_type, "data": {"object": obj}}


@pytest.fixture()
def post_webhook(client):
    """POST a correctly signed event envelope to the webhook endpoint."""
    def _post(envelope, secret=WEBHOOK_SECRET):
        payload = json.dumps(envelope)
        return client.post(
            "/api/webhooks/stripe",
            data=payload,
            headers={"Stripe-Signature": sign_payload(payload, secret), "Content-Type": "application/json"},
        )
    return _post
