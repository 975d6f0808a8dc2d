import logging

from flask import Blueprint, current_app, jsonify, request

from filmmania.billing.reconciliation import ReconciliationEngine
from filmmania.dao import payment_dao, subscription_dao, user_dao
from filmmania.errors import MissingOwnerError
from filmmania.extensions import billing_gateway
from filmmania.responses import error

logger = logging.getLogger(__name__)

webhooks_bp = Blueprint("webhooks", __name__, url_prefix="/api/webhooks")

SIGNATURE_HEADER = "Stripe-Signature"


@webhooks_bp.route("/stripe", methods=["POST"])
def stripe_webhook():
    """
    Receive a Stripe event.

    Signature failures answer 400 so Stripe stops retrying; store failures
    answer 500 so it retries. Owner-less objects are dropped but still
    acknowledged.
    """
    signature = request.headers.get(SIGNATURE_HEADER)
    secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
    if not signature or not secret:
        logger.warning("Webhook rejected: missing signature header or secret")
        return error("Missing stripe signature or webhook secret", 400)

    event = billing_gateway.verify_webhook_signature(request.get_data(), signature, secret)

    engine = ReconciliationEngine(users=user_dao, subscriptions=subscription_dao, payments=payment_dao)
    try:
        engine.handle_event(event)
    except MissingOwnerError as e:
        logger.warning(
            f"Dropping webhook event: {e.message}",
            extra={"event_id": event.id, "event_type": event.type, "object_id": e.object_id},
        )

    return jsonify({"received": True}), 200
