from flask import Blueprint
from flask_jwt_extended import get_jwt_identity, jwt_required

from filmmania.extensions import billing_gateway
from filmmania.middleware.auth import admin_required
from filmmania.responses import success, success_list
from filmmania.services.subscription_service import SubscriptionService
from filmmania.validation import Validator, json_body

subscriptions_bp = Blueprint("subscriptions", __name__, url_prefix="/api/subscriptions")


def _service():
    return SubscriptionService(billing_gateway)


@subscriptions_bp.route("/current", methods=["GET"])
@jwt_required()
def current_subscription():
    subscription = _service().current_subscription(get_jwt_identity())
    if subscription is None:
        return success(None, message="No subscription found")
    return success(subscription.to_dict())


@subscriptions_bp.route("/create", methods=["POST"])
@jwt_required()
def create_subscription():
    validator = Validator(json_body())
    price_id = validator.string("priceId")
    validator.raise_for_errors()

    subscription = _service().create_subscription(get_jwt_identity(), price_id)
    return success(subscription.to_dict(), message="Subscription created successfully", status=201)


@subscriptions_bp.route("/cancel", methods=["POST"])
@jwt_required()
def cancel_subscription():
    validator = Validator(json_body())
    subscription_id = validator.string("subscriptionId", required=False)
    immediate = validator.boolean("cancelImmediately", default=False)
    validator.raise_for_errors()

    subscription = _service().cancel_subscription(
        get_jwt_identity(), subscription_id=subscription_id, immediate=immediate
    )
    message = (
        "Subscription cancelled"
        if immediate
        else "Subscription will be cancelled at the end of the billing period"
    )
    return success(subscription.to_dict(), message=message)


@subscriptions_bp.route("", methods=["GET"])
@admin_required
def list_subscriptions():
    subscriptions = _service().list_subscriptions()
    return success_list([s.to_dict() for s in subscriptions])


@subscriptions_bp.route("/<subscription_id>", methods=["GET"])
@admin_required
def get_subscription(subscription_id):
    return success(_service().get_subscription(subscription_id).to_dict())
