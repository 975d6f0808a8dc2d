from flask import Blueprint, current_app
from flask_jwt_extended import get_jwt_identity

from filmmania.middleware.auth import admin_required
from filmmania.responses import success, success_list
from filmmania.services.funding_service import funding_service
from filmmania.validation import Validator, json_body

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.route("/fund-subscription", methods=["POST"])
@admin_required
def fund_subscription():
    """
    Grant a user free subscription months.

    Body: {"userId": str, "months"?: int = DEFAULT_FUNDING_MONTHS, "amount"?: number = 0}
    """
    validator = Validator(json_body())
    user_id = validator.string("userId")
    months = validator.integer(
        "months", default=current_app.config["DEFAULT_FUNDING_MONTHS"], minimum=1, maximum=120
    )
    amount = validator.number("amount", default=0, minimum=0)
    validator.raise_for_errors()

    result = funding_service.grant_funding(
        user_id, get_jwt_identity(), months=months, amount=amount
    )
    return success(result.to_dict(), message="Subscription funded successfully", status=201)


@admin_bp.route("/funding/stats", methods=["GET"])
@admin_required
def funding_stats():
    return success(funding_service.funding_stats())


@admin_bp.route("/funding/users", methods=["GET"])
@admin_required
def funded_users():
    return success_list(funding_service.funded_users())
