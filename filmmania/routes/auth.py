import logging

from flask import Blueprint
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt_identity,
    jwt_required,
)

from filmmania.dao import user_dao
from filmmania.errors import AuthenticationError, ConflictError, NotFoundError
from filmmania.responses import success
from filmmania.validation import Validator, json_body

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _issue_tokens(user):
    claims = {"is_admin": user.is_admin}
    return {
        "accessToken": create_access_token(identity=user.id, additional_claims=claims),
        "refreshToken": create_refresh_token(identity=user.id, additional_claims=claims),
        "user": user.to_dict(),
    }


@auth_bp.route("/register", methods=["POST"])
def register():
    validator = Validator(json_body())
    email = validator.email()
    password = validator.string("password", min_length=8, max_length=128)
    first_name = validator.string("firstName", required=False, max_length=100)
    last_name = validator.string("lastName", required=False, max_length=100)
    validator.raise_for_errors()

    if user_dao.get_by_email(email):
        raise ConflictError("Email already registered")

    user = user_dao.create(email, password, first_name=first_name, last_name=last_name)
    logger.info("User registered", extra={"user_id": user.id})
    return success(_issue_tokens(user), message="User registered successfully", status=201)


@auth_bp.route("/login", methods=["POST"])
def login():
    validator = Validator(json_body())
    email = validator.email()
    password = validator.string("password")
    validator.raise_for_errors()

    user = user_dao.get_by_email(email)
    if user is None or not user.is_active or not user.check_password(password):
        logger.warning("Failed login attempt", extra={"email": email})
        raise AuthenticationError()

    user_dao.record_login(user)
    return success(_issue_tokens(user), message="Login successful")


@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    user = user_dao.get_by_id(get_jwt_identity())
    if user is None or not user.is_active:
        raise AuthenticationError("User no longer active")
    token = create_access_token(identity=user.id, additional_claims={"is_admin": user.is_admin})
    return success({"accessToken": token})


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = user_dao.get_by_id(get_jwt_identity())
    if user is None:
        raise NotFoundError("User not found")
    return success(user.to_dict())
