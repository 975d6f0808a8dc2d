import logging

from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from filmmania.billing.gateway import StripeGateway
from filmmania.responses import error

logger = logging.getLogger(__name__)

db = SQLAlchemy()
jwt = JWTManager()
cors = CORS()
migrate = Migrate()
billing_gateway = StripeGateway()


def init_extensions(app):
    """Bind every extension to the app."""
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", [])}},
        supports_credentials=True,
    )
    billing_gateway.init_app(app)
    setup_jwt_callbacks()


def setup_jwt_callbacks():
    """Render JWT failures with the standard error envelope."""

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        logger.info("Rejected expired token", extra={"sub": jwt_payload.get("sub")})
        return error("Token has expired", 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return error(f"Invalid token: {reason}", 401)

    @jwt.unauthorized_loader
    def missing_token_callback(reason):
        return error("Authorization token required", 401)

    @jwt.needs_fresh_token_loader
    def token_not_fresh_callback(jwt_header, jwt_payload):
        return error("Fresh token required", 401)


__all__ = [
    "billing_gateway",
    "cors",
    "db",
    "init_extensions",
    "jwt",
    "migrate",
]
