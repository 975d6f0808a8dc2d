import logging

from flask import Flask, jsonify

from filmmania.config import get_config
from filmmania.error_handlers import register_error_handlers
from filmmania.extensions import billing_gateway, init_extensions
from filmmania.logging_config import setup_logging
from filmmania.middleware.request_id import init_request_id_middleware

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Application factory."""
    config_class = get_config(config_name)
    config_class.validate()

    app = Flask(__name__)
    app.config.from_object(config_class)

    init_request_id_middleware(app)
    setup_logging(app)
    setup_sentry(app)
    init_extensions(app)

    # Model metadata must be registered before create_all / migrations run
    from filmmania import models  # noqa: F401
    from filmmania.routes import register_blueprints

    register_blueprints(app)
    register_error_handlers(app)
    register_health(app)

    logger.info(
        "Application created",
        extra={"config": config_class.__name__, "billing_enabled": billing_gateway.enabled},
    )
    return app


def setup_sentry(app):
    """Initialise Sentry in production when a DSN is configured."""
    dsn = app.config.get("SENTRY_DSN")
    if app.config.get("DEBUG") or app.config.get("TESTING") or not dsn:
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration

    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info("Sentry initialised")


def register_health(app):
    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({
            "status": "ok",
            "service": app.config.get("APP_NAME"),
            "billingEnabled": billing_gateway.enabled,
        }), 200
