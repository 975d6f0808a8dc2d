import os
from datetime import timedelta


class ConfigurationError(Exception):
    """
    Raised when an invalid or unsupported configuration is requested.
    """
    pass


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class BaseConfig:
    """
    Base configuration shared by all environments.
    """

    # Flask
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv("SECRET_KEY")

    # Application
    APP_NAME = "FilmMania Billing"

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # JWT
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        minutes=int(os.getenv("JWT_ACCESS_TOKEN_MINUTES", "1440"))
    )
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(
        days=int(os.getenv("JWT_REFRESH_TOKEN_DAYS", "30"))
    )

    # Stripe
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
    STRIPE_API_VERSION = os.getenv("STRIPE_API_VERSION")
    STRIPE_WEBHOOK_TOLERANCE = int(os.getenv("STRIPE_WEBHOOK_TOLERANCE", "300"))
    STRIPE_MAX_NETWORK_RETRIES = int(os.getenv("STRIPE_MAX_NETWORK_RETRIES", "0"))

    # Vendor payment status -> local payment status.
    # Unknown vendor values fall back to PAYMENT_STATUS_DEFAULT.
    PAYMENT_STATUS_MAP = {
        "succeeded": "succeeded",
        "pending": "pending",
        "processing": "pending",
        "failed": "failed",
        "canceled": "failed",
    }
    PAYMENT_STATUS_DEFAULT = "pending"

    # Admin funding
    DEFAULT_FUNDING_MONTHS = int(os.getenv("DEFAULT_FUNDING_MONTHS", "3"))

    # CORS
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ]

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_REQUESTS = _env_bool("LOG_REQUESTS")

    # Monitoring
    SENTRY_DSN = os.getenv("SENTRY_DSN")

    @classmethod
    def validate(cls):
        """Hook for environment-specific checks. No-op by default."""
        return None
