from .base import BaseConfig, ConfigurationError


class ProductionConfig(BaseConfig):
    """
    Production configuration.

    Billing cannot run disabled in production: a missing Stripe key is a
    startup failure rather than a per-request one.
    """

    DEBUG = False
    LOG_REQUESTS = True

    REQUIRED_SETTINGS = (
        "SECRET_KEY",
        "JWT_SECRET_KEY",
        "SQLALCHEMY_DATABASE_URI",
        "STRIPE_SECRET_KEY",
    )

    @classmethod
    def validate(cls):
        missing = [name for name in cls.REQUIRED_SETTINGS if not getattr(cls, name, None)]
        if missing:
            raise ConfigurationError(
                f"Missing required production settings: {', '.join(missing)}"
            )
