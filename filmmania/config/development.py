import os

from .base import BaseConfig


class DevelopmentConfig(BaseConfig):
    """
    Local development configuration.
    """

    DEBUG = True
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///filmmania_dev.db")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
