import logging
import logging.config
from datetime import datetime

from flask import g, has_request_context, request
from pythonjsonlogger import jsonlogger


class RequestIdFilter(logging.Filter):
    """
    Inject request_id into every log record if present.
    """

    def filter(self, record):
        record.request_id = getattr(g, "request_id", None) if has_request_context() else None
        return True


def build_logging_config(level):
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {
                "()": RequestIdFilter,
            },
        },
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "fmt": (
                    "%(asctime)s "
                    "%(levelname)s "
                    "%(name)s "
                    "%(message)s "
                    "%(request_id)s "
                    "%(module)s "
                    "%(funcName)s "
                    "%(lineno)d"
                ),
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["request_id"],
            },
        },
        "root": {
            "level": level,
            "handlers": ["default"],
        },
    }


def setup_logging(app):
    """Configure structured JSON logging and optional request logging."""
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    logging.config.dictConfig(build_logging_config(level))

    access_logger = logging.getLogger("filmmania.access")

    def _should_log():
        return app.config.get("DEBUG", False) or app.config.get("LOG_REQUESTS", False)

    @app.before_request
    def log_request():
        if _should_log():
            g.start_time = datetime.now()
            access_logger.info(
                f"Request: {request.method} {request.path}",
                extra={
                    "ip": request.remote_addr,
                    "user_agent": request.user_agent.string if request.user_agent else None,
                },
            )

    @app.after_request
    def log_response(response):
        if _should_log() and hasattr(g, "start_time"):
            duration = (datetime.now() - g.start_time).total_seconds() * 1000
            access_logger.info(
                f"Response: {request.method} {request.path} - {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": round(duration, 2),
                    "method": request.method,
                    "path": request.path,
                },
            )
        return response

    return app
