import logging
import traceback

from flask import request
from werkzeug.exceptions import HTTPException

from filmmania.errors import AppError
from filmmania.responses import error

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """Register all error handlers for the application"""

    @app.errorhandler(AppError)
    def handle_app_error(exc):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={"path": request.path, "error_code": exc.code},
        )
        return error(exc.message, exc.status_code, exc.details)

    @app.errorhandler(404)
    def not_found(e):
        logger.info(f"Not found: {request.path}")
        return error("Route not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        logger.warning(f"Method not allowed: {request.method} {request.path}")
        return error(f"The {request.method} method is not supported for this endpoint", 405)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        logger.warning(f"HTTP {e.code}: {e.description} - Path: {request.path}")
        return error(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.error(
            f"Unhandled error: {e} - Path: {request.path}",
            extra={"traceback": traceback.format_exc()},
        )
        details = {"exception": repr(e)} if app.config.get("DEBUG", False) else None
        return error("Internal server error", 500, details)
