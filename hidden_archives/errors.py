import logging
import traceback

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class DomainError(Exception):
    pass


class StorageError(DomainError):
    """The persistence layer could not read or write archive flags."""


class CategoryNotFound(DomainError):
    def __init__(self, slug):
        self.slug = slug
        super().__init__(f"Category not found: {slug}")


def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """
        Handles known HTTP errors (404, 401, 403, etc.)
        """
        logger.warning(f"{e.code} {e.name}: {request.method} {request.path}")
        response = {
            "error": e.name,
            "message": e.description,
            "status_code": e.code,
        }
        return jsonify(response), e.code

    @app.errorhandler(StorageError)
    def handle_storage_error(e):
        logger.error(f"Storage error on {request.method} {request.path}: {e}")
        response = {
            "error": "Service Unavailable",
            "message": "Category settings are temporarily unavailable.",
            "status_code": 503,
        }
        return jsonify(response), 503

    @app.errorhandler(Exception)
    def handle_exception(e):
        """
        Handles all unexpected server errors
        Prevents stack trace leakage in production
        """
        logger.error("Unhandled Exception:")
        logger.error(traceback.format_exc())

        response = {
            "error": "Internal Server Error",
            "message": "Something went wrong. Please try again later.",
            "status_code": 500,
        }
        return jsonify(response), 500
