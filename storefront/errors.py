"""Error kinds surfaced by the storefront services.

Every error renders as JSON in a single shape::

    {"error": "<kind>", "message": "<human readable reason>"}

Services raise these directly; blueprints never catch them.
"""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    status_code = 400
    kind = "error"
    default_message = "Request failed."
    retryable = False

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        body = {"error": self.kind, "message": self.message}
        if self.retryable:
            body["retryable"] = True
        return body


class NotFound(StorefrontError):
    status_code = 404
    kind = "not_found"
    default_message = "Resource not found."


class InvalidOperation(StorefrontError):
    status_code = 400
    kind = "invalid_operation"
    default_message = "Operation not allowed."


class Conflict(StorefrontError):
    status_code = 409
    kind = "conflict"
    default_message = "Operation conflicts with existing records."


class ValidationError(StorefrontError):
    status_code = 400
    kind = "validation_error"
    default_message = "Invalid request data."


class Unauthorized(StorefrontError):
    status_code = 401
    kind = "unauthorized"
    default_message = "Authentication required."


class Forbidden(StorefrontError):
    status_code = 403
    kind = "forbidden"
    default_message = "Not allowed."


class StorageError(StorefrontError):
    status_code = 502
    kind = "storage_error"
    default_message = "Object storage request failed."


class StorageTimeout(StorageError):
    status_code = 503
    kind = "storage_timeout"
    default_message = "Object storage timed out."
    retryable = True


def register_error_handlers(app):
    from storefront.extensions import db

    @app.errorhandler(StorefrontError)
    def handle_storefront_error(error):
        if error.status_code >= 500:
            logger.error("%s: %s", error.kind, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception("Database failure")
        return (
            jsonify(
                {
                    "error": "infrastructure_error",
                    "message": "A storage backend failure occurred.",
                }
            ),
            500,
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        kind = (error.name or "error").lower().replace(" ", "_")
        return jsonify({"error": kind, "message": error.description}), error.code
