import structlog
from flask import jsonify, request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db
from .schemas import format_validation_error

log = structlog.get_logger(__name__)

MISSING_TABLE_MESSAGE = "Database table not found. Please run migrations to create the expenses table."
CONNECTION_MESSAGE = "Database connection failed. Please check your DATABASE_URL environment variable."
GENERIC_MESSAGE = "Internal server error"


def persistence_error_message(exc: Exception) -> str:
    """Operator-facing summary of a database failure, free of driver detail."""
    text = str(getattr(exc, "orig", None) or exc).lower()
    if "no such table" in text or ("relation" in text and "does not exist" in text):
        return MISSING_TABLE_MESSAGE
    if "connection" in text or "connect to" in text or "econnrefused" in text:
        return CONNECTION_MESSAGE
    return GENERIC_MESSAGE


def validation_response(exc: ValidationError):
    message, field = format_validation_error(exc)
    log.warning("validation_failed", path=request.path, message=message)
    body = {"message": message}
    if field:
        body["field"] = field
    return jsonify(body), 400


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation(exc):
        return validation_response(exc)

    @app.errorhandler(SQLAlchemyError)
    def handle_database(exc):
        db.session.rollback()
        log.error("database_error", path=request.path, error_type=type(exc).__name__, exc_info=exc)
        return jsonify({"message": persistence_error_message(exc)}), 500

    @app.errorhandler(HTTPException)
    def handle_http(exc):
        if not request.path.startswith("/api/"):
            return exc
        return jsonify({"message": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        log.error("unhandled_error", path=request.path, exc_info=exc)
        return jsonify({"message": GENERIC_MESSAGE}), 500
