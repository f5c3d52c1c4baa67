"""Global Flask error handlers for consistent JSON error responses.

Every error leaving the app has the shape:
    { "error": "...", "fields": { ... } }   # "fields" on validation failures only

ServiceError details are logged for operators and never returned.

Usage:
    from chatbot.middleware.error_handlers import register_error_handlers
    register_error_handlers(app)
"""
from __future__ import annotations

import structlog
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from chatbot.models.responses import ErrorResponse
from chatbot.utils.exceptions import ChatBotError, ServiceError, ValidationError

logger = structlog.get_logger(__name__)

SERVICE_FAILURE_MESSAGE = "Failed to generate a response"


def error_response(message: str, code: int, fields: dict[str, list[str]] | None = None):
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error message.
        code: HTTP status code.
        fields: Optional per-field validation failures.

    Returns:
        Tuple of (response, status_code).
    """
    body = ErrorResponse(error=message, fields=fields)
    return jsonify(body.model_dump(exclude_none=True)), code


def register_error_handlers(app: Flask) -> None:
    """Register global error handlers on the Flask app.

    Args:
        app: Flask application instance.
    """

    # ── Custom Application Errors ─────────────────────────────────────

    @app.errorhandler(ChatBotError)
    def handle_chatbot_error(e: ChatBotError):
        """Handle ChatBotErrors that escaped a route."""
        logger.warning(
            "chatbot_error",
            error=e.message,
            error_type=type(e).__name__,
            status_code=e.status_code,
        )
        if isinstance(e, ValidationError):
            return error_response(e.message, 400, fields=e.fields)
        if isinstance(e, ServiceError):
            return error_response(SERVICE_FAILURE_MESSAGE, 500)
        return error_response(e.message, e.status_code)

    # ── Werkzeug HTTP exceptions (404, 405, 415, ...) ─────────────────

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return error_response(e.description or e.name or "Unknown error", e.code or 500)

    # ── Catch-all for truly unhandled exceptions ──────────────────────

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.error(
            "unexpected_error",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return error_response("An unexpected error occurred", 500)
