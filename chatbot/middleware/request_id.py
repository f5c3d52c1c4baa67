"""Request ID middleware for log correlation.

Each chat turn produces logs from the route, the completion service and
the provider client; the request id bound here is what joins them. A
browser-supplied X-Request-ID is reused only if it is short and plain,
otherwise a fresh one is generated. Health probes are not logged.

Usage:
    from chatbot.middleware.request_id import init_request_id_middleware
    init_request_id_middleware(app)
"""
from __future__ import annotations

import re
import time
import uuid

import structlog
from flask import Flask, g, request

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")
_UNLOGGED_PATHS = {"/api/health"}


def _request_id_from(headers) -> str:
    supplied = headers.get(REQUEST_ID_HEADER, "")
    if _SAFE_REQUEST_ID.match(supplied):
        return supplied
    return uuid.uuid4().hex


def init_request_id_middleware(app: Flask) -> None:
    """Register before/after hooks for request ID tracing.

    Args:
        app: Flask application instance.
    """
    logger = structlog.get_logger(__name__)

    @app.before_request
    def bind_request_context() -> None:
        g.request_id = _request_id_from(request.headers)
        g.request_started = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=g.request_id, path=request.path)

    @app.after_request
    def finish_request(response):
        response.headers[REQUEST_ID_HEADER] = g.get("request_id", "unknown")

        if request.path not in _UNLOGGED_PATHS:
            started = g.get("request_started")
            logger.info(
                "request_completed",
                method=request.method,
                status=response.status_code,
                duration_ms=round((time.monotonic() - started) * 1000) if started else None,
            )
        return response
