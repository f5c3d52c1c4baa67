"""Chat relay — Flask application package.

Serves a single JSON endpoint that relays a browser chat session to a
hosted language model, keeping multi-turn context by remembering each
conversation's last provider response id. The `create_app()` factory
wires configuration, logging, middleware, services and blueprints.
"""
from __future__ import annotations

import structlog
from flask import Flask
from flask_cors import CORS

from chatbot.config import Settings, get_settings
from chatbot.middleware.error_handlers import register_error_handlers
from chatbot.middleware.request_id import init_request_id_middleware
from chatbot.utils.logger import setup_logging

__version__ = "1.0.0"


def create_app(
    settings: Settings | None = None,
    llm_service=None,
    store=None,
) -> Flask:
    """Application factory pattern.

    Creates and configures the Flask application with:
    - Pydantic-based configuration loading
    - Structured logging (structlog)
    - Request ID middleware
    - Global error handlers
    - CORS configuration for /api/*
    - Service initialization (provider client, conversation store, chat service)
    - Blueprint registration (health, chat)

    Args:
        settings: Settings to use instead of the environment-loaded ones.
        llm_service: Provider client to use instead of building an LLMService.
        store: ConversationStore to use instead of a fresh one.

    Returns:
        Configured Flask application instance.
    """
    settings = settings or get_settings()

    # ── Logging (must be first so all subsequent logs are formatted) ──
    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
    logger = structlog.get_logger(__name__)

    # ── Flask app ─────────────────────────────────────────────────────
    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.config["FLASK_DEBUG"] = settings.FLASK_DEBUG
    app.config["SETTINGS"] = settings

    # ── Middleware ─────────────────────────────────────────────────────
    init_request_id_middleware(app)
    register_error_handlers(app)

    # ── CORS ──────────────────────────────────────────────────────────
    CORS(app, resources={r"/api/*": {"origins": settings.cors_origins}})

    # ── Services ──────────────────────────────────────────────────────
    _init_services(app, settings, llm_service=llm_service, store=store)

    # ── Blueprints ────────────────────────────────────────────────────
    from chatbot.routes.chat import chat_bp
    from chatbot.routes.health import health_bp
    app.register_blueprint(health_bp)
    app.register_blueprint(chat_bp)

    logger.info(
        "app_started",
        env=settings.FLASK_ENV,
        model=settings.OPENAI_MODEL,
        log_level=settings.LOG_LEVEL,
    )

    return app


def _init_services(app: Flask, settings: Settings, llm_service=None, store=None) -> None:
    """Build the provider client, conversation store and chat service.

    All services are stored on `app.config` for access via `current_app`.
    The provider client and store are created once here and passed down
    explicitly; nothing below this point reaches for a global.

    Args:
        app: Flask application instance.
        settings: Application settings.
        llm_service: Optional pre-built provider client.
        store: Optional pre-built conversation store.
    """
    from chatbot.services.chat_service import ChatService
    from chatbot.services.conversation_store import ConversationStore
    from chatbot.services.llm_service import LLMService

    logger = structlog.get_logger(__name__)
    logger.info("initializing_services")

    if llm_service is None:
        llm_service = LLMService(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.HTTP_TIMEOUT,
            max_retries=settings.HTTP_MAX_RETRIES,
            max_output_tokens=settings.OPENAI_MAX_OUTPUT_TOKENS,
        )

    if store is None:
        store = ConversationStore(
            ttl_seconds=settings.CONVERSATION_TTL_SECONDS,
            max_entries=settings.CONVERSATION_MAX_ENTRIES,
        )

    app.config["LLM_SERVICE"] = llm_service
    app.config["CONVERSATION_STORE"] = store
    app.config["CHAT_SERVICE"] = ChatService(llm_service, store)

    logger.info("services_initialized")
