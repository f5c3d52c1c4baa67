"""Chat blueprint — the browser-facing chat endpoint.

Routes:
    POST /api/chat → Generate the next reply in a conversation
"""
from __future__ import annotations

import structlog
from flask import Blueprint, current_app, jsonify, request

from chatbot.middleware.error_handlers import SERVICE_FAILURE_MESSAGE, error_response
from chatbot.models.requests import parse_chat_request
from chatbot.models.responses import ChatReply
from chatbot.utils.exceptions import ServiceError, ValidationError

logger = structlog.get_logger(__name__)

chat_bp = Blueprint("chat", __name__, url_prefix="/api")


@chat_bp.route("/chat", methods=["POST"])
def chat():
    """Process a chat turn and return the assistant's reply.

    Request JSON:
        {
            "prompt": "hello",
            "conversationId": "11111111-1111-1111-1111-111111111111"
        }

    Response JSON:
        200 { "message": "hi there" }
        400 { "error": "Invalid request", "fields": { "prompt": ["Prompt is required"] } }
        500 { "error": "Failed to generate a response" }
    """
    settings = current_app.config["SETTINGS"]
    data = request.get_json(force=True, silent=True)

    try:
        req = parse_chat_request(data, prompt_max_length=settings.PROMPT_MAX_LENGTH)
    except ValidationError as e:
        logger.info("chat_request_invalid", fields=sorted(e.fields))
        return error_response(e.message, 400, fields=e.fields)

    structlog.contextvars.bind_contextvars(conversation_id=req.conversation_id)

    chat_service = current_app.config["CHAT_SERVICE"]
    try:
        result = chat_service.complete(req.prompt, req.conversation_id)
    except ServiceError as e:
        logger.error("chat_processing_error", error=e.message, error_type=type(e).__name__)
        return error_response(SERVICE_FAILURE_MESSAGE, 500)

    return jsonify(ChatReply(message=result.reply_text).model_dump())
