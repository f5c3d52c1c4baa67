"""Health check endpoint.

Exposes GET /api/health for Docker HEALTHCHECK and monitoring systems.
The provider is not probed; each probe would cost a billed completion.

Response format:
    {
        "status": "healthy",
        "version": "1.0.0",
        "model": "gpt-5-nano",
        "conversations": 12
    }
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from chatbot import __version__

health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.route("/health", methods=["GET"])
def health_check():
    """Application health check endpoint."""
    settings = current_app.config["SETTINGS"]
    store = current_app.config["CONVERSATION_STORE"]

    return jsonify({
        "status": "healthy",
        "version": __version__,
        "model": settings.OPENAI_MODEL,
        "conversations": store.size,
    })
