"""Shared pytest fixtures for the chat relay test suite.

Provides reusable fixtures for:
- Test settings (no .env required)
- A mock provider client and a fresh conversation store
- Flask app and test client wired with those collaborators
"""
from unittest.mock import MagicMock

import pytest

from chatbot import create_app
from chatbot.config import Settings
from chatbot.services.conversation_store import ConversationStore
from chatbot.services.llm_service import LLMResponse, LLMService


@pytest.fixture
def settings():
    """Create test settings."""
    return Settings(
        OPENAI_API_KEY="sk-test-key-12345",
        LOG_LEVEL="WARNING",
        LOG_FORMAT="console",
    )


@pytest.fixture
def mock_llm():
    """Create a mock LLMService that answers "hi there" as response r1."""
    llm = MagicMock(spec=LLMService)
    llm.create_response.return_value = LLMResponse(id="r1", text="hi there")
    return llm


@pytest.fixture
def store():
    """Create an empty ConversationStore."""
    return ConversationStore()


@pytest.fixture
def app(settings, mock_llm, store):
    """Create a Flask application wired to the mock provider."""
    app = create_app(settings=settings, llm_service=mock_llm, store=store)
    app.config["TESTING"] = True
    yield app


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
