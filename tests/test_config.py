"""Unit tests for Settings validation."""
import pytest
from pydantic import ValidationError

from chatbot.config import Settings


class TestSettings:
    """Tests for Settings validators."""

    def test_placeholder_api_key_rejected(self):
        with pytest.raises(ValidationError, match="OPENAI_API_KEY"):
            Settings(OPENAI_API_KEY="your-api-key-here")

    def test_log_level_normalized(self):
        settings = Settings(OPENAI_API_KEY="sk-test", LOG_LEVEL=" debug ")
        assert settings.LOG_LEVEL == "DEBUG"

    def test_invalid_log_format_rejected(self):
        with pytest.raises(ValidationError):
            Settings(OPENAI_API_KEY="sk-test", LOG_FORMAT="xml")

    def test_base_url_trailing_slash_stripped(self):
        settings = Settings(OPENAI_API_KEY="sk-test", OPENAI_BASE_URL="https://api.openai.com/v1/")
        assert settings.OPENAI_BASE_URL == "https://api.openai.com/v1"

    def test_default_secret_rejected_in_production(self):
        with pytest.raises(ValidationError, match="SECRET_KEY"):
            Settings(OPENAI_API_KEY="sk-test", FLASK_ENV="production")

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("*", "*"),
            ("http://localhost:5173, https://chat.example.com", ["http://localhost:5173", "https://chat.example.com"]),
        ],
    )
    def test_cors_origins(self, raw, expected):
        assert Settings(OPENAI_API_KEY="sk-test", CORS_ORIGINS=raw).cors_origins == expected
