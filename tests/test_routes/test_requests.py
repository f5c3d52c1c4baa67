"""Unit tests for chat request parsing."""
import pytest

from chatbot.models.requests import ChatRequest, parse_chat_request
from chatbot.utils.exceptions import ValidationError


class TestParseChatRequest:
    """Tests for parse_chat_request."""

    def test_valid_request(self):
        req = parse_chat_request({"prompt": " hi ", "conversationId": "11111111-1111-1111-1111-111111111111"})

        assert isinstance(req, ChatRequest)
        assert req.prompt == "hi"
        assert req.conversation_id == "11111111-1111-1111-1111-111111111111"

    def test_uuid_normalized(self):
        req = parse_chat_request({"prompt": "hi", "conversationId": "6F1C2B7E-0D2A-4C5B-9E8F-1A2B3C4D5E6F"})
        assert req.conversation_id == "6f1c2b7e-0d2a-4c5b-9e8f-1a2b3c4d5e6f"

    def test_custom_max_length(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_chat_request(
                {"prompt": "x" * 11, "conversationId": "11111111-1111-1111-1111-111111111111"},
                prompt_max_length=10,
            )
        assert exc_info.value.fields == {"prompt": ["Prompt is too long"]}

    def test_trimmed_length_is_measured(self):
        req = parse_chat_request({"prompt": "  " + "x" * 1000 + "  ", "conversationId": "11111111-1111-1111-1111-111111111111"})
        assert len(req.prompt) == 1000

    def test_none_body(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_chat_request(None)
        assert exc_info.value.status_code == 400
        assert "body" in exc_info.value.fields

    @pytest.mark.parametrize(
        "conversation_id",
        [
            "11111111111111111111111111111111",
            "{11111111-1111-1111-1111-111111111111}",
            "urn:uuid:11111111-1111-1111-1111-111111111111",
            "11111111-1111-1111-1111-11111111111",
        ],
    )
    def test_only_hyphenated_uuid_form_accepted(self, conversation_id):
        with pytest.raises(ValidationError) as exc_info:
            parse_chat_request({"prompt": "hi", "conversationId": conversation_id})
        assert exc_info.value.fields == {"conversationId": ["Invalid conversation id"]}
