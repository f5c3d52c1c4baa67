"""Unit tests for the LLM service."""
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from chatbot.services.llm_service import LLMResponse, LLMService
from chatbot.utils.exceptions import LLMRateLimitError, LLMServiceError, ServiceError


@pytest.fixture
def llm():
    """Create an LLMService instance that does not sleep between retries."""
    service = LLMService(api_key="test-key", model="test-model", backoff_base=0)
    yield service
    service.close()


def _mock_httpx_response(data, status_code=200, headers=None):
    """Create a mock httpx.Response."""
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.json.return_value = data
    resp.text = json.dumps(data)
    resp.headers = headers or {}
    return resp


def _response_body(response_id="resp_1", text="Hello! How can I help?"):
    return {
        "id": response_id,
        "object": "response",
        "status": "completed",
        "model": "test-model",
        "output": [
            {"type": "reasoning", "id": "rs_1", "summary": []},
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": text, "annotations": []}],
            },
        ],
        "usage": {"input_tokens": 10, "output_tokens": 5, "total_tokens": 15},
    }


class TestCreateResponse:
    """Tests for LLMService.create_response."""

    def test_text_response(self, llm):
        with patch.object(llm._client, "post", return_value=_mock_httpx_response(_response_body())):
            result = llm.create_response("Hi")

        assert isinstance(result, LLMResponse)
        assert result.id == "resp_1"
        assert result.text == "Hello! How can I help?"
        assert result.status == "completed"
        assert result.usage["total_tokens"] == 15

    def test_first_turn_omits_previous_response_id(self, llm):
        with patch.object(llm._client, "post", return_value=_mock_httpx_response(_response_body())) as post:
            llm.create_response("Hi")

        post.assert_called_once_with("/responses", json={"model": "test-model", "input": "Hi"})

    def test_chains_previous_response_id(self, llm):
        with patch.object(llm._client, "post", return_value=_mock_httpx_response(_response_body())) as post:
            llm.create_response("and then?", previous_response_id="resp_0")

        payload = post.call_args.kwargs["json"]
        assert payload["previous_response_id"] == "resp_0"
        assert payload["input"] == "and then?"

    def test_max_output_tokens_sent_when_configured(self):
        service = LLMService(api_key="k", model="m", max_output_tokens=100)
        with patch.object(service._client, "post", return_value=_mock_httpx_response(_response_body())) as post:
            service.create_response("Hi")
        service.close()

        assert post.call_args.kwargs["json"]["max_output_tokens"] == 100

    def test_output_text_field_preferred(self, llm):
        body = _response_body(text="from output")
        body["output_text"] = "from convenience field"
        with patch.object(llm._client, "post", return_value=_mock_httpx_response(body)):
            result = llm.create_response("Hi")

        assert result.text == "from convenience field"

    def test_missing_id_raises(self, llm):
        body = _response_body()
        del body["id"]
        with patch.object(llm._client, "post", return_value=_mock_httpx_response(body)):
            with pytest.raises(LLMServiceError, match="no id"):
                llm.create_response("Hi")

    def test_missing_text_raises(self, llm):
        body = _response_body()
        body["output"] = []
        with patch.object(llm._client, "post", return_value=_mock_httpx_response(body)):
            with pytest.raises(LLMServiceError, match="no output text"):
                llm.create_response("Hi")

    def test_failed_status_raises(self, llm):
        body = _response_body()
        body["status"] = "failed"
        body["error"] = {"message": "server overloaded"}
        with patch.object(llm._client, "post", return_value=_mock_httpx_response(body)):
            with pytest.raises(LLMServiceError, match="server overloaded"):
                llm.create_response("Hi")


class TestErrors:
    """Tests for provider error handling and retries."""

    def test_rate_limit_raises(self, llm):
        resp = _mock_httpx_response({}, status_code=429, headers={"Retry-After": "0"})
        with patch.object(llm._client, "post", return_value=resp):
            with pytest.raises(LLMRateLimitError):
                llm.create_response("Hi")

    def test_server_error_retried_then_raises(self, llm):
        resp = _mock_httpx_response({"error": "Internal"}, status_code=500)
        with patch.object(llm._client, "post", return_value=resp) as post:
            with pytest.raises(LLMServiceError):
                llm.create_response("Hi")

        assert post.call_count == 2

    def test_server_error_then_success(self, llm):
        responses = [
            _mock_httpx_response({"error": "Internal"}, status_code=503),
            _mock_httpx_response(_response_body()),
        ]
        with patch.object(llm._client, "post", side_effect=responses):
            result = llm.create_response("Hi")

        assert result.id == "resp_1"

    def test_client_error_not_retried(self, llm):
        resp = _mock_httpx_response({"error": {"message": "Previous response not found"}}, status_code=400)
        with patch.object(llm._client, "post", return_value=resp) as post:
            with pytest.raises(LLMServiceError) as exc_info:
                llm.create_response("Hi", previous_response_id="resp_gone")

        assert post.call_count == 1
        assert exc_info.value.status_code == 400

    def test_timeout_raises(self, llm):
        with patch.object(llm._client, "post", side_effect=httpx.TimeoutException("timeout")):
            with pytest.raises(LLMServiceError, match="timed out"):
                llm.create_response("Hi")

    def test_connection_error_raises(self, llm):
        with patch.object(llm._client, "post", side_effect=httpx.ConnectError("refused")):
            with pytest.raises(LLMServiceError, match="request failed"):
                llm.create_response("Hi")

    def test_errors_are_service_errors(self):
        assert issubclass(LLMServiceError, ServiceError)
        assert issubclass(LLMRateLimitError, ServiceError)
