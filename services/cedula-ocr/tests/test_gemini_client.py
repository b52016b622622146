"""Tests for Gemini client error mapping and reply handling."""

import sys
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from gemini_client import GeminiClient, GeminiServiceError, GeminiServiceUnavailable


def gemini_reply(text: str, **extra) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}], **extra}


@pytest.fixture
def gemini_client():
    """Create a Gemini client pointing at a fake endpoint."""
    client = GeminiClient(
        api_key="test-key",
        model="gemini-test",
        base_url="http://fake-gemini/v1beta",
        timeout=5,
        connect_timeout=2,
    )
    yield client
    client.close()


class TestConstruction:
    def test_missing_api_key_rejected(self):
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            GeminiClient(api_key="")

    def test_api_key_sent_as_header(self, gemini_client: GeminiClient):
        assert gemini_client._client.headers["x-goog-api-key"] == "test-key"


class TestGenerate:
    def test_successful_generation(self, gemini_client: GeminiClient):
        mock_response = httpx.Response(200, json=gemini_reply('{"numero_cedula": "51554033"}'))

        with patch.object(gemini_client._client, "post", return_value=mock_response) as post:
            text = gemini_client.generate([{"text": "prompt"}], {"temperature": 0.1})

        assert text == '{"numero_cedula": "51554033"}'
        url = post.call_args.args[0]
        assert url == "/models/gemini-test:generateContent"
        payload = post.call_args.kwargs["json"]
        assert payload["contents"] == [{"parts": [{"text": "prompt"}]}]
        assert payload["generationConfig"] == {"temperature": 0.1}

    def test_multiple_text_parts_joined(self, gemini_client: GeminiClient):
        body = {"candidates": [{"content": {"parts": [{"text": '{"a": '}, {"text": '"b"}'}]}}]}
        with patch.object(gemini_client._client, "post", return_value=httpx.Response(200, json=body)):
            assert gemini_client.generate([{"text": "p"}]) == '{"a": "b"}'

    def test_generation_config_omitted_when_empty(self, gemini_client: GeminiClient):
        with patch.object(gemini_client._client, "post", return_value=httpx.Response(200, json=gemini_reply("x"))) as post:
            gemini_client.generate([{"text": "p"}])
        assert "generationConfig" not in post.call_args.kwargs["json"]

    def test_usage_metadata_logged(self, gemini_client: GeminiClient, caplog):
        usage = {"promptTokenCount": 1200, "candidatesTokenCount": 150, "totalTokenCount": 1350}
        response = httpx.Response(200, json=gemini_reply("ok", usageMetadata=usage))
        with caplog.at_level("INFO"), patch.object(gemini_client._client, "post", return_value=response):
            gemini_client.generate([{"text": "p"}])
        assert "total=1350" in caplog.text

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable_statuses(self, gemini_client: GeminiClient, status: int):
        response = httpx.Response(status, json={"error": {"message": "Model overloaded"}})
        with patch.object(gemini_client._client, "post", return_value=response):
            with pytest.raises(GeminiServiceUnavailable, match="Model overloaded"):
                gemini_client.generate([{"text": "p"}])

    def test_400_raises_service_error(self, gemini_client: GeminiClient):
        response = httpx.Response(400, json={"error": {"message": "API key not valid"}})
        with patch.object(gemini_client._client, "post", return_value=response):
            with pytest.raises(GeminiServiceError, match="API key not valid"):
                gemini_client.generate([{"text": "p"}])

    def test_non_json_error_body(self, gemini_client: GeminiClient):
        response = httpx.Response(403, text="Forbidden")
        with patch.object(gemini_client._client, "post", return_value=response):
            with pytest.raises(GeminiServiceError, match="Forbidden"):
                gemini_client.generate([{"text": "p"}])

    def test_connection_error_is_retryable(self, gemini_client: GeminiClient):
        with patch.object(gemini_client._client, "post", side_effect=httpx.ConnectError("Connection refused")):
            with pytest.raises(GeminiServiceUnavailable, match="Cannot connect"):
                gemini_client.generate([{"text": "p"}])

    def test_read_timeout_is_retryable(self, gemini_client: GeminiClient):
        with patch.object(gemini_client._client, "post", side_effect=httpx.ReadTimeout("Read timed out")):
            with pytest.raises(GeminiServiceUnavailable, match="read timeout"):
                gemini_client.generate([{"text": "p"}])

    def test_other_http_error_not_retryable(self, gemini_client: GeminiClient):
        with patch.object(gemini_client._client, "post", side_effect=httpx.RemoteProtocolError("bad frame")):
            with pytest.raises(GeminiServiceError):
                gemini_client.generate([{"text": "p"}])

    def test_no_candidates(self, gemini_client: GeminiClient):
        with patch.object(gemini_client._client, "post", return_value=httpx.Response(200, json={})):
            with pytest.raises(GeminiServiceError, match="Respuesta inesperada"):
                gemini_client.generate([{"text": "p"}])

    def test_blocked_prompt(self, gemini_client: GeminiClient):
        body = {"promptFeedback": {"blockReason": "SAFETY"}}
        with patch.object(gemini_client._client, "post", return_value=httpx.Response(200, json=body)):
            with pytest.raises(GeminiServiceError, match="SAFETY"):
                gemini_client.generate([{"text": "p"}])

    def test_empty_text(self, gemini_client: GeminiClient):
        with patch.object(gemini_client._client, "post", return_value=httpx.Response(200, json=gemini_reply("  "))):
            with pytest.raises(GeminiServiceError, match="vacía"):
                gemini_client.generate([{"text": "p"}])


class TestHealth:
    def test_health_success(self, gemini_client: GeminiClient):
        mock_response = httpx.Response(200, json={"name": "models/gemini-test"})

        with patch.object(gemini_client._client, "get", return_value=mock_response):
            result = gemini_client.health()
            assert result == {"status": "reachable", "model": "models/gemini-test"}

    def test_health_error_status(self, gemini_client: GeminiClient):
        mock_response = httpx.Response(404, json={"error": {"message": "model not found"}})

        with patch.object(gemini_client._client, "get", return_value=mock_response):
            result = gemini_client.health()
            assert result == {"status": "unreachable", "error": "model not found"}

    def test_health_failure_returns_error(self, gemini_client: GeminiClient):
        with patch.object(gemini_client._client, "get", side_effect=httpx.ConnectError("refused")):
            result = gemini_client.health()
            assert result["status"] == "unreachable"
            assert "error" in result
