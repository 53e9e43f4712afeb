"""Unit tests for the Gemini client (payload, response interpretation, mocked API)."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from lensedit.core.client import (
    FALLBACK_FAILURE_MESSAGE,
    NO_IMAGE_MESSAGE,
    GeminiClient,
    _truncate_image_data_for_log,
    edit_image,
    interpret_parts,
)
from lensedit.core.config import IMAGE_EDIT_MODEL, Config
from lensedit.core.encoder import EncodedPart
from lensedit.core.outcome import Failure, Success
from lensedit.core.response import ImagePart, TextPart
from lensedit.utils.exceptions import (
    APIError,
    ConfigurationError,
    EmptyResponseError,
    ModelRefusalError,
    NetworkError,
    RequestTimeoutError,
)

IMAGE = EncodedPart(data="aGVsbG8=", mime_type="image/png")

LONG_REFUSAL = (
    "Sorry, I can't do that because of policy reasons and more explanation text "
    "padding to exceed one hundred characters total length here"
)


def _json_response(body: object, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.headers.get.return_value = "application/json"
    response.json.return_value = body
    response.text = str(body)
    return response


def _image_body(data: str = "QQ==", mime: str | None = "image/jpeg") -> dict:
    inline: dict = {"data": data}
    if mime is not None:
        inline["mimeType"] = mime
    return {"candidates": [{"content": {"parts": [{"inlineData": inline}]}}]}


def _generate(body_or_response: object, config: Config | None = None):
    config = config or Config(gemini_api_key="test-key")
    response = (
        body_or_response
        if isinstance(body_or_response, MagicMock)
        else _json_response(body_or_response)
    )
    with patch("lensedit.core.client.requests.post", return_value=response) as post:
        outcome = asyncio.run(GeminiClient(config).generate(IMAGE, "make it blue"))
    return outcome, post


@pytest.mark.unit
class TestInterpretParts:
    def test_first_image_part_wins(self):
        result = interpret_parts(
            [TextPart("here you go"), ImagePart("QQ==", "image/jpeg"), ImagePart("Qg==", "image/png")]
        )
        assert result == Success(result_image="data:image/jpeg;base64,QQ==")

    def test_missing_mime_defaults_to_png(self):
        result = interpret_parts([ImagePart("QQ==", None)])
        assert result.result_image == "data:image/png;base64,QQ=="

    def test_text_only_raises_refusal_with_truncated_text(self):
        with pytest.raises(ModelRefusalError) as exc_info:
            interpret_parts([TextPart(LONG_REFUSAL)])
        assert f"{LONG_REFUSAL[:100]}..." in str(exc_info.value)
        assert LONG_REFUSAL[:101] not in str(exc_info.value)
        assert exc_info.value.text == LONG_REFUSAL

    def test_empty_raises_empty_response(self):
        with pytest.raises(EmptyResponseError) as exc_info:
            interpret_parts([])
        assert str(exc_info.value) == NO_IMAGE_MESSAGE


@pytest.mark.unit
class TestGenerateMocked:
    """GeminiClient.generate with mocked requests.post."""

    def test_success_builds_data_url(self):
        outcome, _ = _generate(_image_body("QQ==", "image/jpeg"))
        assert outcome == Success(result_image="data:image/jpeg;base64,QQ==")

    def test_success_without_mime_type(self):
        outcome, _ = _generate(_image_body("QQ==", None))
        assert outcome == Success(result_image="data:image/png;base64,QQ==")

    def test_payload_image_first_then_text(self):
        _, post = _generate(_image_body())
        payload = post.call_args[1]["json"]
        parts = payload["contents"]["parts"]
        assert parts[0] == {"inlineData": {"data": "aGVsbG8=", "mimeType": "image/png"}}
        assert parts[1] == {"text": "make it blue"}
        assert len(parts) == 2

    def test_fixed_model_in_url_and_key_in_header(self):
        config = Config(gemini_api_key="test-key", gemini_base_url="https://custom.example/v1beta/")
        _, post = _generate(_image_body(), config=config)
        url = post.call_args[0][0]
        assert url == f"https://custom.example/v1beta/models/{IMAGE_EDIT_MODEL}:generateContent"
        headers = post.call_args[1]["headers"]
        assert headers["x-goog-api-key"] == "test-key"
        assert post.call_args[1]["timeout"] == config.generation_timeout

    def test_one_call_per_invocation(self):
        _, post = _generate(_image_body())
        assert post.call_count == 1

    def test_text_refusal_is_failure(self):
        body = {"candidates": [{"content": {"parts": [{"text": LONG_REFUSAL}]}}]}
        outcome, _ = _generate(body)
        assert isinstance(outcome, Failure)
        assert f"{LONG_REFUSAL[:100]}..." in outcome.message
        assert "data:" not in outcome.message
        assert isinstance(outcome.error, ModelRefusalError)

    def test_no_candidates_is_failure(self):
        outcome, _ = _generate({})
        assert outcome == Failure(message=NO_IMAGE_MESSAGE)
        assert "No image data received" in outcome.message

    def test_empty_candidates_list_is_failure(self):
        outcome, _ = _generate({"candidates": []})
        assert isinstance(outcome, Failure)
        assert outcome.message == NO_IMAGE_MESSAGE

    def test_candidate_without_parts_is_failure(self):
        outcome, _ = _generate({"candidates": [{"content": {}}]})
        assert outcome.message == NO_IMAGE_MESSAGE

    def test_malformed_body_is_failure(self):
        outcome, _ = _generate({"candidates": "not-a-list"})
        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, APIError)
        assert "Malformed response" in outcome.message

    def test_json_parse_error_is_failure(self):
        response = MagicMock()
        response.status_code = 200
        response.json.side_effect = ValueError("bad json")
        response.text = "{invalid"
        outcome, _ = _generate(response)
        assert isinstance(outcome, Failure)
        assert "Failed to parse API response as JSON" in outcome.message

    @pytest.mark.parametrize(
        "status,fragment",
        [
            (401, "Authentication failed"),
            (403, "Authentication failed"),
            (404, "Model not found"),
            (429, "Rate limit exceeded"),
            (503, "Gemini service error: 503"),
        ],
    )
    def test_http_errors_are_failures(self, status, fragment):
        response = _json_response({"error": {"message": "nope"}}, status_code=status)
        outcome, _ = _generate(response)
        assert isinstance(outcome, Failure)
        assert fragment in outcome.message
        assert outcome.error.status_code == status

    def test_http_400_uses_error_message_from_body(self):
        response = _json_response(
            {"error": {"code": 400, "message": "Unsupported MIME type: image/x-foo"}},
            status_code=400,
        )
        outcome, _ = _generate(response)
        assert "Unsupported MIME type: image/x-foo" in outcome.message

    def test_timeout_is_failure(self):
        config = Config(gemini_api_key="k", generation_timeout=5)
        with patch(
            "lensedit.core.client.requests.post",
            side_effect=requests.exceptions.Timeout("slow"),
        ):
            outcome = asyncio.run(GeminiClient(config).generate(IMAGE, "x"))
        assert isinstance(outcome.error, RequestTimeoutError)
        assert "timed out after 5 seconds" in outcome.message

    def test_connection_error_is_failure(self):
        with patch(
            "lensedit.core.client.requests.post",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            outcome = asyncio.run(GeminiClient(Config(gemini_api_key="k")).generate(IMAGE, "x"))
        assert isinstance(outcome.error, NetworkError)
        assert "Failed to connect" in outcome.message

    def test_unexpected_exception_without_message_uses_fallback(self):
        with patch("lensedit.core.client.requests.post", side_effect=RuntimeError()):
            outcome = asyncio.run(GeminiClient(Config(gemini_api_key="k")).generate(IMAGE, "x"))
        assert outcome.message == FALLBACK_FAILURE_MESSAGE

    def test_missing_api_key_is_failure_without_request(self):
        with patch("lensedit.core.client.requests.post") as post:
            outcome = asyncio.run(GeminiClient(Config(gemini_api_key="")).generate(IMAGE, "x"))
        post.assert_not_called()
        assert isinstance(outcome.error, ConfigurationError)
        assert "API key" in outcome.message

    def test_failure_is_logged(self, caplog):
        with patch("lensedit.core.client.requests.post", side_effect=RuntimeError("boom")):
            with caplog.at_level("ERROR", logger="lensedit"):
                asyncio.run(GeminiClient(Config(gemini_api_key="k")).generate(IMAGE, "x"))
        assert any("boom" in r.getMessage() for r in caplog.records)

    def test_edit_image_uses_given_config(self):
        config = Config(gemini_api_key="other-key")
        with patch(
            "lensedit.core.client.requests.post", return_value=_json_response(_image_body())
        ) as post:
            outcome = asyncio.run(edit_image(IMAGE, "x", config=config))
        assert isinstance(outcome, Success)
        assert post.call_args[1]["headers"]["x-goog-api-key"] == "other-key"


@pytest.mark.unit
class TestTruncateForLog:
    def test_long_base64_replaced(self):
        payload = {"inlineData": {"data": "A" * 500, "mimeType": "image/png"}}
        out = _truncate_image_data_for_log(payload)
        assert out["inlineData"]["data"] == "<string, 500 chars>"
        assert out["inlineData"]["mimeType"] == "image/png"

    def test_text_kept(self):
        out = _truncate_image_data_for_log([{"text": "t" * 300}])
        assert out[0]["text"] == "t" * 300
