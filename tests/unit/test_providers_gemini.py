"""Unit tests for the Gemini image client."""

import base64
import io
from unittest.mock import MagicMock, patch

import pytest
import requests
from PIL import Image

from logosmith.core.providers.gemini import (
    GeminiImageClient,
    extract_image,
    image_part,
    text_part,
)
from logosmith.utils.exceptions import (
    ConfigurationError,
    NetworkError,
    RemoteServiceError,
    RequestTimeoutError,
)

_MINIMAL_PNG_BUF = io.BytesIO()
Image.new("RGB", (1, 1), color=(0, 0, 0)).save(_MINIMAL_PNG_BUF, format="PNG")
MINIMAL_PNG = _MINIMAL_PNG_BUF.getvalue()
MINIMAL_B64 = base64.b64encode(MINIMAL_PNG).decode("ascii")

_POST = "logosmith.core.providers.gemini.requests.post"


def _response(status_code: int = 200, body: object = None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = body
    return response


def _image_body(key: str = "inlineData") -> dict:
    return {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"text": "Here is your logo"},
                        {key: {"mimeType": "image/png", "data": MINIMAL_B64}},
                    ]
                }
            }
        ]
    }


def _client(**kwargs) -> GeminiImageClient:
    return GeminiImageClient(api_key="gem-test-key", model="gemini-test", **kwargs)


@pytest.mark.unit
class TestParts:
    def test_text_part(self):
        assert text_part("hello") == {"text": "hello"}

    def test_image_part_is_base64(self):
        part = image_part(b"\x00\x01", "image/jpeg")
        assert part == {"inline_data": {"mime_type": "image/jpeg", "data": "AAE="}}


@pytest.mark.unit
class TestExtractImage:
    @pytest.mark.parametrize("key", ["inlineData", "inline_data"])
    def test_first_image_part(self, key):
        assert extract_image(_image_body(key)) == MINIMAL_PNG

    def test_no_candidates(self):
        with pytest.raises(RemoteServiceError) as exc_info:
            extract_image({"promptFeedback": {"blockReason": "SAFETY"}})
        assert "No candidates" in str(exc_info.value)
        assert "SAFETY" in str(exc_info.value)

    def test_text_only_response(self):
        body = {"candidates": [{"content": {"parts": [{"text": "I cannot draw that"}]}}]}
        with pytest.raises(RemoteServiceError) as exc_info:
            extract_image(body)
        assert "No image data" in str(exc_info.value)

    @pytest.mark.parametrize(
        "body",
        [
            {"candidates": ["not-a-dict"]},
            {"candidates": {"content": {}}},
            {"candidates": [{"content": "text"}]},
            {"candidates": [{"content": {"parts": "text"}}]},
            {"candidates": [{"content": {"parts": ["not-a-dict"]}}]},
            {"candidates": [{"content": {"parts": [{"inlineData": "abc"}]}}]},
            {"candidates": [{"content": {"parts": [{"inlineData": {"data": 42}}]}}]},
        ],
    )
    def test_malformed_shape(self, body):
        with pytest.raises(RemoteServiceError) as exc_info:
            extract_image(body)
        assert "Unexpected Gemini response shape" in str(exc_info.value)

    def test_malformed_shape_through_client(self):
        with patch(_POST, return_value=_response(body={"candidates": ["x"]})):
            with pytest.raises(RemoteServiceError):
                _client().text_to_image("a fox")

    def test_invalid_base64(self):
        body = {"candidates": [{"content": {"parts": [{"inlineData": {"data": "!!!"}}]}}]}
        with pytest.raises(RemoteServiceError):
            extract_image(body)


@pytest.mark.unit
class TestGeminiImageClient:
    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            GeminiImageClient(api_key="", model="gemini-test")
        assert "GEMINI_API_KEY" in str(exc_info.value)

    def test_repr_hides_key(self):
        assert "gem-test-key" not in repr(_client())

    def test_text_to_image_request_shape(self):
        with patch(_POST, return_value=_response(body=_image_body())) as mock_post:
            image = _client(base_url="https://example.test/v1beta/").text_to_image("a fox")
        assert image == MINIMAL_PNG
        args, kwargs = mock_post.call_args
        assert args[0] == "https://example.test/v1beta/models/gemini-test:generateContent"
        assert kwargs["headers"]["x-goog-api-key"] == "gem-test-key"
        assert kwargs["timeout"] == 180
        payload = kwargs["json"]
        assert payload["contents"] == [{"role": "user", "parts": [{"text": "a fox"}]}]
        assert payload["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]

    def test_edit_image_sends_inline_image(self):
        with patch(_POST, return_value=_response(body=_image_body())) as mock_post:
            _client().edit_image("make it blue", MINIMAL_PNG, "image/png")
        parts = mock_post.call_args[1]["json"]["contents"][0]["parts"]
        assert parts[0] == {"text": "make it blue"}
        assert parts[1]["inline_data"]["mime_type"] == "image/png"
        assert base64.b64decode(parts[1]["inline_data"]["data"]) == MINIMAL_PNG

    @pytest.mark.parametrize(
        "status,fragment",
        [
            (401, "Authentication failed"),
            (403, "Authentication failed"),
            (404, "Model not found"),
            (429, "quota"),
            (503, "service error"),
            (400, "status 400"),
        ],
    )
    def test_http_errors(self, status, fragment):
        with patch(_POST, return_value=_response(status_code=status, text="error body")):
            with pytest.raises(RemoteServiceError) as exc_info:
                _client().text_to_image("a fox")
        assert exc_info.value.status_code == status
        assert fragment in str(exc_info.value)
        assert exc_info.value.response == "error body"

    def test_timeout(self):
        with patch(_POST, side_effect=requests.exceptions.Timeout()):
            with pytest.raises(RequestTimeoutError):
                _client(timeout=5).text_to_image("a fox")

    def test_connection_error(self):
        cause = requests.exceptions.ConnectionError("refused")
        with patch(_POST, side_effect=cause):
            with pytest.raises(NetworkError) as exc_info:
                _client().text_to_image("a fox")
        assert exc_info.value.original_error is cause

    def test_non_json_body(self):
        response = _response(text="<html>")
        response.json.side_effect = ValueError("no json")
        with patch(_POST, return_value=response):
            with pytest.raises(RemoteServiceError) as exc_info:
                _client().text_to_image("a fox")
        assert "JSON" in str(exc_info.value)

    def test_non_object_body(self):
        with patch(_POST, return_value=_response(body=["not", "a", "dict"])):
            with pytest.raises(RemoteServiceError):
                _client().text_to_image("a fox")

    def test_debug_api_truncates_image_data(self, caplog):
        with patch(_POST, return_value=_response(body=_image_body())):
            with caplog.at_level("INFO", logger="logosmith"):
                _client(debug_api=True).edit_image("x", MINIMAL_PNG * 10)
        assert base64.b64encode(MINIMAL_PNG * 10).decode("ascii") not in caplog.text
        assert "chars>" in caplog.text
