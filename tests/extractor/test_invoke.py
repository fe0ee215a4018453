"""Unit tests for the vision-model invoker.

The OpenAI client is mocked throughout; these tests check message
construction, the payload guard, and how SDK exceptions are translated into
the extraction error classes.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring

import base64
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from social_extract.extractor.config import MAX_OUTPUT_TOKENS
from social_extract.extractor.errors import ConfigurationError, ExtractionError, PayloadTooLargeError, TransientExtractionError
from social_extract.extractor.invoke import (
    ImageInput,
    build_messages,
    build_user_text,
    extract_reply,
    image_input_from_path,
    mime_type_for,
)
from social_extract.extractor.prompts import SYSTEM_PROMPT
from social_extract.extractor.resources import get_vision_client

_PATCH_CLIENT = "social_extract.extractor.invoke.get_vision_client"
_REQUEST = httpx.Request("POST", "https://example.openai.azure.com/openai/v1/chat/completions")

PNG = ImageInput(name="shot.png", data=b"\x89PNG fake bytes", mime_type="image/png")


def _fake_response(content: str | None) -> MagicMock:
    """Build a minimal chat-completion response object."""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    response.usage = None
    return response


def _status_error(cls, status: int, body=None):
    return cls(f"HTTP {status}", response=httpx.Response(status, request=_REQUEST), body=body)


# ===========================================================================
# Input helpers
# ===========================================================================


class TestMimeTypeFor:

    def test_jpg_maps_to_jpeg(self):
        assert mime_type_for("a.JPG") == "image/jpeg"

    def test_png(self):
        assert mime_type_for("a.png") == "image/png"

    def test_documents_unsupported(self):
        assert mime_type_for("report.docx") is None
        assert mime_type_for("sheet.xlsx") is None


class TestImageInputFromPath:

    def test_reads_file(self, tmp_path):
        path = tmp_path / "shot.webp"
        path.write_bytes(b"data")
        image = image_input_from_path(path)
        assert image.name == "shot.webp"
        assert image.data == b"data"
        assert image.mime_type == "image/webp"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            image_input_from_path(tmp_path / "nope.png")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hi", encoding="utf-8")
        with pytest.raises(ValueError, match="Unsupported image format"):
            image_input_from_path(path)


# ===========================================================================
# Message construction
# ===========================================================================


class TestBuildMessages:

    def test_auto_detect_has_no_platform_hint(self):
        assert "platform is" not in build_user_text("Auto-detect")

    def test_platform_hint(self):
        text = build_user_text("Xiaohongshu")
        assert "The user has specified that the platform is Xiaohongshu." in text

    def test_unknown_platform(self):
        with pytest.raises(ConfigurationError, match="Unknown platform"):
            build_user_text("MySpace")

    def test_structure(self):
        messages = build_messages([PNG, PNG], "TikTok")
        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
        content = messages[1]["content"]
        assert [part["type"] for part in content] == ["image_url", "image_url", "text"]
        assert "TikTok" in content[-1]["text"]

    def test_image_data_uri(self):
        messages = build_messages([PNG])
        url = messages[1]["content"][0]["image_url"]["url"]
        assert url == "data:image/png;base64," + base64.b64encode(PNG.data).decode("utf-8")


# ===========================================================================
# extract_reply
# ===========================================================================


class TestExtractReply:

    def test_returns_reply_text(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _fake_response("```tsv\na\tb\n```")
        with patch(_PATCH_CLIENT, return_value=client):
            reply = extract_reply([PNG], "Instagram")
        assert reply == "```tsv\na\tb\n```"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"][1]["content"][0]["type"] == "image_url"
        assert kwargs["max_tokens"] == MAX_OUTPUT_TOKENS

    def test_no_images(self):
        with pytest.raises(ValueError):
            extract_reply([])

    def test_payload_guard_runs_before_client(self, monkeypatch):
        monkeypatch.setattr("social_extract.extractor.invoke.MAX_PAYLOAD_BYTES", 10)
        with patch(_PATCH_CLIENT) as mock_client, pytest.raises(PayloadTooLargeError):
            extract_reply([PNG])
        mock_client.assert_not_called()

    def test_missing_credentials(self, monkeypatch):
        for name in ("AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_DEPLOYMENT_NAME"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(ConfigurationError, match="AZURE_OPENAI_API_KEY"):
            extract_reply([PNG])

    def test_empty_reply_is_transient(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _fake_response("")
        with patch(_PATCH_CLIENT, return_value=client), pytest.raises(TransientExtractionError):
            extract_reply([PNG])

    @pytest.mark.parametrize(
        "error, expected",
        [
            (openai.APIConnectionError(request=_REQUEST), TransientExtractionError),
            (openai.APITimeoutError(request=_REQUEST), TransientExtractionError),
            (_status_error(openai.RateLimitError, 429), TransientExtractionError),
            (_status_error(openai.InternalServerError, 503), TransientExtractionError),
            (_status_error(openai.APIStatusError, 413), PayloadTooLargeError),
            (_status_error(openai.BadRequestError, 400, {"code": "context_length_exceeded"}), PayloadTooLargeError),
            (_status_error(openai.AuthenticationError, 401), ConfigurationError),
            (_status_error(openai.PermissionDeniedError, 403), ConfigurationError),
        ],
    )
    def test_sdk_errors_translated(self, error, expected):
        client = MagicMock()
        client.chat.completions.create.side_effect = error
        with patch(_PATCH_CLIENT, return_value=client), pytest.raises(expected) as excinfo:
            extract_reply([PNG])
        assert excinfo.value.__cause__ is error

    def test_other_client_error_is_not_transient(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = _status_error(openai.BadRequestError, 400, {"code": "invalid_image"})
        with patch(_PATCH_CLIENT, return_value=client), pytest.raises(ExtractionError) as excinfo:
            extract_reply([PNG])
        assert type(excinfo.value) is ExtractionError  # pylint: disable=unidiomatic-typecheck


# ===========================================================================
# Vision client
# ===========================================================================


class TestGetVisionClient:

    def test_builds_v1_endpoint_client(self, monkeypatch):
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com/")
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "test-key")
        monkeypatch.setenv("AZURE_OPENAI_DEPLOYMENT_NAME", "gpt-vision")
        client = get_vision_client()
        assert str(client.base_url) == "https://example.openai.azure.com/openai/v1/"
        assert get_vision_client() is client

    def test_missing_deployment(self, monkeypatch):
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "test-key")
        monkeypatch.delenv("AZURE_OPENAI_DEPLOYMENT_NAME", raising=False)
        with pytest.raises(ConfigurationError, match="AZURE_OPENAI_DEPLOYMENT_NAME"):
            get_vision_client()
