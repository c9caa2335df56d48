"""Tests for send_to_provider, the top-level request flow."""

import json
import logging
from unittest.mock import Mock, patch

import pytest

from german_study_cli.errors import (
    EmptyRequestError,
    ImageProcessingError,
    MissingCredentialError,
    ProviderHttpError,
    ResponseParseError,
)
from german_study_cli.prompts import FALLBACK_INSTRUCTION, IMAGE_PREAMBLES
from german_study_cli.providers import Provider
from german_study_cli.service import AIResponse, resolve_provider, send_to_provider


def _connection(mock_https_conn, response):
    conn = Mock()
    conn.getresponse.return_value = response
    mock_https_conn.return_value = conn
    return conn


def _sent_body(conn):
    return json.loads(conn.request.call_args[1]["body"])


class TestSendToProvider:
    """End-to-end flow with a mocked transport."""

    @patch("http.client.HTTPSConnection")
    def test_openai_text_round_trip(self, mock_https_conn, mock_https_response):
        """A text question to OpenAI returns the reply text and provider."""
        conn = _connection(
            mock_https_conn,
            mock_https_response(
                200, {"choices": [{"message": {"content": "'Haus' means 'house'."}}]}
            ),
        )

        result = send_to_provider("openai", "sk-test", "Was bedeutet 'Haus'?")

        body = _sent_body(conn)
        assert body["messages"] == [{"role": "user", "content": "Was bedeutet 'Haus'?"}]
        assert isinstance(result, AIResponse)
        assert result.text == "'Haus' means 'house'."
        assert result.provider == "openai"
        assert result.provider is Provider.OPENAI
        assert result.scaled_image_path is None

    @patch("http.client.HTTPSConnection")
    def test_openai_rate_limited(self, mock_https_conn, mock_https_response):
        """A 429 with an error body raises ProviderHttpError with its message."""
        _connection(
            mock_https_conn, mock_https_response(429, {"error": {"message": "rate limited"}})
        )

        with pytest.raises(ProviderHttpError) as exc_info:
            send_to_provider(Provider.OPENAI, "sk-test", "Was bedeutet 'Haus'?")

        assert exc_info.value.message == "rate limited"
        assert exc_info.value.status == 429

    @patch("german_study_cli.service.transform_image")
    @patch("http.client.HTTPSConnection")
    @pytest.mark.parametrize("credential", ["", None])
    def test_missing_credential_fails_fast(self, mock_https_conn, mock_transform, credential):
        """No image work and no network call without a credential."""
        with pytest.raises(MissingCredentialError):
            send_to_provider("anthropic", credential, "Hallo", "photo.jpg")

        mock_https_conn.assert_not_called()
        mock_transform.assert_not_called()

    @patch("http.client.HTTPSConnection")
    def test_empty_request_rejected(self, mock_https_conn):
        """Neither prompt nor image is rejected before any network call."""
        with pytest.raises(EmptyRequestError):
            send_to_provider("perplexity", "pplx", "  ")

        mock_https_conn.assert_not_called()

    @patch("http.client.HTTPSConnection")
    def test_anthropic_image_flow(
        self, mock_https_conn, mock_https_response, make_image, temp_workspace
    ):
        """An image is resized, embedded and its resized path returned."""
        conn = _connection(
            mock_https_conn,
            mock_https_response(200, {"content": [{"type": "text", "text": "Sehr gut!"}]}),
        )
        source = make_image(2000, 1000)
        image_dir = temp_workspace / "images"

        result = send_to_provider(
            "anthropic", "sk-ant", "", source, language="de", image_dir=image_dir
        )

        assert result.text == "Sehr gut!"
        assert result.scaled_image_path.parent == image_dir
        assert result.scaled_image_path.exists()

        content = _sent_body(conn)["messages"][0]["content"]
        assert content[0]["text"] == IMAGE_PREAMBLES["de"] + FALLBACK_INSTRUCTION
        assert content[1]["type"] == "image"
        assert content[1]["source"]["media_type"] == "image/jpeg"
        assert content[1]["source"]["data"]

    @patch("http.client.HTTPSConnection")
    def test_unreadable_image_not_sent(self, mock_https_conn, temp_workspace):
        """An image failure stops the request before the network."""
        with pytest.raises(ImageProcessingError):
            send_to_provider(
                "openai", "sk-test", "Was ist das?", temp_workspace / "missing.jpg"
            )

        mock_https_conn.assert_not_called()

    @patch("http.client.HTTPSConnection")
    def test_malformed_reply(self, mock_https_conn, mock_https_response):
        """A 2xx reply in the wrong shape raises ResponseParseError."""
        _connection(mock_https_conn, mock_https_response(200, {"choices": []}))

        with pytest.raises(ResponseParseError):
            send_to_provider("perplexity", "pplx", "Hallo")

    @patch("http.client.HTTPSConnection")
    def test_failure_logged_once(self, mock_https_conn, mock_https_response, caplog):
        """A provider error produces a single warning without the raw body."""
        _connection(
            mock_https_conn,
            mock_https_response(500, {"error": {"message": "secret upstream detail"}}),
        )

        with caplog.at_level(logging.WARNING, logger="german_study_cli"):
            with pytest.raises(ProviderHttpError):
                send_to_provider("openai", "sk-test", "Hallo")

        records = [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert "secret upstream detail" not in records[0].getMessage()


class TestResolveProvider:
    """Test suite for provider name normalization."""

    def test_accepts_enum_and_names(self):
        """Enum members and case-insensitive names are accepted."""
        assert resolve_provider(Provider.ANTHROPIC) is Provider.ANTHROPIC
        assert resolve_provider("OpenAI") is Provider.OPENAI
        assert resolve_provider(" perplexity ") is Provider.PERPLEXITY

    def test_unknown_provider(self):
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown provider"):
            resolve_provider("gemini")
