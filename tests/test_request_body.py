"""Unit tests for provider request body construction."""

import pytest

from german_study_cli.errors import EmptyRequestError
from german_study_cli.prompts import FALLBACK_INSTRUCTION, IMAGE_PREAMBLES, get_image_preamble
from german_study_cli.providers import AnthropicProvider, OpenAIProvider, PerplexityProvider

ALL_PROVIDERS = [OpenAIProvider, AnthropicProvider, PerplexityProvider]


def _text_part(body):
    return body["messages"][0]["content"][0]["text"]


class TestTextOnlyBody:
    """Bodies without an image."""

    @pytest.mark.parametrize("provider_class", ALL_PROVIDERS)
    def test_single_user_message_with_prompt(self, provider_class):
        """The prompt is sent verbatim as one user message."""
        body = provider_class().build_request_body("Was bedeutet 'Haus'?")

        assert body["model"] == provider_class.METADATA.model
        assert body["messages"] == [{"role": "user", "content": "Was bedeutet 'Haus'?"}]

    @pytest.mark.parametrize("provider_class", ALL_PROVIDERS)
    def test_no_image_fields(self, provider_class):
        """Nothing image-related appears in a text-only body."""
        body = provider_class().build_request_body("Hallo")

        serialized = repr(body)
        assert "image" not in serialized
        assert "base64" not in serialized

    @pytest.mark.parametrize("provider_class", [OpenAIProvider, AnthropicProvider])
    def test_max_tokens_capped(self, provider_class):
        """OpenAI and Anthropic requests are capped at 1000 output tokens."""
        body = provider_class().build_request_body("Hallo")

        assert body["max_tokens"] == 1000

    def test_perplexity_has_no_max_tokens(self):
        """Perplexity requests carry no token cap."""
        body = PerplexityProvider().build_request_body("Hallo")

        assert "max_tokens" not in body

    @pytest.mark.parametrize("provider_class", ALL_PROVIDERS)
    @pytest.mark.parametrize("prompt", ["", "   \n"])
    def test_empty_request_rejected(self, provider_class, prompt):
        """Neither prompt nor image is invalid input."""
        with pytest.raises(EmptyRequestError):
            provider_class().build_request_body(prompt)


class TestImageBody:
    """Bodies with an image attached."""

    @pytest.mark.parametrize("provider_class", ALL_PROVIDERS)
    def test_two_parts_text_first(self, provider_class, encoded_image):
        """One user message with a text part followed by an image part."""
        body = provider_class().build_request_body("Korrigiere bitte", encoded_image)

        assert len(body["messages"]) == 1
        message = body["messages"][0]
        assert message["role"] == "user"
        assert len(message["content"]) == 2
        assert message["content"][0]["type"] == "text"

    @pytest.mark.parametrize("provider_class", ALL_PROVIDERS)
    def test_preamble_prepended(self, provider_class, encoded_image):
        """The preamble comes before the user's prompt."""
        body = provider_class().build_request_body("Korrigiere bitte", encoded_image)

        assert _text_part(body) == get_image_preamble("en") + "Korrigiere bitte"

    @pytest.mark.parametrize("provider_class", ALL_PROVIDERS)
    def test_fallback_instruction_when_prompt_empty(self, provider_class, encoded_image):
        """An empty prompt is replaced by the fallback instruction."""
        body = provider_class().build_request_body("", encoded_image)

        assert _text_part(body) == get_image_preamble("en") + FALLBACK_INSTRUCTION

    @pytest.mark.parametrize("provider_class", ALL_PROVIDERS)
    def test_fallback_instruction_when_prompt_blank(self, provider_class, encoded_image):
        """A whitespace-only prompt with an image also gets the fallback."""
        body = provider_class().build_request_body("   ", encoded_image)

        assert _text_part(body) == get_image_preamble("en") + FALLBACK_INSTRUCTION
        assert len(body["messages"][0]["content"]) == 2

    @pytest.mark.parametrize("provider_class", [OpenAIProvider, PerplexityProvider])
    def test_data_uri_image_part(self, provider_class, encoded_image):
        """OpenAI-style providers embed the image as a JPEG data URI."""
        body = provider_class().build_request_body("x", encoded_image)

        part = body["messages"][0]["content"][1]
        assert part == {
            "type": "image_url",
            "image_url": {"url": "data:image/jpeg;base64,QUJDRA=="},
        }

    def test_anthropic_image_block(self, encoded_image):
        """Anthropic gets a structured base64 source block."""
        body = AnthropicProvider().build_request_body("x", encoded_image)

        part = body["messages"][0]["content"][1]
        assert part == {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/jpeg", "data": "QUJDRA=="},
        }

    def test_perplexity_image_body_has_no_max_tokens(self, encoded_image):
        """The cap is omitted for Perplexity with images too."""
        body = PerplexityProvider().build_request_body("x", encoded_image)

        assert "max_tokens" not in body

    @pytest.mark.parametrize("language", ["en", "de", "tr"])
    def test_preamble_follows_language(self, language, encoded_image):
        """Each locale has its own preamble."""
        body = OpenAIProvider().build_request_body(
            "Hilfe", encoded_image, preamble=get_image_preamble(language)
        )

        assert _text_part(body) == IMAGE_PREAMBLES[language] + "Hilfe"


class TestPreambles:
    """Test suite for preamble lookup."""

    def test_unknown_language_falls_back_to_english(self):
        """Unsupported locales use the English preamble."""
        assert get_image_preamble("fr") == IMAGE_PREAMBLES["en"]

    def test_none_is_english(self):
        """No locale means English."""
        assert get_image_preamble(None) == IMAGE_PREAMBLES["en"]

    def test_turkish_preamble_asks_for_turkish_answer(self):
        """The Turkish preamble keeps its original wording."""
        assert get_image_preamble("tr").startswith("Bu resmi analiz et ve açıkla.")
