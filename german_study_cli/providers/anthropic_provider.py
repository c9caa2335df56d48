"""Anthropic provider adapter."""

import logging
from typing import Any, Dict

from ..errors import ResponseParseError
from ..image import EncodedImage
from .base import ProviderAdapter, ProviderMetadata

logger = logging.getLogger(__name__)


class AnthropicProvider(ProviderAdapter):
    """Provider adapter for the Anthropic messages API."""

    API_VERSION = "2023-06-01"

    METADATA = ProviderMetadata(
        name="anthropic",
        display_name="Anthropic",
        description="Anthropic API (Claude 3 Opus)",
        api_url="https://api.anthropic.com/v1/messages",
        model="claude-3-opus-20240229",
        max_tokens=1000,
        config_fields=[
            {
                "key": "anthropic_api_key",
                "label": "Anthropic API key",
                "type": "password",
                "help_text": "Get your API key from: https://console.anthropic.com/settings/keys",
            },
        ],
    )

    def build_headers(self, credential: str) -> Dict[str, str]:
        """API key header plus the pinned API version."""
        return {
            "Content-Type": "application/json",
            "x-api-key": credential,
            "anthropic-version": self.API_VERSION,
        }

    def image_part(self, image: EncodedImage) -> Dict[str, Any]:
        """Image as a base64 source block."""
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": image.media_type,
                "data": image.data,
            },
        }

    def parse_response(self, data: Any) -> str:
        """
        Extract content[0].text.

        Args:
            data: Decoded JSON body

        Returns:
            Reply text
        """
        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            logger.warning("Unexpected %s response shape: %r", self.provider_name, e)
            raise ResponseParseError(
                self.provider_name, f"missing content[0].text ({e!r})"
            ) from e
        return self._reply_text(text)
