"""OpenAI provider adapter."""

import logging
from typing import Any, Dict

from ..errors import ResponseParseError
from ..image import EncodedImage
from .base import ProviderAdapter, ProviderMetadata

logger = logging.getLogger(__name__)


class OpenAIProvider(ProviderAdapter):
    """Provider adapter for the OpenAI chat completions API."""

    METADATA = ProviderMetadata(
        name="openai",
        display_name="OpenAI",
        description="OpenAI API (GPT-4 with vision)",
        api_url="https://api.openai.com/v1/chat/completions",
        model="gpt-4-vision-preview",
        max_tokens=1000,
        config_fields=[
            {
                "key": "openai_api_key",
                "label": "OpenAI API key",
                "type": "password",
                "help_text": "Get your API key from: https://platform.openai.com/api-keys",
            },
        ],
    )

    def build_headers(self, credential: str) -> Dict[str, str]:
        """Bearer token authentication."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }

    def image_part(self, image: EncodedImage) -> Dict[str, Any]:
        """Image as an inline data URI."""
        return {"type": "image_url", "image_url": {"url": image.data_uri}}

    def parse_response(self, data: Any) -> str:
        """
        Extract choices[0].message.content.

        Args:
            data: Decoded JSON body

        Returns:
            Reply text
        """
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            logger.warning("Unexpected %s response shape: %r", self.provider_name, e)
            raise ResponseParseError(
                self.provider_name, f"missing choices[0].message.content ({e!r})"
            ) from e
        return self._reply_text(content)
