"""Perplexity provider adapter."""

from .base import ProviderMetadata
from .openai_provider import OpenAIProvider


class PerplexityProvider(OpenAIProvider):
    """
    Provider adapter for the Perplexity API.

    Perplexity speaks the OpenAI chat completions dialect, so headers, image
    parts and response parsing are inherited. No output token cap is sent.
    """

    METADATA = ProviderMetadata(
        name="perplexity",
        display_name="Perplexity",
        description="Perplexity API (Sonar)",
        api_url="https://api.perplexity.ai/chat/completions",
        model="sonar",
        config_fields=[
            {
                "key": "perplexity_api_key",
                "label": "Perplexity API key",
                "type": "password",
                "help_text": "Get your API key from: https://www.perplexity.ai/settings/api",
            },
        ],
    )
