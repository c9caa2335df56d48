"""Provider adapters for the supported AI services."""

from .anthropic_provider import AnthropicProvider
from .base import Provider, ProviderAdapter, ProviderMetadata
from .factory import ProviderFactory
from .openai_provider import OpenAIProvider
from .perplexity_provider import PerplexityProvider

__all__ = [
    "AnthropicProvider",
    "OpenAIProvider",
    "PerplexityProvider",
    "Provider",
    "ProviderAdapter",
    "ProviderFactory",
    "ProviderMetadata",
]
