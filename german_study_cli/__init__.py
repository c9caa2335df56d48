"""German Study CLI - ask AI providers about German texts and images."""

__version__ = "0.1.0"

from .config import HistoryItem, StudyConfig
from .display import DisplayManager
from .errors import (
    EmptyRequestError,
    GermanStudyError,
    ImageProcessingError,
    MissingCredentialError,
    NetworkUnreachableError,
    ProviderHttpError,
    RequestSetupError,
    ResponseParseError,
)
from .image import EncodedImage, transform_image
from .main import StudyCLI
from .providers.anthropic_provider import AnthropicProvider
from .providers.base import Provider, ProviderAdapter
from .providers.factory import ProviderFactory
from .providers.openai_provider import OpenAIProvider
from .providers.perplexity_provider import PerplexityProvider
from .service import AIResponse, send_to_provider
from .setup_wizard import SetupWizard

__all__ = [
    "AIResponse",
    "AnthropicProvider",
    "DisplayManager",
    "EmptyRequestError",
    "EncodedImage",
    "GermanStudyError",
    "HistoryItem",
    "ImageProcessingError",
    "MissingCredentialError",
    "NetworkUnreachableError",
    "OpenAIProvider",
    "PerplexityProvider",
    "Provider",
    "ProviderAdapter",
    "ProviderFactory",
    "ProviderHttpError",
    "RequestSetupError",
    "ResponseParseError",
    "SetupWizard",
    "StudyCLI",
    "StudyConfig",
    "send_to_provider",
    "transform_image",
]
