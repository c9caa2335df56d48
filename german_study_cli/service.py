"""Single entry point for asking an AI provider about a text or image."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .errors import EmptyRequestError, MissingCredentialError
from .image import transform_image
from .prompts import get_image_preamble
from .providers.base import Provider
from .providers.factory import ProviderFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIResponse:
    """Provider-agnostic result of a request."""

    text: str
    provider: Provider
    scaled_image_path: Optional[Path] = None


def resolve_provider(provider: Union[Provider, str]) -> Provider:
    """
    Normalize a provider name.

    Raises:
        ValueError: If the name is not a supported provider
    """
    if isinstance(provider, Provider):
        return provider
    try:
        return Provider(str(provider).strip().lower())
    except ValueError:
        available = ", ".join(p.value for p in Provider)
        raise ValueError(
            f"Unknown provider: {provider}. Available providers: {available}"
        ) from None


def send_to_provider(
    provider: Union[Provider, str],
    credential: Optional[str],
    prompt_text: str,
    image_reference: Optional[Union[str, Path]] = None,
    *,
    language: Optional[str] = None,
    image_dir: Optional[Union[str, Path]] = None,
) -> AIResponse:
    """
    Send a prompt (and optionally an image) to a provider.

    Steps run strictly in sequence: credential check, image transform,
    body construction, network call, response parsing. Nothing is retried.

    Args:
        provider: Target provider
        credential: API key for that provider
        prompt_text: User prompt (may be empty when an image is attached)
        image_reference: Optional path to an image
        language: Interface locale selecting the image preamble
        image_dir: Where the resized image copy is written

    Returns:
        AIResponse with the reply text, provider and resized image path

    Raises:
        MissingCredentialError: If credential is empty
        EmptyRequestError: If there is neither prompt text nor an image
        ImageProcessingError: If the image cannot be prepared
        ProviderHttpError: If the provider returns a non-2xx status
        NetworkUnreachableError: If no response was received
        RequestSetupError: If the request cannot be built
        ResponseParseError: If the reply has an unexpected shape
    """
    provider = resolve_provider(provider)

    if not credential:
        raise MissingCredentialError(provider.value)

    prompt_text = prompt_text or ""
    if image_reference is None and not prompt_text.strip():
        raise EmptyRequestError()

    adapter = ProviderFactory.create_provider(provider)

    encoded_image = None
    if image_reference is not None:
        encoded_image = transform_image(image_reference, output_dir=image_dir)

    body = adapter.build_request_body(
        prompt_text, encoded_image, preamble=get_image_preamble(language)
    )
    data = adapter.send(credential, body)
    text = adapter.parse_response(data)

    logger.info(
        "Received %d characters from %s (%s)", len(text), provider.value, adapter.model_name
    )

    return AIResponse(
        text=text,
        provider=provider,
        scaled_image_path=encoded_image.path if encoded_image else None,
    )
