"""Base provider adapter interface."""

import http.client
import json
import logging
import ssl
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from ..errors import (
    EmptyRequestError,
    MissingCredentialError,
    NetworkUnreachableError,
    ProviderHttpError,
    RequestSetupError,
    ResponseParseError,
)
from ..image import EncodedImage
from ..prompts import compose_image_prompt

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    """AI services a request can be sent to."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    PERPLEXITY = "perplexity"

    def __str__(self) -> str:
        return self.value


class ProviderMetadata:
    """
    Fixed configuration of a provider.

    Describes where requests go, which model answers them and which
    configuration the setup wizard has to collect.
    """

    def __init__(
        self,
        name: str,
        display_name: str,
        description: str,
        api_url: str,
        model: str,
        config_fields: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
    ):
        """
        Initialize provider metadata.

        Args:
            name: Internal provider name (e.g., "openai", "anthropic")
            display_name: Human-readable name (e.g., "OpenAI", "Anthropic")
            description: Brief description shown in setup wizard
            api_url: Chat endpoint the provider accepts requests on
            model: Model identifier sent with every request
            config_fields: List of configuration field definitions
                Each field should be a dict with:
                - key: Config key name (e.g., "openai_api_key")
                - label: Display label (e.g., "OpenAI API key")
                - type: Field type ("text", "password", "url")
                - default: Default value (optional)
                - help_text: Help text or URL (optional)
            max_tokens: Output token cap, or None if the provider is sent none
        """
        self.name = name
        self.display_name = display_name
        self.description = description
        self.api_url = api_url
        self.model = model
        self.config_fields = config_fields
        self.max_tokens = max_tokens


class ProviderAdapter(ABC):
    """
    Abstract base class for AI provider adapters.

    Subclasses describe their wire format: the auth headers, how an image is
    embedded in a message and where the reply text sits in the response.
    Request assembly and transport are shared.

    To add a provider:
    1. Inherit from ProviderAdapter
    2. Define METADATA as a class attribute with ProviderMetadata
    3. Implement all abstract methods
    4. Place the file in german_study_cli/providers/ directory
    """

    METADATA: Optional[ProviderMetadata] = None

    @abstractmethod
    def build_headers(self, credential: str) -> Dict[str, str]:
        """
        Build request headers for this provider.

        Args:
            credential: API key

        Returns:
            Header dict including authentication
        """
        pass

    @abstractmethod
    def image_part(self, image: EncodedImage) -> Dict[str, Any]:
        """
        Build the message part carrying an image.

        Args:
            image: Encoded JPEG image

        Returns:
            Provider-shaped content part
        """
        pass

    @abstractmethod
    def parse_response(self, data: Any) -> str:
        """
        Extract the assistant reply from a decoded 2xx response.

        Args:
            data: Decoded JSON body

        Returns:
            Reply text

        Raises:
            ResponseParseError: If the body does not have the expected shape
        """
        pass

    @property
    def provider(self) -> Provider:
        """Get the provider this adapter talks to."""
        return Provider(self.METADATA.name)

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return self.METADATA.name

    @property
    def model_name(self) -> str:
        """Get model name."""
        return self.METADATA.model

    def build_request_body(
        self,
        prompt_text: str,
        encoded_image: Optional[EncodedImage] = None,
        preamble: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build the JSON body for a single user message.

        Args:
            prompt_text: User prompt (may be empty when an image is attached)
            encoded_image: Optional image to attach
            preamble: Instruction prepended to the prompt for image messages

        Returns:
            Provider-shaped request body

        Raises:
            EmptyRequestError: If there is neither prompt text nor an image
        """
        if encoded_image is None:
            if not prompt_text or not prompt_text.strip():
                raise EmptyRequestError()
            content: Any = prompt_text
        else:
            content = [
                {"type": "text", "text": compose_image_prompt(prompt_text, preamble)},
                self.image_part(encoded_image),
            ]

        body: Dict[str, Any] = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": content}],
        }
        if self.METADATA.max_tokens is not None:
            body["max_tokens"] = self.METADATA.max_tokens
        return body

    def send(self, credential: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a request body to the provider and return the decoded reply.

        Args:
            credential: API key
            body: Request body from build_request_body

        Returns:
            Decoded JSON response

        Raises:
            MissingCredentialError: If credential is empty
            RequestSetupError: If the request cannot be built
            NetworkUnreachableError: If no response was received
            ProviderHttpError: If the provider answered with a non-2xx status
            ResponseParseError: If a 2xx body is not JSON
        """
        if not credential:
            raise MissingCredentialError(self.provider_name)

        try:
            payload = json.dumps(body).encode("utf-8")
            headers = self.build_headers(credential)
            # http.client sends header values as latin-1
            for value in headers.values():
                value.encode("latin-1")
            endpoint = urlparse(self.METADATA.api_url)
            if endpoint.scheme != "https" or not endpoint.hostname:
                raise ValueError(f"invalid endpoint {self.METADATA.api_url}")
            context = ssl.create_default_context()
            conn = http.client.HTTPSConnection(
                endpoint.hostname, endpoint.port or 443, context=context
            )
        except (TypeError, ValueError, ssl.SSLError) as e:
            logger.warning("Error preparing %s request: %s", self.provider_name, e)
            raise RequestSetupError(self.provider_name, str(e)) from e

        logger.debug("POST %s (model %s)", self.METADATA.api_url, self.model_name)

        try:
            conn.request("POST", endpoint.path, body=payload, headers=headers)
            response = conn.getresponse()
            status = response.status
            raw = response.read()
        except (OSError, http.client.HTTPException) as e:
            logger.warning("No response from %s: %s", self.provider_name, e)
            raise NetworkUnreachableError(self.provider_name, str(e)) from e
        except ValueError as e:
            # http.client rejects malformed header values at send time
            logger.warning("Error sending %s request: %s", self.provider_name, e)
            raise RequestSetupError(self.provider_name, str(e)) from e
        finally:
            conn.close()

        text = raw.decode("utf-8", errors="replace") if raw else ""

        if not 200 <= status < 300:
            logger.warning("%s API error %s", self.provider_name, status)
            logger.debug("%s error body: %s", self.provider_name, text)
            raise ProviderHttpError(
                self.provider_name, status, self._error_message(status, text)
            )

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("%s returned a non-JSON body: %s", self.provider_name, e)
            raise ResponseParseError(self.provider_name, f"body is not JSON: {e}") from e

    @staticmethod
    def _error_message(status: int, text: str) -> str:
        """Pick the provider-supplied error message, else a generic one."""
        try:
            data = json.loads(text) if text else None
        except json.JSONDecodeError:
            data = None

        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str) and error:
                return error

        return f"Error: {status}"

    def _reply_text(self, value: Any) -> str:
        """Reject null, non-string or empty reply text."""
        if not isinstance(value, str) or not value:
            logger.warning("%s reply text is %r", self.provider_name, value)
            raise ResponseParseError(
                self.provider_name, f"reply text is {value!r}"
            )
        return value
