"""Error types raised by the provider adapters."""


class GermanStudyError(Exception):
    """Base class for all errors raised while talking to an AI provider."""


class MissingCredentialError(GermanStudyError):
    """No API key is configured for the selected provider."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"API key for {provider} is not set")


class EmptyRequestError(GermanStudyError, ValueError):
    """The request has neither prompt text nor an image."""

    def __init__(self, message: str = "Request needs a prompt or an image"):
        super().__init__(message)


class ImageProcessingError(GermanStudyError):
    """The source image could not be read or re-encoded."""


class ProviderHttpError(GermanStudyError):
    """The provider answered with a non-2xx status."""

    def __init__(self, provider: str, status: int, message: str):
        self.provider = provider
        self.status = status
        self.message = message
        super().__init__(f"{provider} API error {status}: {message}")


class NetworkUnreachableError(GermanStudyError):
    """The request went out but no response came back."""

    def __init__(self, provider: str, reason: str = ""):
        self.provider = provider
        self.reason = reason
        message = f"No response from {provider}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RequestSetupError(GermanStudyError):
    """The request could not be built or handed to the transport."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"Could not prepare {provider} request: {reason}")


class ResponseParseError(GermanStudyError):
    """A 2xx response did not have the shape the provider documents."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"Unexpected {provider} response: {reason}")
