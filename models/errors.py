"""Error types raised by the dispatch pipeline.

Every error raised by the registry, the normalizer, the provider adapters or
the dispatcher derives from `GatewayError` so the HTTP layer can translate them
in one place. `CleanupFailure` is the exception: it is built and logged by the
attachment lifecycle but never raised to the caller.
"""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base class for every error surfaced by the gateway core."""


class UnknownModel(GatewayError):
    """Raised when a model id has no capability entry."""

    def __init__(self, model_id: str) -> None:
        super().__init__(f"Unsupported model: {model_id}")
        self.model_id = model_id


class CapabilityViolation(GatewayError):
    """Raised when an attachment's kind or size is not allowed for a model."""

    def __init__(self, model_id: str, reason: str, *, size_exceeded: bool = False) -> None:
        super().__init__(f"Attachment not allowed for model '{model_id}': {reason}")
        self.model_id = model_id
        self.reason = reason
        self.size_exceeded = size_exceeded


class UnsupportedAttachmentType(GatewayError):
    """Raised when an artifact is neither an image nor a text file."""

    def __init__(self, mime_type: Optional[str], extension: Optional[str]) -> None:
        super().__init__(f"Unsupported file type: {extension or mime_type or 'unknown'}")
        self.mime_type = mime_type
        self.extension = extension


class ImageDecodeError(GatewayError):
    """Raised when image bytes (or their base64 form) cannot be decoded."""


class TextDecodeError(GatewayError):
    """Raised when a text attachment is not valid UTF-8."""


class ProviderUnavailable(GatewayError):
    """Raised when a provider is missing the configuration it needs."""

    def __init__(self, provider: str, detail: str = "configuration is incomplete") -> None:
        super().__init__(f"{provider} {detail}")
        self.provider = provider


class ProviderTimeout(GatewayError):
    """Raised when a provider call exceeds its timeout budget."""

    def __init__(self, provider: str, timeout: float) -> None:
        super().__init__(f"{provider} did not respond within {timeout:g}s")
        self.provider = provider
        self.timeout = timeout


class ProviderError(GatewayError):
    """Raised for provider HTTP failures and malformed provider payloads."""

    def __init__(self, provider: str, provider_message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{provider} error: {provider_message}")
        self.provider = provider
        self.provider_message = provider_message
        self.status_code = status_code


class CleanupFailure(GatewayError):
    """Describes a failed release of transient attachment storage. Logged only."""

    def __init__(self, location: str, cause: BaseException) -> None:
        super().__init__(f"Failed to release attachment storage at {location}: {cause}")
        self.location = location
        self.cause = cause
