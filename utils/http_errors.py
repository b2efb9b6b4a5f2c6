"""Translate gateway errors into HTTP responses."""

from fastapi import HTTPException

from models.errors import (
    CapabilityViolation,
    GatewayError,
    ImageDecodeError,
    ProviderError,
    ProviderTimeout,
    ProviderUnavailable,
    TextDecodeError,
    UnknownModel,
    UnsupportedAttachmentType,
)

GENERIC_DETAIL = "Failed to process message"


def status_for(exc: GatewayError) -> int:
    """Return the HTTP status code that represents `exc`."""
    if isinstance(exc, UnknownModel):
        return 404
    if isinstance(exc, CapabilityViolation):
        return 413 if exc.size_exceeded else 400
    if isinstance(exc, UnsupportedAttachmentType):
        return 415
    if isinstance(exc, (ImageDecodeError, TextDecodeError)):
        return 422
    if isinstance(exc, ProviderUnavailable):
        return 503
    if isinstance(exc, ProviderTimeout):
        return 504
    if isinstance(exc, ProviderError):
        return 502
    return 500


def to_http_exception(exc: GatewayError, *, expose_details: bool, error: str = GENERIC_DETAIL) -> HTTPException:
    """Build an `HTTPException`; the error text is only exposed in development.

    Validation errors always carry their message since they describe the
    client's own input.
    """
    status_code = status_for(exc)
    detail = {"success": False, "error": error}
    if status_code < 500 or expose_details:
        detail["details"] = str(exc)
    return HTTPException(status_code=status_code, detail=detail)
