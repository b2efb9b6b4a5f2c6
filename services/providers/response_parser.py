"""Helpers to parse chat-completion and image-generation outputs."""

from typing import Any, Optional

from models.conversation import Usage
from models.errors import ProviderError


def extract_chat_content(response: Any, *, provider: str) -> str:
    """Return `choices[0].message.content` or raise `ProviderError`."""
    choices = getattr(response, "choices", None)
    if not choices:
        raise ProviderError(provider, "Response did not include any choices.")
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if content is None:
        raise ProviderError(provider, "Response choice did not include message content.")
    return content


def extract_image_url(response: Any, *, provider: str) -> str:
    """Return `data[0].url` or raise `ProviderError`."""
    data = getattr(response, "data", None)
    url = getattr(data[0], "url", None) if data else None
    if not url:
        raise ProviderError(provider, "Image generation response did not include an image url.")
    return url


def extract_usage(response: Any) -> Optional[Usage]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    if usage is None:
        return None
    return Usage(
        prompt_tokens=getattr(usage, "prompt_tokens", None),
        completion_tokens=getattr(usage, "completion_tokens", None),
        total_tokens=getattr(usage, "total_tokens", None),
    )
