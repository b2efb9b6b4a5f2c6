"""Common contract for provider adapters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Optional, TypeVar

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncAzureOpenAI

from models.attachment import ContentEnvelope
from models.conversation import History, ResponseEnvelope
from models.errors import ProviderError, ProviderTimeout, ProviderUnavailable

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _status_error_message(exc: APIStatusError) -> str:
    """Pull the provider's `error.message` out of a status error body."""
    body = exc.body
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict) and inner.get("message"):
            return str(inner["message"])
    return exc.message


def create_azure_client(endpoint: str, api_key: str, api_version: str, timeout: float) -> AsyncAzureOpenAI:
    """Create an Azure OpenAI client that never retries on its own."""
    return AsyncAzureOpenAI(
        azure_endpoint=endpoint,
        api_key=api_key,
        api_version=api_version,
        timeout=timeout,
        max_retries=0,
    )


class ProviderAdapter(ABC):
    """Build a provider request, call the backend, normalize the reply.

    Subclasses set `provider_name`, `model_name` and `timeout` and implement
    `respond`. A `client` may be injected; otherwise subclasses create one
    from their settings when those are complete.
    """

    provider_name: str = "provider"
    model_name: str = "model"
    timeout: float = 30.0

    def __init__(self, client: Optional[Any] = None) -> None:
        self.client = client

    @property
    def is_available(self) -> bool:
        return self.client is not None

    def _require_client(self) -> Any:
        if self.client is None:
            raise ProviderUnavailable(self.provider_name)
        return self.client

    async def _invoke(self, call: Awaitable[T]) -> T:
        """Await an SDK call and translate SDK errors into gateway errors."""
        try:
            return await call
        except APITimeoutError as exc:
            LOGGER.error("%s request timed out after %ss", self.provider_name, self.timeout)
            raise ProviderTimeout(self.provider_name, self.timeout) from exc
        except APIStatusError as exc:
            LOGGER.error("%s error (%s): %s", self.provider_name, exc.status_code, exc.body)
            raise ProviderError(self.provider_name, _status_error_message(exc), exc.status_code) from exc
        except APIConnectionError as exc:
            LOGGER.error("%s connection error: %s", self.provider_name, exc)
            raise ProviderError(self.provider_name, str(exc)) from exc

    @abstractmethod
    async def respond(
        self,
        message: str,
        envelope: Optional[ContentEnvelope],
        history: History,
    ) -> ResponseEnvelope:
        """Return the backend's normalized reply to one chat turn."""
