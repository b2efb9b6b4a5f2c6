"""Chat-completion adapters for the Azure-hosted GPT-5 and DeepSeek deployments.

Both backends speak the Azure OpenAI chat completions protocol
(`/openai/deployments/<name>/chat/completions?api-version=...` with an
`api-key` header), so they share one request path and differ only in their
prompt, sampling constants and labels.
"""

import logging
import time
from typing import Any, Dict, Optional

from models.attachment import ContentEnvelope
from models.conversation import History, ResponseEnvelope
from services.capability_registry import default_capability
from services.providers.base import ProviderAdapter, create_azure_client
from services.providers.message_builder import build_messages
from services.providers.response_parser import extract_chat_content, extract_usage
from utils.settings import AzureOpenAISettings, DeepSeekSettings

LOGGER = logging.getLogger(__name__)

CHAT_TIMEOUT_SECONDS = 30.0


class ChatCompletionAdapter(ProviderAdapter):
    """Shared request/response handling for chat-completion backends."""

    SYSTEM_PROMPT = "You are a helpful AI assistant."
    capability_id = "gpt5"
    timeout = CHAT_TIMEOUT_SECONDS

    def __init__(self, deployment: Optional[str], client: Optional[Any] = None, max_tokens: Optional[int] = None) -> None:
        super().__init__(client)
        self.deployment = deployment
        self.max_tokens = max_tokens if max_tokens is not None else default_capability(self.capability_id).max_tokens

    def request_options(self) -> Dict[str, Any]:
        """Backend-specific sampling parameters sent with every request."""
        return {}

    async def respond(
        self,
        message: str,
        envelope: Optional[ContentEnvelope],
        history: History,
    ) -> ResponseEnvelope:
        client = self._require_client()
        messages = build_messages(self.SYSTEM_PROMPT, history, message, envelope)

        start = time.time()
        response = await self._invoke(
            client.chat.completions.create(
                model=self.deployment,
                messages=messages,
                timeout=self.timeout,
                **self.request_options(),
            )
        )
        LOGGER.info("%s chat completion latency: %.3fs", self.provider_name, time.time() - start)

        return ResponseEnvelope(
            content=extract_chat_content(response, provider=self.provider_name),
            model=self.model_name,
            provider=self.provider_name,
            usage=extract_usage(response),
        )


class AzureChatAdapter(ChatCompletionAdapter):
    """GPT-5 served from an Azure OpenAI deployment."""

    SYSTEM_PROMPT = (
        "You are GPT-5, an advanced AI assistant. "
        "Provide helpful, accurate, and detailed responses."
    )
    provider_name = "Azure OpenAI"
    model_name = "GPT-5"

    def __init__(self, settings: AzureOpenAISettings, client: Optional[Any] = None, max_tokens: Optional[int] = None) -> None:
        if client is None and settings.chat_configured:
            client = create_azure_client(settings.endpoint, settings.api_key, settings.api_version, self.timeout)
        super().__init__(settings.deployment_name, client, max_tokens)

    def request_options(self) -> Dict[str, Any]:
        return {
            "max_tokens": self.max_tokens,
            "temperature": 0.7,
            "top_p": 0.95,
            "frequency_penalty": 0,
            "presence_penalty": 0,
        }


class DeepSeekChatAdapter(ChatCompletionAdapter):
    """DeepSeek served from an Azure AI deployment named after the model."""

    SYSTEM_PROMPT = (
        "You are DeepSeek, an advanced AI with strong reasoning and coding capabilities. "
        "Provide thoughtful and detailed responses."
    )
    capability_id = "deepseek"
    provider_name = "DeepSeek AI"
    model_name = "DeepSeek"

    def __init__(self, settings: DeepSeekSettings, client: Optional[Any] = None, max_tokens: Optional[int] = None) -> None:
        if client is None and settings.configured:
            client = create_azure_client(settings.endpoint, settings.api_key, settings.api_version, self.timeout)
        super().__init__(settings.model, client, max_tokens)

    def request_options(self) -> Dict[str, Any]:
        return {"max_tokens": self.max_tokens, "temperature": 0.7}
