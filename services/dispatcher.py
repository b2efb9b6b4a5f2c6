"""Route a chat turn to the provider adapter bound to its model id.

Request flow:
    `handle` -> `CapabilityRegistry.lookup` -> acquire attachment handle ->
    capability check -> `AttachmentNormalizer.normalize` ->
    `ProviderAdapter.respond` -> release handle -> `ResponseEnvelope`.

Any attachment handle acquired by `handle` is released exactly once before
`handle` returns, raises, or is cancelled.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from models.attachment import Attachment, ContentEnvelope
from models.capability import ModelCapability
from models.conversation import History, ResponseEnvelope
from models.errors import CapabilityViolation
from services.attachment_lifecycle import AttachmentLifecycle
from services.attachment_normalizer import AttachmentNormalizer
from services.capability_registry import CapabilityRegistry
from services.providers.base import ProviderAdapter
from services.providers.chat_completion import AzureChatAdapter, DeepSeekChatAdapter
from services.providers.image_generation import ImageGenerationAdapter
from services.providers.offline import OfflineAdapter
from services.upload_store import AttachmentStore
from utils.settings import GatewaySettings

LOGGER = logging.getLogger(__name__)


class Dispatcher:
    """Validate, normalize and dispatch one chat turn.

    Args:
        registry: Capability lookup for every routable model id.
        adapters: Static model id -> adapter table.
        normalizer: Converts attachments into content envelopes.
        lifecycle: Releases attachment storage.

    Raises:
        ValueError: If the adapter table and the registry disagree on model ids.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        adapters: Mapping[str, ProviderAdapter],
        normalizer: Optional[AttachmentNormalizer] = None,
        lifecycle: Optional[AttachmentLifecycle] = None,
    ) -> None:
        missing = set(registry.model_ids()) ^ set(adapters.keys())
        if missing:
            raise ValueError(f"Models without both a capability and an adapter: {sorted(missing)}")
        self.registry = registry
        self.adapters: Mapping[str, ProviderAdapter] = MappingProxyType(dict(adapters))
        self.normalizer = normalizer or AttachmentNormalizer()
        self.lifecycle = lifecycle or AttachmentLifecycle()

    async def handle(
        self,
        model_id: str,
        message: str,
        attachment: Optional[Attachment] = None,
        history: History = (),
    ) -> ResponseEnvelope:
        """Answer one chat turn with the model bound to `model_id`.

        Raises:
            UnknownModel: If `model_id` is not registered. Nothing is acquired.
            CapabilityViolation: If the attachment kind or size is not allowed.
            UnsupportedAttachmentType, ImageDecodeError, TextDecodeError: On normalization failure.
            ProviderUnavailable, ProviderTimeout, ProviderError: On provider failure.
        """
        capability = self.registry.lookup(model_id)
        adapter = self.adapters[model_id]

        if attachment is None:
            return await self._dispatch(model_id, adapter, message, None, history)

        async with self.lifecycle.hold(attachment):
            self._check_capability(capability, attachment)
            envelope = await self.normalizer.normalize(attachment)
            LOGGER.info(
                "Normalized %s attachment %s (%d bytes) for %s",
                envelope.kind.value, envelope.filename, envelope.byte_size, model_id,
            )
            return await self._dispatch(model_id, adapter, message, envelope, history)

    def availability(self) -> Dict[str, bool]:
        """Report which models currently have a live, configured backend."""
        return {model_id: adapter.is_available for model_id, adapter in self.adapters.items()}

    def _check_capability(self, capability: ModelCapability, attachment: Attachment) -> None:
        kind = self.normalizer.classify_attachment(attachment)
        if not capability.allows(kind):
            raise CapabilityViolation(capability.model_id, f"{kind.value} attachments are not supported")
        if attachment.size_bytes > capability.max_attachment_size:
            raise CapabilityViolation(
                capability.model_id,
                f"attachment of {attachment.size_bytes} bytes exceeds {capability.max_attachment_size} bytes",
                size_exceeded=True,
            )

    async def _dispatch(
        self,
        model_id: str,
        adapter: ProviderAdapter,
        message: str,
        envelope: Optional[ContentEnvelope],
        history: History,
    ) -> ResponseEnvelope:
        try:
            response = await adapter.respond(message, envelope, history)
        except Exception:
            LOGGER.error("Dispatch to %s via %s failed", model_id, adapter.provider_name)
            raise
        LOGGER.info("Dispatch to %s via %s succeeded", model_id, adapter.provider_name)
        return response


def build_adapters(settings: GatewaySettings, registry: Optional[CapabilityRegistry] = None) -> Dict[str, ProviderAdapter]:
    """Resolve the static model id -> adapter table from settings.

    Chat adapters take their completion token ceiling from `registry`.
    """
    registry = registry or CapabilityRegistry()
    return {
        "gpt5": AzureChatAdapter(settings.azure, max_tokens=registry.lookup("gpt5").max_tokens),
        "deepseek": DeepSeekChatAdapter(settings.deepseek, max_tokens=registry.lookup("deepseek").max_tokens),
        "grok": OfflineAdapter(),
        "image-gen": ImageGenerationAdapter(settings.azure),
    }


def build_dispatcher(settings: GatewaySettings, store: Optional[AttachmentStore] = None) -> Dispatcher:
    """Create a dispatcher wired with the default registry and adapters."""
    registry = CapabilityRegistry()
    return Dispatcher(
        registry=registry,
        adapters=build_adapters(settings, registry),
        normalizer=AttachmentNormalizer(),
        lifecycle=AttachmentLifecycle(store),
    )
