from typing import Optional

from models.attachment import ContentEnvelope
from models.conversation import History, ResponseEnvelope
from services.providers.base import ProviderAdapter

OFFLINE_MESSAGE = (
    "I'm currently offline for maintenance. "
    "Grok-3 will be back online soon with enhanced capabilities!"
)


class OfflineAdapter(ProviderAdapter):
    """Static responder for a backend that is not served live.

    Never touches the network and never fails.
    """

    provider_name = "xAI"
    model_name = "Grok-3"

    def __init__(self, message: str = OFFLINE_MESSAGE) -> None:
        super().__init__(client=None)
        self.message = message

    @property
    def is_available(self) -> bool:
        return False

    async def respond(
        self,
        message: str,
        envelope: Optional[ContentEnvelope],
        history: History,
    ) -> ResponseEnvelope:
        return ResponseEnvelope(
            content=self.message,
            model=self.model_name,
            provider=self.provider_name,
            status="offline",
        )
