"""Text-to-image generation through an Azure OpenAI DALL-E deployment."""

import logging
import time
from typing import Any, Optional

from models.attachment import ContentEnvelope
from models.conversation import History, ResponseEnvelope
from services.providers.base import ProviderAdapter, create_azure_client
from services.providers.response_parser import extract_image_url
from utils.settings import AzureOpenAISettings

LOGGER = logging.getLogger(__name__)

IMAGE_TIMEOUT_SECONDS = 60.0


class ImageGenerationAdapter(ProviderAdapter):
    """Send the chat message as a generation prompt and return the image url.

    Attachments and history are ignored.
    """

    provider_name = "Azure OpenAI"
    model_name = "DALL-E 3"
    timeout = IMAGE_TIMEOUT_SECONDS

    SIZE = "1024x1024"
    QUALITY = "standard"
    STYLE = "natural"

    def __init__(self, settings: AzureOpenAISettings, client: Optional[Any] = None) -> None:
        if client is None and settings.images_configured:
            client = create_azure_client(settings.endpoint, settings.api_key, settings.api_version, self.timeout)
        super().__init__(client)
        self.deployment = settings.image_deployment

    async def respond(
        self,
        message: str,
        envelope: Optional[ContentEnvelope],
        history: History,
    ) -> ResponseEnvelope:
        client = self._require_client()

        start = time.time()
        response = await self._invoke(
            client.images.generate(
                model=self.deployment,
                prompt=message,
                n=1,
                size=self.SIZE,
                quality=self.QUALITY,
                style=self.STYLE,
                timeout=self.timeout,
            )
        )
        LOGGER.info("Image generation latency: %.3fs", time.time() - start)

        return ResponseEnvelope(
            content=f'Image generated successfully for prompt: "{message}"',
            model=self.model_name,
            provider=self.provider_name,
            image_url=extract_image_url(response, provider=self.provider_name),
            prompt=message,
        )
