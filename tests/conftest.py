"""
Pytest configuration and fixtures for FusionAI Gateway tests.
"""

import base64
import io
from types import SimpleNamespace
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from models.attachment import Attachment
from models.conversation import ResponseEnvelope
from services.attachment_lifecycle import AttachmentLifecycle
from services.attachment_normalizer import AttachmentNormalizer
from services.capability_registry import CapabilityRegistry
from services.dispatcher import Dispatcher
from services.providers.base import ProviderAdapter
from services.providers.offline import OfflineAdapter
from services.upload_store import LocalUploadStore
from utils.settings import AzureOpenAISettings, DeepSeekSettings, GatewaySettings


def make_image_bytes(size=(100, 100), color=(255, 0, 0), fmt="PNG", mode="RGB") -> bytes:
    """Create an in-memory image of the given size and format."""
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def make_data_url(raw: bytes, subtype: str = "png") -> str:
    return f"data:image/{subtype};base64,{base64.b64encode(raw).decode('utf-8')}"


def chat_completion(content: Optional[str] = "Hello from the model", usage: bool = True):
    """Build an object shaped like an SDK chat completion response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(role="assistant", content=content))],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=7, total_tokens=19) if usage else None,
    )


def image_generation(url: Optional[str] = "https://images.example.test/fox.png"):
    return SimpleNamespace(data=[SimpleNamespace(url=url)])


def fake_chat_client(response=None, side_effect=None):
    """Create a mock async client exposing `chat.completions.create` (external service)."""
    create = AsyncMock(return_value=response or chat_completion(), side_effect=side_effect)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def fake_image_client(response=None, side_effect=None):
    generate = AsyncMock(return_value=response or image_generation(), side_effect=side_effect)
    return SimpleNamespace(images=SimpleNamespace(generate=generate))


class RecordingAdapter(ProviderAdapter):
    """Adapter that records every call and returns (or raises) a preset outcome."""

    provider_name = "Recording"
    model_name = "Recorder"

    def __init__(self, error: Optional[BaseException] = None) -> None:
        super().__init__(client=object())
        self.error = error
        self.calls: List[tuple] = []

    async def respond(self, message, envelope, history):
        self.calls.append((message, envelope, list(history)))
        if self.error is not None:
            raise self.error
        return ResponseEnvelope(content=f"echo: {message}", model=self.model_name, provider=self.provider_name)


class CountingStore(LocalUploadStore):
    """Local store that counts deletions and can be told to fail them."""

    def __init__(self, base_dir, fail_delete: bool = False) -> None:
        super().__init__(base_dir)
        self.fail_delete = fail_delete
        self.deleted: List[str] = []

    async def delete(self, location: str) -> None:
        self.deleted.append(location)
        if self.fail_delete:
            raise OSError("disk unavailable")
        await super().delete(location)


@pytest.fixture
def normalizer() -> AttachmentNormalizer:
    return AttachmentNormalizer()


@pytest.fixture
def registry() -> CapabilityRegistry:
    return CapabilityRegistry()


@pytest.fixture
def store(tmp_path) -> CountingStore:
    return CountingStore(tmp_path / "uploads")


@pytest.fixture
def adapters():
    """Recording adapters for every default model id."""
    return {
        "gpt5": RecordingAdapter(),
        "deepseek": RecordingAdapter(),
        "grok": OfflineAdapter(),
        "image-gen": RecordingAdapter(),
    }


@pytest.fixture
def dispatcher(registry, adapters, normalizer, store) -> Dispatcher:
    return Dispatcher(registry, adapters, normalizer, AttachmentLifecycle(store))


@pytest.fixture
def settings(tmp_path) -> GatewaySettings:
    return GatewaySettings(
        azure=AzureOpenAISettings(),
        deepseek=DeepSeekSettings(),
        upload_dir=tmp_path / "uploads",
        environment="test",
    )


@pytest.fixture
def stage_upload(store):
    """Stage bytes through the store and return a path-backed attachment."""

    async def _stage(filename: str, data: bytes, mime_type: Optional[str]) -> Attachment:
        path = await store.save(filename, data)
        return Attachment.from_upload(path, filename, mime_type, len(data))

    return _stage
