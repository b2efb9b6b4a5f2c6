from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from models.attachment import AttachmentKind
from models.capability import ModelCapability, ModelProfile
from models.errors import UnknownModel
from services.attachment_normalizer import IMAGE_EXTENSIONS, TEXT_EXTENSIONS

MB = 1024 * 1024

DEFAULT_CAPABILITIES = (
	ModelCapability(
		model_id="gpt5",
		allowed_kinds=frozenset({AttachmentKind.IMAGE, AttachmentKind.TEXT, AttachmentKind.NONE}),
		max_attachment_size=10 * MB,
		max_tokens=4096,
	),
	ModelCapability(
		model_id="deepseek",
		allowed_kinds=frozenset({AttachmentKind.TEXT, AttachmentKind.NONE}),
		max_attachment_size=5 * MB,
		max_tokens=2048,
	),
	ModelCapability(
		model_id="grok",
		allowed_kinds=frozenset({AttachmentKind.NONE}),
		max_attachment_size=0,
		max_tokens=2048,
	),
	ModelCapability(
		model_id="image-gen",
		allowed_kinds=frozenset({AttachmentKind.NONE}),
		max_attachment_size=0,
		max_tokens=1000,
	),
)

DEFAULT_PROFILES = (
	ModelProfile("gpt5", "GPT-5 Chat", "Azure OpenAI", "Most advanced language model from OpenAI", ("text", "file-upload", "screenshot")),
	ModelProfile("deepseek", "DeepSeek Chat", "DeepSeek AI", "Advanced reasoning and coding capabilities", ("text", "file-upload")),
	ModelProfile("grok", "Grok-3", "xAI", "Real-time information with wit and humor", ("text",)),
	ModelProfile("image-gen", "Image Generation", "Azure OpenAI", "Create stunning images from text descriptions", ("text-to-image",)),
)


def default_capability(model_id: str) -> ModelCapability:
	"""Return the built-in capability entry for `model_id`."""
	for capability in DEFAULT_CAPABILITIES:
		if capability.model_id == model_id:
			return capability
	raise UnknownModel(model_id)


def _format_size(num_bytes: int) -> str:
	return f"{num_bytes // MB}MB"


class CapabilityRegistry:
	"""Read-only lookup of model capabilities.

	The registry is populated once at construction and never mutated, so
	concurrent lookups need no locking.

	Args:
		capabilities: Capability entries; defaults to `DEFAULT_CAPABILITIES`.
		profiles: Descriptive entries keyed by the same model ids.

	Raises:
		ValueError: If a model id appears twice or a profile has no capability entry.
	"""

	def __init__(
		self,
		capabilities: Iterable[ModelCapability] = DEFAULT_CAPABILITIES,
		profiles: Iterable[ModelProfile] = DEFAULT_PROFILES,
	) -> None:
		entries: Dict[str, ModelCapability] = {}
		for capability in capabilities:
			if capability.model_id in entries:
				raise ValueError(f"Duplicate capability entry for model '{capability.model_id}'")
			entries[capability.model_id] = capability
		self._entries: Mapping[str, ModelCapability] = MappingProxyType(entries)

		profile_map: Dict[str, ModelProfile] = {}
		for profile in profiles:
			if profile.model_id not in entries:
				raise ValueError(f"Profile for unknown model '{profile.model_id}'")
			profile_map[profile.model_id] = profile
		self._profiles: Mapping[str, ModelProfile] = MappingProxyType(profile_map)

	def lookup(self, model_id: str) -> ModelCapability:
		"""Return the capability entry for `model_id` or raise `UnknownModel`."""
		capability = self._entries.get(model_id)
		if capability is None:
			raise UnknownModel(model_id)
		return capability

	def model_ids(self) -> List[str]:
		return list(self._entries.keys())

	def profile(self, model_id: str) -> Optional[ModelProfile]:
		self.lookup(model_id)
		return self._profiles.get(model_id)

	def supported_file_types(self, model_id: str) -> dict:
		"""Describe the file extensions and size ceiling accepted by a model."""
		capability = self.lookup(model_id)
		return {
			"images": sorted(IMAGE_EXTENSIONS) if capability.allows(AttachmentKind.IMAGE) else [],
			"texts": sorted(TEXT_EXTENSIONS) if capability.allows(AttachmentKind.TEXT) else [],
			"maxSize": _format_size(capability.max_attachment_size),
		}
