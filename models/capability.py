from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple

from models.attachment import AttachmentKind


@dataclass(frozen=True)
class ModelCapability:
    """Attachment kinds and ceilings a model backend supports.

    Attributes:
        model_id: Routing identifier (e.g. `gpt5`).
        allowed_kinds: Attachment kinds the model accepts; `NONE` means a bare message is fine.
        max_attachment_size: Upper bound on attachment size in bytes.
        max_tokens: Completion token ceiling sent with chat requests (see `build_adapters`).
    """

    model_id: str
    allowed_kinds: FrozenSet[AttachmentKind]
    max_attachment_size: int
    max_tokens: int

    def allows(self, kind: AttachmentKind) -> bool:
        return kind in self.allowed_kinds


@dataclass(frozen=True)
class ModelProfile:
    """Descriptive metadata shown to clients for a model."""

    model_id: str
    name: str
    provider: str
    description: str
    features: Tuple[str, ...] = field(default_factory=tuple)
