"""Conversation and response models shared by the dispatcher and adapters."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

ROLES = ("user", "assistant", "system")


@dataclass(frozen=True)
class ConversationTurn:
    """One prior message in a caller-supplied history."""

    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unsupported conversation role: {self.role!r}")

    def to_message(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


History = Sequence[ConversationTurn]


def history_from_payload(items: Optional[Iterable[Mapping[str, Any]]]) -> List[ConversationTurn]:
    """Build conversation turns from decoded JSON objects.

    Raises:
        ValueError: If an item is not an object with `role` and `content`.
    """
    turns: List[ConversationTurn] = []
    for item in items or []:
        if not isinstance(item, Mapping) or "role" not in item or "content" not in item:
            raise ValueError("Conversation history items need 'role' and 'content'.")
        turns.append(ConversationTurn(role=str(item["role"]), content=str(item["content"])))
    return turns


@dataclass(frozen=True)
class Usage:
    """Token accounting reported by a chat provider."""

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


@dataclass(frozen=True)
class ResponseEnvelope:
    """Normalized reply returned to the caller for every model.

    Attributes:
        content: Assistant text (or a confirmation message for image generation).
        model: Display name of the model that answered.
        provider: Display name of the backend vendor.
        usage: Token usage, when the provider reports it.
        image_url: Generated image location (image generation only).
        status: `online` for live backends, `offline` for the static responder.
        prompt: The generation prompt (image generation only).
    """

    content: str
    model: str
    provider: str
    usage: Optional[Usage] = None
    image_url: Optional[str] = None
    status: str = "online"
    prompt: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        return {key: value for key, value in payload.items() if value is not None}
