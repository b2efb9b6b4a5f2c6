"""Utilities to build chat-completion message lists from a normalized turn."""

from typing import Dict, List, Optional

from models.attachment import AttachmentKind, ContentEnvelope
from models.conversation import History


def build_user_content(message: str, envelope: Optional[ContentEnvelope]) -> str:
    """Append a description of the attachment to the user's message.

    Text attachments are inlined under a filename header. Images only get a
    filename marker; their bytes are not sent through the text channel.
    """
    if envelope is None:
        return message
    if envelope.kind is AttachmentKind.TEXT:
        return f"{message}\n\n[File content from {envelope.filename}]:\n{envelope.data}"
    if envelope.kind is AttachmentKind.IMAGE:
        return f"{message}\n\n[Image uploaded: {envelope.filename}]"
    return message


def build_messages(
    system_prompt: str,
    history: History,
    message: str,
    envelope: Optional[ContentEnvelope],
) -> List[Dict[str, str]]:
    """Build `[system] + history + [user]` for the chat completions API."""
    messages: List[Dict[str, str]] = [{"role": "system", "content": system_prompt}]
    messages.extend(turn.to_message() for turn in history)
    messages.append({"role": "user", "content": build_user_content(message, envelope)})
    return messages
