from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Optional


class AttachmentKind(str, Enum):
    """Kinds of content a model may accept alongside a chat turn."""

    IMAGE = "image"
    TEXT = "text"
    NONE = "none"


class SourceKind(str, Enum):
    UPLOADED_FILE = "uploaded_file"
    BASE64_BLOB = "base64_blob"


@dataclass
class Attachment:
    """A single uploaded artifact accompanying one chat turn.

    Attributes:
        source_kind: Whether the bytes live on disk or in memory.
        path: Location of the staged upload (uploaded files only).
        data: Base64 data URL or raw base64 text (blobs only).
        original_filename: Name the client gave the file.
        mime_type: MIME type declared by the client.
        size_bytes: Size reported for the upload.
    """

    source_kind: SourceKind
    path: Optional[str] = None
    data: Optional[str] = None
    original_filename: str = "upload"
    mime_type: Optional[str] = None
    size_bytes: int = 0

    @property
    def extension(self) -> str:
        return PurePath(self.original_filename).suffix.lower()

    @classmethod
    def from_upload(cls, path: str, original_filename: str, mime_type: Optional[str], size_bytes: int) -> "Attachment":
        return cls(
            source_kind=SourceKind.UPLOADED_FILE,
            path=path,
            original_filename=original_filename,
            mime_type=mime_type,
            size_bytes=size_bytes,
        )

    @classmethod
    def from_base64(cls, data: str, original_filename: str = "screenshot.jpg") -> "Attachment":
        mime_type = "image/png"
        if data.startswith("data:") and ";" in data:
            mime_type = data[len("data:"):data.index(";")]
        return cls(
            source_kind=SourceKind.BASE64_BLOB,
            data=data,
            original_filename=original_filename,
            mime_type=mime_type,
            size_bytes=len(data),
        )


@dataclass(frozen=True)
class ContentEnvelope:
    """Normalized, size-bounded attachment ready for a provider.

    Attributes:
        kind: `AttachmentKind.IMAGE` or `AttachmentKind.TEXT`.
        data: Base64 JPEG for images, decoded (possibly truncated) text otherwise.
        filename: Name shown to the model.
        byte_size: Re-encoded image size, or the original text size in bytes.
        mime_type: MIME type of `data`.
    """

    kind: AttachmentKind
    data: str
    filename: str
    byte_size: int
    mime_type: str
