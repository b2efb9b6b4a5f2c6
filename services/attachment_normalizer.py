"""Attachment normalizer.

Turns an uploaded artifact (a staged file or a base64 blob) into a
`ContentEnvelope` that any provider adapter can consume. Images are decoded
with Pillow, flattened onto a white background, shrunk to fit within
1024x1024 without enlarging smaller images, and re-encoded as JPEG. Text is
decoded as strict UTF-8 and truncated to 50 KiB with a visible marker.

Public class: `AttachmentNormalizer`

Example:
    normalizer = AttachmentNormalizer()
    envelope = normalizer.normalize_image(raw_bytes, "photo.png")
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import io
import re
from typing import Optional, Tuple

import aiofiles
from PIL import Image, UnidentifiedImageError

from models.attachment import Attachment, AttachmentKind, ContentEnvelope, SourceKind
from models.errors import ImageDecodeError, TextDecodeError, UnsupportedAttachmentType

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"})
TEXT_EXTENSIONS = frozenset({".txt", ".md", ".json", ".xml", ".csv", ".log"})
STRUCTURED_TEXT_MIME_TYPES = frozenset({"application/json", "application/xml", "text/xml", "text/csv"})

MAX_TEXT_CHARS = 50 * 1024
TRUNCATION_MARKER = "\n... (content truncated)"

DATA_URL_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")


def _clean_mime(mime_type: Optional[str]) -> str:
    return (mime_type or "").lower().split(";", 1)[0].strip()


class AttachmentNormalizer:
    """Convert raw attachments into size-bounded content envelopes.

    Args:
        max_size: Bounding box for re-encoded images. Defaults to (1024, 1024).
        jpeg_quality: JPEG quality used when re-encoding. Defaults to 80.
        background: RGB color used to flatten transparent images.
    """

    def __init__(
        self,
        max_size: Tuple[int, int] = (1024, 1024),
        jpeg_quality: int = 80,
        background: Tuple[int, int, int] | None = None,
    ):
        self.max_size = max_size
        self.jpeg_quality = jpeg_quality
        self.background = background or (255, 255, 255)

    def classify(self, mime_type: Optional[str], extension: Optional[str]) -> AttachmentKind:
        """Classify an artifact as an image or a text file.

        Images are checked first, then text.

        Raises:
            UnsupportedAttachmentType: If the artifact matches neither.
        """
        mime = _clean_mime(mime_type)
        ext = (extension or "").lower()
        if ext and not ext.startswith("."):
            ext = f".{ext}"

        if mime.startswith("image/") or ext in IMAGE_EXTENSIONS:
            return AttachmentKind.IMAGE
        if mime.startswith("text/") or mime in STRUCTURED_TEXT_MIME_TYPES or ext in TEXT_EXTENSIONS:
            return AttachmentKind.TEXT
        raise UnsupportedAttachmentType(mime_type, extension)

    def classify_attachment(self, attachment: Attachment) -> AttachmentKind:
        if attachment.source_kind is SourceKind.BASE64_BLOB:
            return AttachmentKind.IMAGE
        return self.classify(attachment.mime_type, attachment.extension)

    def normalize_image(self, data: bytes, filename: str = "image.jpg") -> ContentEnvelope:
        """Resize and re-encode image bytes as a base64 JPEG envelope.

        Args:
            data: Raw image bytes in any format Pillow can read.
            filename: Name reported to the model.

        Returns:
            An image `ContentEnvelope` whose dimensions fit within `max_size`.

        Raises:
            ImageDecodeError: If the bytes are not a readable image.
        """
        try:
            src = Image.open(io.BytesIO(data))
            src.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise ImageDecodeError(f"Image processing failed: {exc}") from exc

        # Convert to RGBA so alpha can be flattened against the background
        src = src.convert("RGBA")
        src.thumbnail(self.max_size, Image.LANCZOS)

        background = Image.new("RGB", src.size, self.background)
        background.paste(src, mask=src.split()[3])

        out_io = io.BytesIO()
        background.save(out_io, format="JPEG", quality=self.jpeg_quality)
        out_bytes = out_io.getvalue()

        return ContentEnvelope(
            kind=AttachmentKind.IMAGE,
            data=base64.b64encode(out_bytes).decode("utf-8"),
            filename=filename,
            byte_size=len(out_bytes),
            mime_type="image/jpeg",
        )

    def normalize_text(self, data: bytes, mime_type: Optional[str] = None, filename: str = "file.txt") -> ContentEnvelope:
        """Decode UTF-8 text and truncate it to `MAX_TEXT_CHARS` characters.

        Raises:
            TextDecodeError: If the bytes are not valid UTF-8.
        """
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TextDecodeError(f"Text file processing failed: {exc}") from exc

        if len(content) > MAX_TEXT_CHARS:
            content = content[:MAX_TEXT_CHARS] + TRUNCATION_MARKER

        return ContentEnvelope(
            kind=AttachmentKind.TEXT,
            data=content,
            filename=filename,
            byte_size=len(data),
            mime_type=_clean_mime(mime_type) or "text/plain",
        )

    def normalize_base64_image(self, data: str, filename: str = "screenshot.jpg") -> ContentEnvelope:
        """Normalize a pasted image given as a data URL or raw base64.

        Raises:
            ImageDecodeError: If the base64 text or the decoded image is invalid.
        """
        payload = DATA_URL_PREFIX.sub("", data.strip(), count=1)
        # Line-wrapped base64 is accepted
        payload = "".join(payload.split())
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ImageDecodeError("Invalid base64 data provided") from exc
        return self.normalize_image(raw, filename)

    async def normalize(self, attachment: Attachment) -> ContentEnvelope:
        """Read an attachment and normalize it according to its kind.

        Pillow work is blocking, so it runs in a worker thread.
        """
        if attachment.source_kind is SourceKind.BASE64_BLOB:
            if attachment.data is None:
                raise ImageDecodeError("Attachment data has already been released")
            return await asyncio.to_thread(
                self.normalize_base64_image, attachment.data, attachment.original_filename
            )

        kind = self.classify(attachment.mime_type, attachment.extension)
        async with aiofiles.open(attachment.path, "rb") as f:
            raw = await f.read()

        if kind is AttachmentKind.IMAGE:
            return await asyncio.to_thread(self.normalize_image, raw, attachment.original_filename)
        return self.normalize_text(raw, attachment.mime_type, attachment.original_filename)
