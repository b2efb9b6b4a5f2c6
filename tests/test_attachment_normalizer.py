"""
Behavioral tests for AttachmentNormalizer.

Uses real Pillow encode/decode; no mocks of internal logic.
"""

import base64
import io

import pytest
from PIL import Image

from conftest import make_data_url, make_image_bytes
from models.attachment import Attachment, AttachmentKind
from models.errors import ImageDecodeError, TextDecodeError, UnsupportedAttachmentType
from services.attachment_normalizer import MAX_TEXT_CHARS, TRUNCATION_MARKER


def _decode_envelope_image(envelope) -> Image.Image:
    return Image.open(io.BytesIO(base64.b64decode(envelope.data)))


class TestClassify:
    @pytest.mark.parametrize(
        "mime_type, extension",
        [
            ("image/png", ".png"),
            ("image/heic", ""),
            (None, ".JPG"),
            ("application/octet-stream", ".webp"),
        ],
    )
    def test_images(self, normalizer, mime_type, extension):
        assert normalizer.classify(mime_type, extension) is AttachmentKind.IMAGE

    @pytest.mark.parametrize(
        "mime_type, extension",
        [
            ("text/plain", ".txt"),
            ("text/x-python", ".py"),
            ("application/json", ""),
            ("application/xml", ""),
            ("text/csv; charset=utf-8", ""),
            ("application/octet-stream", ".log"),
            (None, "md"),
        ],
    )
    def test_text(self, normalizer, mime_type, extension):
        assert normalizer.classify(mime_type, extension) is AttachmentKind.TEXT

    def test_image_checked_before_text(self, normalizer):
        assert normalizer.classify("text/plain", ".png") is AttachmentKind.IMAGE

    def test_unsupported_type_raises(self, normalizer):
        with pytest.raises(UnsupportedAttachmentType, match=".exe"):
            normalizer.classify("application/octet-stream", ".exe")

    def test_base64_attachments_are_images(self, normalizer):
        attachment = Attachment.from_base64("aGVsbG8=")
        assert normalizer.classify_attachment(attachment) is AttachmentKind.IMAGE


class TestNormalizeImage:
    def test_large_image_fits_bounding_box_and_keeps_aspect(self, normalizer):
        envelope = normalizer.normalize_image(make_image_bytes(size=(3000, 1500)), "wide.png")

        img = _decode_envelope_image(envelope)
        assert img.format == "JPEG"
        assert img.size == (1024, 512)
        assert envelope.kind is AttachmentKind.IMAGE
        assert envelope.mime_type == "image/jpeg"
        assert envelope.filename == "wide.png"
        assert envelope.byte_size == len(base64.b64decode(envelope.data))

    def test_small_image_is_not_enlarged(self, normalizer):
        envelope = normalizer.normalize_image(make_image_bytes(size=(40, 30)))
        assert _decode_envelope_image(envelope).size == (40, 30)

    def test_transparent_png_is_flattened(self, normalizer):
        raw = make_image_bytes(size=(64, 64), color=(0, 255, 0, 0), mode="RGBA")
        img = _decode_envelope_image(normalizer.normalize_image(raw))
        assert img.mode == "RGB"
        r, g, b = img.getpixel((32, 32))
        assert min(r, g, b) > 240

    def test_normalization_is_deterministic(self, normalizer):
        raw = make_image_bytes(size=(1800, 1200), color=(10, 120, 200), fmt="JPEG")
        assert normalizer.normalize_image(raw, "a.jpg") == normalizer.normalize_image(raw, "a.jpg")

    def test_malformed_bytes_raise(self, normalizer):
        with pytest.raises(ImageDecodeError):
            normalizer.normalize_image(b"definitely not an image")


class TestNormalizeBase64Image:
    def test_data_url_matches_raw_path(self, normalizer):
        raw = make_image_bytes(size=(1500, 1500), fmt="PNG")
        from_data_url = normalizer.normalize_base64_image(make_data_url(raw), "shot.png")
        from_raw = normalizer.normalize_image(raw, "shot.png")
        assert from_data_url == from_raw

    def test_bare_base64_is_accepted(self, normalizer):
        raw = make_image_bytes(size=(20, 20), fmt="GIF")
        envelope = normalizer.normalize_base64_image(base64.b64encode(raw).decode("utf-8"))
        assert envelope.filename == "screenshot.jpg"
        assert _decode_envelope_image(envelope).size == (20, 20)

    def test_line_wrapped_data_url_is_accepted(self, normalizer):
        raw = make_image_bytes(size=(300, 200))
        encoded = base64.encodebytes(raw).decode("ascii")
        assert "\n" in encoded

        envelope = normalizer.normalize_base64_image("data:image/png;base64," + encoded)

        assert envelope == normalizer.normalize_image(raw, "screenshot.jpg")

    def test_invalid_base64_raises(self, normalizer):
        with pytest.raises(ImageDecodeError, match="Invalid base64"):
            normalizer.normalize_base64_image("data:image/png;base64,@@@not-base64@@@")

    def test_valid_base64_of_non_image_raises(self, normalizer):
        with pytest.raises(ImageDecodeError):
            normalizer.normalize_base64_image(base64.b64encode(b"plain text").decode("utf-8"))


class TestNormalizeText:
    def test_short_text_is_unchanged(self, normalizer):
        envelope = normalizer.normalize_text("héllo wörld".encode("utf-8"), "text/plain", "notes.txt")
        assert envelope.data == "héllo wörld"
        assert envelope.kind is AttachmentKind.TEXT
        assert envelope.filename == "notes.txt"
        assert envelope.mime_type == "text/plain"

    def test_text_at_limit_is_not_truncated(self, normalizer):
        text = "a" * MAX_TEXT_CHARS
        assert normalizer.normalize_text(text.encode("utf-8")).data == text

    def test_long_text_is_truncated_with_marker(self, normalizer):
        text = "b" * (60 * 1024)
        envelope = normalizer.normalize_text(text.encode("utf-8"), "text/plain")

        assert envelope.data == "b" * MAX_TEXT_CHARS + TRUNCATION_MARKER
        assert len(envelope.data) <= MAX_TEXT_CHARS + len(TRUNCATION_MARKER)
        assert envelope.byte_size == 60 * 1024

    def test_invalid_utf8_raises(self, normalizer):
        with pytest.raises(TextDecodeError):
            normalizer.normalize_text(b"\xff\xfe\xfa invalid")


class TestNormalizeAttachment:
    @pytest.mark.asyncio
    async def test_uploaded_image_is_read_from_disk(self, normalizer, stage_upload):
        attachment = await stage_upload("photo.png", make_image_bytes(size=(2048, 1024)), "image/png")
        envelope = await normalizer.normalize(attachment)
        assert _decode_envelope_image(envelope).size == (1024, 512)
        assert envelope.filename == "photo.png"

    @pytest.mark.asyncio
    async def test_uploaded_text_is_read_from_disk(self, normalizer, stage_upload):
        attachment = await stage_upload("data.json", b'{"a": 1}', "application/json")
        envelope = await normalizer.normalize(attachment)
        assert envelope.kind is AttachmentKind.TEXT
        assert envelope.data == '{"a": 1}'
        assert envelope.mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_blob_is_decoded(self, normalizer):
        attachment = Attachment.from_base64(make_data_url(make_image_bytes()))
        envelope = await normalizer.normalize(attachment)
        assert envelope.filename == "screenshot.jpg"
        assert envelope.kind is AttachmentKind.IMAGE
