"""Ownership of transient attachment storage for a single request."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from models.attachment import Attachment, SourceKind
from models.errors import CleanupFailure
from services.upload_store import AttachmentStore

LOGGER = logging.getLogger(__name__)


@dataclass
class AttachmentHandle:
    """Owning reference to one attachment's storage."""

    attachment: Attachment
    released: bool = False


class AttachmentLifecycle:
    """Acquire and release attachment storage exactly once.

    Uploaded files are deleted through the store; base64 blobs only hold
    memory, so releasing them drops the reference to their data.

    Args:
        store: Store that staged the uploaded files.
    """

    def __init__(self, store: Optional[AttachmentStore] = None) -> None:
        self.store = store

    def acquire(self, attachment: Attachment) -> AttachmentHandle:
        return AttachmentHandle(attachment=attachment)

    async def release(self, handle: AttachmentHandle) -> None:
        """Free the storage behind `handle`. Repeated calls are no-ops.

        Deletion errors are logged as `CleanupFailure` and never raised.
        """
        if handle.released:
            return
        handle.released = True

        attachment = handle.attachment
        if attachment.source_kind is SourceKind.BASE64_BLOB or not attachment.path:
            attachment.data = None
            return
        if self.store is None:
            LOGGER.warning("No attachment store configured; leaving %s in place", attachment.path)
            return

        try:
            # Shielded so a cancelled request still finishes deleting its upload
            await asyncio.shield(self.store.delete(attachment.path))
        except asyncio.CancelledError:
            LOGGER.warning("Request cancelled while deleting %s", attachment.path)
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            failure = CleanupFailure(attachment.path, exc)
            LOGGER.warning("File cleanup error: %s", failure)

    @asynccontextmanager
    async def hold(self, attachment: Attachment) -> AsyncIterator[AttachmentHandle]:
        """Acquire a handle for the duration of the block and always release it."""
        handle = self.acquire(attachment)
        try:
            yield handle
        finally:
            await self.release(handle)
