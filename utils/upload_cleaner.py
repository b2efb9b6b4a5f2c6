"""Helpers to remove stale staged uploads from the upload directory."""

import asyncio
import logging
import time
from pathlib import Path

import aiofiles.os

LOGGER = logging.getLogger(__name__)


class UploadCleaner:
    """Delete staged uploads older than the configured retention window.

    Requests delete their own uploads; this only catches files orphaned by a
    crashed or killed worker.
    """

    def __init__(self, upload_dir: Path, retention_seconds: int = 3_600) -> None:
        """
        Args:
            upload_dir: Directory holding staged uploads.
            retention_seconds: Age threshold in seconds; files older than this are removed.
        """
        self.upload_dir = Path(upload_dir)
        self.retention_seconds = retention_seconds

    async def prune_expired_uploads(self) -> int:
        """Delete files older than the retention window and return count removed."""
        if not await aiofiles.os.path.isdir(self.upload_dir):
            return 0
        cutoff = time.time() - self.retention_seconds
        removed = 0
        for name in await aiofiles.os.listdir(self.upload_dir):
            path = self.upload_dir / name
            try:
                stat = await aiofiles.os.stat(path)
                if not path.is_file() or stat.st_mtime >= cutoff:
                    continue
                await aiofiles.os.remove(path)
                removed += 1
            except FileNotFoundError:
                continue
        if removed:
            LOGGER.info("Pruned %d stale upload(s) from %s", removed, self.upload_dir)
        return removed

    async def run_periodic_cleanup(self, interval_seconds: int = 3_600) -> None:
        """
        Repeatedly prune expired uploads at the given interval until cancelled.

        Args:
            interval_seconds: Seconds to sleep between cleanup runs.
        """
        while True:
            try:
                await self.prune_expired_uploads()
                await asyncio.sleep(interval_seconds)
            except asyncio.CancelledError:
                break
            except OSError as exc:
                LOGGER.warning("Upload cleanup failed: %s", exc)
                await asyncio.sleep(interval_seconds)
