"""Transient storage for uploaded attachments.

Uploads are written under the configured upload directory with a unique
name and deleted once the request that staged them finishes. The store is
the only component that touches the upload directory on the request path.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os


class AttachmentStore(Protocol):
    """Filesystem-like store holding staged attachments."""

    async def save(self, filename: str, data: bytes) -> str: ...

    async def delete(self, location: str) -> None: ...


class LocalUploadStore:
    """Stage uploads as files under `base_dir`.

    Args:
        base_dir: Directory receiving staged uploads. Created on first save.
    """

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    async def save(self, filename: str, data: bytes) -> str:
        """Write `data` under a unique name that keeps the original extension.

        Returns:
            The absolute path of the staged file.
        """
        await aiofiles.os.makedirs(self.base_dir, exist_ok=True)
        suffix = Path(os.path.basename(filename or "")).suffix.lower()
        safe_path = self.base_dir / f"file-{uuid.uuid4().hex}{suffix}"
        async with aiofiles.open(safe_path, "wb") as f:
            await f.write(data)
        return str(safe_path.resolve())

    async def delete(self, location: str) -> None:
        """Remove a staged file.

        Raises:
            FileNotFoundError: If the file is already gone.
            ValueError: If `location` lies outside the upload directory.
        """
        path = Path(location).resolve()
        if self.base_dir.resolve() not in path.parents:
            raise ValueError(f"Refusing to delete {location}: outside upload directory")
        await aiofiles.os.remove(path)
