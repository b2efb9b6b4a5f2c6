import asyncio
import os

import pytest

from conftest import CountingStore
from models.attachment import Attachment
from services.attachment_lifecycle import AttachmentLifecycle


@pytest.mark.asyncio
async def test_release_deletes_staged_file_once(store, stage_upload):
    attachment = await stage_upload("notes.txt", b"hello", "text/plain")
    lifecycle = AttachmentLifecycle(store)

    handle = lifecycle.acquire(attachment)
    await lifecycle.release(handle)
    await lifecycle.release(handle)

    assert handle.released
    assert not os.path.exists(attachment.path)
    assert store.deleted == [attachment.path]


@pytest.mark.asyncio
async def test_release_drops_blob_data():
    attachment = Attachment.from_base64("aGVsbG8=")
    lifecycle = AttachmentLifecycle()
    await lifecycle.release(lifecycle.acquire(attachment))
    assert attachment.data is None


@pytest.mark.asyncio
async def test_cleanup_failure_is_logged_not_raised(tmp_path, caplog):
    failing = CountingStore(tmp_path / "uploads", fail_delete=True)
    path = await failing.save("a.txt", b"x")
    lifecycle = AttachmentLifecycle(failing)

    await lifecycle.release(lifecycle.acquire(Attachment.from_upload(path, "a.txt", "text/plain", 1)))

    assert failing.deleted == [path]
    assert "File cleanup error" in caplog.text


@pytest.mark.asyncio
async def test_missing_file_is_logged_not_raised(store, stage_upload, caplog):
    attachment = await stage_upload("gone.txt", b"x", "text/plain")
    os.remove(attachment.path)

    await AttachmentLifecycle(store).release(AttachmentLifecycle(store).acquire(attachment))

    assert "File cleanup error" in caplog.text


@pytest.mark.asyncio
async def test_hold_releases_when_block_raises(store, stage_upload):
    attachment = await stage_upload("notes.txt", b"hello", "text/plain")
    lifecycle = AttachmentLifecycle(store)

    with pytest.raises(RuntimeError, match="boom"):
        async with lifecycle.hold(attachment) as handle:
            raise RuntimeError("boom")

    assert handle.released
    assert store.deleted == [attachment.path]


@pytest.mark.asyncio
async def test_hold_releases_on_cancellation(store, stage_upload):
    attachment = await stage_upload("notes.txt", b"hello", "text/plain")
    lifecycle = AttachmentLifecycle(store)
    entered = asyncio.Event()

    async def _hold_forever():
        async with lifecycle.hold(attachment):
            entered.set()
            await asyncio.sleep(60)

    task = asyncio.create_task(_hold_forever())
    await entered.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert store.deleted == [attachment.path]
    assert not os.path.exists(attachment.path)


@pytest.mark.asyncio
async def test_store_refuses_paths_outside_upload_dir(store, tmp_path):
    outside = tmp_path / "keep.txt"
    outside.write_text("keep")
    with pytest.raises(ValueError, match="outside upload directory"):
        await store.delete(str(outside))
    assert outside.exists()
