"""Local-disk FileStorage.

Files are written under ``<upload_dir>/<subdir>/<epoch_ms>-<filename>`` and
referenced as ``/uploads/<subdir>/<file>``; the app mounts upload_dir at
/uploads. Disk I/O runs in a worker thread so the event loop never blocks.
"""

from __future__ import annotations

import asyncio
import os
import time

from shared.logging import get_logger
from shared.validators import sanitize_filename

log = get_logger(__name__)

URL_PREFIX = "/uploads"


class LocalFileStorage:
    def __init__(self, upload_dir: str) -> None:
        self.upload_dir = os.path.abspath(upload_dir)

    def _path_for(self, reference: str) -> str:
        if not reference.startswith(URL_PREFIX + "/"):
            raise ValueError(f"Not an upload reference: {reference!r}")
        relative = reference[len(URL_PREFIX) + 1 :]
        path = os.path.abspath(os.path.join(self.upload_dir, relative))
        if os.path.commonpath([path, self.upload_dir]) != self.upload_dir:
            raise ValueError(f"Reference escapes upload dir: {reference!r}")
        return path

    def _write(self, subdir: str, filename: str, data: bytes) -> str:
        stamped = f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"
        dest_dir = os.path.join(self.upload_dir, subdir) if subdir else self.upload_dir
        os.makedirs(dest_dir, exist_ok=True)
        with open(os.path.join(dest_dir, stamped), "wb") as f:
            f.write(data)
        parts = [URL_PREFIX, subdir, stamped] if subdir else [URL_PREFIX, stamped]
        return "/".join(parts)

    async def save(self, subdir: str, filename: str, data: bytes) -> str:
        reference = await asyncio.to_thread(self._write, subdir, filename, data)
        log.info("file_saved", reference=reference, size=len(data))
        return reference

    async def delete(self, reference: str) -> bool:
        try:
            path = self._path_for(reference)
            await asyncio.to_thread(os.remove, path)
        except (OSError, ValueError) as e:
            log.warning(
                "file_delete_failed",
                reference=reference,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        log.info("file_deleted", reference=reference)
        return True
