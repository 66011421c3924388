"""Blob storage — path-addressed binary/text objects.

``BlobStore`` is the interface the upload flow and the document repository
depend on; ``LocalBlobStore`` implements it on the local filesystem. Paths
are ``/``-separated and relative to the store root.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Protocol


class BlobStore(Protocol):
    async def upload_bytes(self, data: bytes, path: str) -> str: ...

    async def upload_text(self, content: str, path: str) -> str: ...

    async def get_text(self, path: str) -> str | None: ...

    async def exists(self, path: str) -> bool: ...

    async def list_files(self, prefix: str) -> list[str]: ...

    async def list_folders(self, prefix: str) -> list[str]: ...

    async def delete(self, path: str) -> None: ...

    async def delete_prefix(self, prefix: str) -> None: ...

    async def usage(self, prefix: str) -> tuple[int, int]: ...


class LocalBlobStore:
    """Filesystem-backed ``BlobStore``.

    Writes go to a temporary sibling first and are renamed into place, so a
    reader never sees a half-written blob. Paths that resolve outside *root*
    are rejected with ``ValueError``.

    Args:
        root: Directory holding all blobs (created on first write).
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    async def upload_bytes(self, data: bytes, path: str) -> str:
        target = self._resolve(path)
        await asyncio.to_thread(_atomic_write, target, data)
        return target.as_uri()

    async def upload_text(self, content: str, path: str) -> str:
        return await self.upload_bytes(content.encode("utf-8"), path)

    async def get_text(self, path: str) -> str | None:
        target = self._resolve(path)
        if not target.is_file():
            return None
        return await asyncio.to_thread(target.read_text, encoding="utf-8")

    async def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    async def list_files(self, prefix: str) -> list[str]:
        """Blob paths directly under *prefix* (not recursive), sorted."""
        folder = self._resolve(prefix)
        if not folder.is_dir():
            return []
        return sorted(self._relative(p) for p in folder.iterdir() if p.is_file())

    async def list_folders(self, prefix: str) -> list[str]:
        folder = self._resolve(prefix)
        if not folder.is_dir():
            return []
        return sorted(self._relative(p) for p in folder.iterdir() if p.is_dir())

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        if target.is_file():
            await asyncio.to_thread(target.unlink)

    async def delete_prefix(self, prefix: str) -> None:
        target = self._resolve(prefix)
        if target == self.root.resolve():
            raise ValueError("Refusing to delete the storage root")
        if target.is_dir():
            await asyncio.to_thread(shutil.rmtree, target)
        elif target.is_file():
            await asyncio.to_thread(target.unlink)

    async def usage(self, prefix: str) -> tuple[int, int]:
        """Return ``(file_count, total_bytes)`` for everything under *prefix*."""
        folder = self._resolve(prefix)
        if not folder.is_dir():
            return 0, 0
        files = [p for p in folder.rglob("*") if p.is_file()]
        return len(files), sum(p.stat().st_size for p in files)

    # ------------------------------------------------------------------
    # Path helpers
    # ------------------------------------------------------------------

    def _resolve(self, path: str) -> Path:
        root = self.root.resolve()
        target = (root / path.strip("/")).resolve()
        if target != root and root not in target.parents:
            raise ValueError(f"Path escapes storage root: '{path}'")
        return target

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.root.resolve()).as_posix()


def _atomic_write(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(f".{target.name}.tmp")
    tmp.write_bytes(data)
    tmp.replace(target)
