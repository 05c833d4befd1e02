"""Asynchronous file-service abstraction over the workspace."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class FileService(Protocol):
    """File operations the detection engine needs from its host."""

    async def exists(self, path: Path) -> bool: ...

    async def read_file(self, path: Path) -> bytes: ...

    async def write_file(self, path: Path, data: bytes) -> None: ...

    async def create_folder(self, path: Path) -> None: ...

    async def list_dir(self, path: Path) -> List[str]: ...

    async def stat_signature(self, path: Path) -> Optional[Tuple[int, int]]: ...


class LocalFileService:
    """FileService backed by the local disk; blocking calls run in a worker thread."""

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(path.exists)

    async def read_file(self, path: Path) -> bytes:
        return await asyncio.to_thread(path.read_bytes)

    async def write_file(self, path: Path, data: bytes) -> None:
        await asyncio.to_thread(path.write_bytes, data)

    async def create_folder(self, path: Path) -> None:
        """Create ``path`` itself; a missing parent raises FileNotFoundError."""
        await asyncio.to_thread(path.mkdir, exist_ok=True)

    async def list_dir(self, path: Path) -> List[str]:
        return await asyncio.to_thread(_sorted_names, path)

    async def stat_signature(self, path: Path) -> Optional[Tuple[int, int]]:
        """Return ``(mtime_ns, size)`` or None when the file is gone."""
        return await asyncio.to_thread(_signature, path)


def _sorted_names(path: Path) -> List[str]:
    return sorted(entry.name for entry in path.iterdir())


def _signature(path: Path) -> Optional[Tuple[int, int]]:
    try:
        stat = path.stat()
    except FileNotFoundError:
        return None
    return stat.st_mtime_ns, stat.st_size


__all__ = ["FileService", "LocalFileService"]
