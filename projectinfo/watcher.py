"""Change watcher that re-runs detection when manifest files are modified."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .files import FileService
from .logging import get_logger
from .models import WatchRegistration, WatchState

WATCHED_FILES = ("package.json", "pyproject.toml", "requirements.txt")
WATCHED_SUFFIXES = (".csproj",)

DEFAULT_INTERVAL = 1.0

logger = get_logger("watcher")


def watch_candidates(names: Iterable[str]) -> List[str]:
    """Return the manifest names worth watching from a directory listing."""
    names = list(names)
    selected = [name for name in WATCHED_FILES if name in names]
    selected.extend(
        name for name in names if name.endswith(WATCHED_SUFFIXES) and name not in selected
    )
    return selected


class ChangeWatcher:
    """Polls a fixed set of manifest files and reports modifications.

    Each watched file owns a :class:`WatchRegistration` whose handle is the
    polling task. When a file's ``(mtime_ns, size)`` signature changes, the
    registration moves to DETECTING, ``on_change`` is awaited and the
    registration returns to ARMED whatever the outcome. Only files present
    when :meth:`arm` runs are watched unless ``watch_new_files`` is set.
    """

    def __init__(
        self,
        root: Path,
        file_service: FileService,
        on_change: Callable[[Path], Awaitable[None]],
        *,
        interval: float = DEFAULT_INTERVAL,
        watch_new_files: bool = False,
    ) -> None:
        self.root = root
        self.interval = interval
        self.watch_new_files = watch_new_files
        self._files = file_service
        self._on_change = on_change
        self._registrations: Dict[Path, WatchRegistration] = {}
        self._scanner: Optional[asyncio.Task[None]] = None
        self._disposed = False

    @property
    def registrations(self) -> List[WatchRegistration]:
        return list(self._registrations.values())

    @property
    def disposed(self) -> bool:
        return self._disposed

    async def arm(self) -> List[WatchRegistration]:
        """Register a watch for every candidate manifest that exists now."""
        if self._disposed:
            return []
        names = await self._files.list_dir(self.root)
        for name in watch_candidates(names):
            path = self.root / name
            if path in self._registrations:
                continue
            await self._register(path)

        if self.watch_new_files and self._scanner is None:
            self._scanner = asyncio.create_task(
                self._scan_for_new_files(), name="projectinfo-watch-scan"
            )
        logger.debug(
            "Watching %d manifest file(s) under %s", len(self._registrations), self.root
        )
        return self.registrations

    async def dispose(self) -> None:
        """Release every watch. No further change events are delivered."""
        self._disposed = True
        tasks: List[asyncio.Task[None]] = []
        for registration in self._registrations.values():
            if registration.handle is not None:
                tasks.append(registration.handle)
            registration.close()
        self._registrations.clear()
        if self._scanner is not None:
            self._scanner.cancel()
            tasks.append(self._scanner)
            self._scanner = None
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _register(self, path: Path) -> Optional[WatchRegistration]:
        signature = await self._files.stat_signature(path)
        if signature is None:
            return None
        registration = WatchRegistration(path=path, state=WatchState.ARMED)
        registration.handle = asyncio.create_task(
            self._poll(registration, signature), name=f"projectinfo-watch-{path.name}"
        )
        self._registrations[path] = registration
        return registration

    async def _poll(
        self, registration: WatchRegistration, signature: Optional[Tuple[int, int]]
    ) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                current = await self._files.stat_signature(registration.path)
            except OSError as exc:
                logger.debug("Could not stat %s: %s", registration.path, exc)
                continue
            if current == signature:
                continue
            signature = current
            logger.info(
                "Detected change in %s, re-running detection.", registration.path.name
            )
            await self._dispatch(registration)

    async def _dispatch(self, registration: WatchRegistration) -> None:
        registration.state = WatchState.DETECTING
        try:
            await self._on_change(registration.path)
        except Exception:
            logger.exception("Change handler failed for %s", registration.path)
        finally:
            if registration.handle is not None:
                registration.state = WatchState.ARMED

    async def _scan_for_new_files(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                names = await self._files.list_dir(self.root)
            except OSError as exc:
                logger.debug("Could not list %s: %s", self.root, exc)
                continue
            for name in watch_candidates(names):
                path = self.root / name
                if path in self._registrations or self._disposed:
                    continue
                registration = await self._register(path)
                if registration is None:
                    continue
                logger.info("Watching new manifest %s, re-running detection.", name)
                await self._dispatch(registration)


__all__ = ["ChangeWatcher", "WATCHED_FILES", "watch_candidates"]
