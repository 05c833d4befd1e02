"""Detection orchestration: detect, persist and keep the cache fresh."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .config import ConfigError, ProjectInfoConfig, load_config
from .extractors import Extractor, discover_extractors
from .files import FileService, LocalFileService
from .linecount import ClocLineCounter, LineCounter, NullLineCounter
from .logging import get_logger
from .merger import merge_signals
from .models import DirectoryListing, LineStats, ManifestSignals, ProjectDetectionResult
from .refresh import RefreshQueue
from .stores import ResultCache
from .watcher import ChangeWatcher


class Orchestrator:
    """Owns the detect -> write -> watch cycle for one workspace root.

    Construction has no side effects; call :meth:`start` once to run the
    startup detection and arm the watcher, and :meth:`dispose` to release
    the watches. Public operations never raise: failures are logged and
    degrade to the best result available.
    """

    def __init__(
        self,
        root: Path | str | None = None,
        *,
        file_service: FileService | None = None,
        extractors: Optional[Iterable[Extractor]] = None,
        line_counter: LineCounter | None = None,
        config: ProjectInfoConfig | None = None,
        poll_interval: float | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve() if root is not None else None
        self.files = file_service or LocalFileService()
        self.logger = get_logger("orchestrator")
        self.config = config if config is not None else self._load_config(self.root)
        self.extractors = (
            list(extractors)
            if extractors is not None
            else discover_extractors(self.config.extractors.enabled)
        )
        self.line_counter = line_counter or self._default_line_counter(self.config)
        self.poll_interval = (
            poll_interval if poll_interval is not None else self.config.watch.interval
        )
        self.cache = ResultCache(self.files)
        self.watcher: ChangeWatcher | None = None
        self._queues: Dict[Path, RefreshQueue] = {}
        self._started = False
        self._disposed = False

    async def __aenter__(self) -> "Orchestrator":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()

    # ------------------------------------------------------------------
    # Public operations

    async def detect(self, directory: Path | str) -> ProjectDetectionResult:
        """Run every extractor and the line counter, returning the merged result."""
        folder = Path(directory)
        try:
            return await self._detect(folder)
        except Exception as exc:
            self.logger.error("Failed to detect project in %s: %s", folder, exc)
            return ProjectDetectionResult.empty()

    async def write(self, directory: Path | str, result: ProjectDetectionResult) -> None:
        """Overwrite the cache file with ``result``; failures are only logged."""
        folder = Path(directory)
        try:
            target = await self.cache.persist(folder, result)
        except Exception as exc:
            self.logger.error("Failed to write project details for %s: %s", folder, exc)
            return
        self.logger.info("Updated %s", target)

    async def read(self, directory: Path | str) -> ProjectDetectionResult | None:
        """Return the cached result, or None when it is missing or unreadable."""
        folder = Path(directory)
        try:
            return await self.cache.load(folder)
        except Exception as exc:
            self.logger.error("Failed to read project details for %s: %s", folder, exc)
            return None

    async def detect_and_write(self, directory: Path | str | None = None) -> None:
        """Run one serialised detect+write cycle for ``directory`` (default: root)."""
        folder = Path(directory).resolve() if directory is not None else self.root
        if folder is None:
            return
        await self._queue_for(folder).request()

    async def detect_and_write_on_startup(self) -> None:
        """Detect and persist for the workspace root, then arm the watcher."""
        if self.root is None:
            return
        await self.detect_and_write(self.root)
        if self._disposed:
            return
        await self._watch(self.root)

    async def start(self) -> None:
        """Single entry point; repeated calls are no-ops."""
        if self._started or self._disposed:
            return
        self._started = True
        await self.detect_and_write_on_startup()

    async def dispose(self) -> None:
        """Release every watch; runs already in flight are allowed to finish."""
        if self._disposed:
            return
        self._disposed = True
        for queue in self._queues.values():
            queue.close()
        if self.watcher is not None:
            await self.watcher.dispose()

    # ------------------------------------------------------------------
    # Internal helpers

    async def _detect(self, folder: Path) -> ProjectDetectionResult:
        names = await self.files.list_dir(folder)
        listing = DirectoryListing(root=folder, names=names)
        active = [extractor for extractor in self.extractors if self._supports(extractor, listing)]
        self.logger.debug(
            "Running %d extractor(s) for %s: %s",
            len(active),
            folder,
            ", ".join(extractor.name for extractor in active) or "none",
        )

        outputs_task = asyncio.gather(
            *(self._run_extractor(extractor, listing) for extractor in active)
        )
        outputs, cloc = await asyncio.gather(outputs_task, self._count_lines(folder))
        return merge_signals([output for output in outputs if output is not None], cloc)

    def _supports(self, extractor: Extractor, listing: DirectoryListing) -> bool:
        try:
            return extractor.supports(listing)
        except Exception as exc:
            self.logger.warning("Extractor %s failed: %s", extractor.name, exc)
            return False

    async def _run_extractor(
        self, extractor: Extractor, listing: DirectoryListing
    ) -> ManifestSignals | None:
        try:
            names = extractor.inputs(listing)
            contents = await self._read_inputs(listing.root, names)
            return extractor.extract(listing, contents)
        except Exception as exc:
            self.logger.warning("Extractor %s failed: %s", extractor.name, exc)
            return None

    async def _read_inputs(self, folder: Path, names: Sequence[str]) -> Mapping[str, str]:
        texts = await asyncio.gather(*(self._read_text(folder / name) for name in names))
        return {name: text for name, text in zip(names, texts) if text is not None}

    async def _read_text(self, path: Path) -> str | None:
        try:
            raw = await self.files.read_file(path)
        except OSError as exc:
            self.logger.warning("Could not read %s: %s", path, exc)
            return None
        return raw.decode("utf-8", errors="replace")

    async def _count_lines(self, folder: Path) -> Dict[str, LineStats]:
        try:
            return await self.line_counter.count(folder)
        except Exception as exc:
            self.logger.warning("Line counter failed for %s: %s", folder, exc)
            return {}

    async def _detect_and_write_now(self, folder: Path) -> None:
        result = await self.detect(folder)
        await self.write(folder, result)

    def _queue_for(self, folder: Path) -> RefreshQueue:
        queue = self._queues.get(folder)
        if queue is None:
            queue = RefreshQueue(
                lambda: self._detect_and_write_now(folder), name=f"detect-{folder.name}"
            )
            if self._disposed:
                queue.close()
            self._queues[folder] = queue
        return queue

    async def _watch(self, folder: Path) -> None:
        if self.watcher is not None:
            return

        async def _on_change(path: Path) -> None:
            await self.detect_and_write(folder)

        watcher = ChangeWatcher(
            folder,
            self.files,
            _on_change,
            interval=self.poll_interval,
            watch_new_files=self.config.watch.watch_new_files,
        )
        self.watcher = watcher
        try:
            registrations = await watcher.arm()
        except Exception as exc:
            self.logger.error("Failed to watch manifests in %s: %s", folder, exc)
            return
        names: List[str] = [registration.path.name for registration in registrations]
        self.logger.debug("Watching %s", ", ".join(names) or "no manifest files")

    def _load_config(self, root: Path | None) -> ProjectInfoConfig:
        if root is None:
            return ProjectInfoConfig(root=Path.cwd())
        try:
            return load_config(root)
        except (ConfigError, OSError) as exc:
            self.logger.warning("Ignoring unreadable configuration in %s: %s", root, exc)
            return ProjectInfoConfig(root=root)

    @staticmethod
    def _default_line_counter(config: ProjectInfoConfig) -> LineCounter:
        if not config.line_counter.enabled:
            return NullLineCounter()
        return ClocLineCounter(
            config.line_counter.command, timeout=config.line_counter.timeout
        )


__all__ = ["Orchestrator"]
