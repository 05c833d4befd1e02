"""Tests for the manifest change watcher."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Awaitable, Callable, List

import pytest

from projectinfo.config import ProjectInfoConfig
from projectinfo.files import LocalFileService
from projectinfo.models import WatchState
from projectinfo.orchestrator import Orchestrator
from projectinfo.watcher import ChangeWatcher, watch_candidates
from tests._fixtures.line_counters import StaticLineCounter
from tests._fixtures.repo_builder import RepoBuilder

INTERVAL = 0.01


def _modify(path: Path, text: str) -> None:
    """Rewrite ``path`` and push its mtime forward so the change is always visible."""
    previous = path.stat().st_mtime_ns if path.exists() else 0
    path.write_text(text, encoding="utf-8")
    bumped = max(previous, path.stat().st_mtime_ns) + 1_000_000_000
    os.utime(path, ns=(bumped, bumped))


async def _eventually(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def _wait() -> None:
        while not predicate():
            await asyncio.sleep(INTERVAL)

    await asyncio.wait_for(_wait(), timeout=timeout)


class _Recorder:
    def __init__(self) -> None:
        self.paths: List[Path] = []

    async def __call__(self, path: Path) -> None:
        self.paths.append(path)


def _watcher(root: Path, on_change: Callable[[Path], Awaitable[None]], **kwargs) -> ChangeWatcher:
    return ChangeWatcher(root, LocalFileService(), on_change, interval=INTERVAL, **kwargs)


def test_watch_candidates_include_project_files() -> None:
    names = ["README.md", "Web.csproj", "package.json", "requirements.txt", "Api.csproj"]

    assert watch_candidates(names) == [
        "package.json",
        "requirements.txt",
        "Web.csproj",
        "Api.csproj",
    ]


@pytest.mark.asyncio
async def test_arm_registers_only_existing_manifests(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": "{}", "Api.csproj": "<Project/>", "notes.txt": "x"})
    watcher = _watcher(repo_builder.path(), _Recorder())

    try:
        registrations = await watcher.arm()
        names = sorted(registration.path.name for registration in registrations)
        assert names == ["Api.csproj", "package.json"]
        assert all(registration.state is WatchState.ARMED for registration in registrations)
    finally:
        await watcher.dispose()


@pytest.mark.asyncio
async def test_modification_triggers_one_change(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"requirements.txt": "flask\n"})
    recorder = _Recorder()
    watcher = _watcher(repo_builder.path(), recorder)
    await watcher.arm()

    try:
        _modify(repo_builder.path() / "requirements.txt", "flask\ndjango\n")
        await _eventually(lambda: len(recorder.paths) == 1)
        await asyncio.sleep(INTERVAL * 10)
        assert recorder.paths == [repo_builder.path() / "requirements.txt"]
    finally:
        await watcher.dispose()


@pytest.mark.asyncio
async def test_registration_is_detecting_during_callback_and_rearms_after_failure(
    repo_builder: RepoBuilder,
) -> None:
    repo_builder.write({"package.json": "{}"})
    states: List[WatchState] = []
    watcher: ChangeWatcher

    async def on_change(path: Path) -> None:
        states.append(watcher.registrations[0].state)
        raise RuntimeError("detection failed")

    watcher = _watcher(repo_builder.path(), on_change)
    await watcher.arm()

    try:
        _modify(repo_builder.path() / "package.json", '{"name": "a"}')
        await _eventually(lambda: len(states) == 1)
        await _eventually(lambda: watcher.registrations[0].state is WatchState.ARMED)

        _modify(repo_builder.path() / "package.json", '{"name": "b"}')
        await _eventually(lambda: len(states) == 2)
        assert states == [WatchState.DETECTING, WatchState.DETECTING]
    finally:
        await watcher.dispose()


@pytest.mark.asyncio
async def test_files_created_later_are_not_watched_by_default(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"requirements.txt": "flask\n"})
    recorder = _Recorder()
    watcher = _watcher(repo_builder.path(), recorder)
    await watcher.arm()

    try:
        _modify(repo_builder.path() / "package.json", "{}")
        await asyncio.sleep(INTERVAL * 10)
        assert recorder.paths == []
        assert [reg.path.name for reg in watcher.registrations] == ["requirements.txt"]
    finally:
        await watcher.dispose()


@pytest.mark.asyncio
async def test_watch_new_files_arms_late_manifests(repo_builder: RepoBuilder) -> None:
    recorder = _Recorder()
    watcher = _watcher(repo_builder.path(), recorder, watch_new_files=True)
    await watcher.arm()
    assert watcher.registrations == []

    try:
        _modify(repo_builder.path() / "pyproject.toml", "[project]\nname = 'x'\n")
        await _eventually(lambda: len(recorder.paths) == 1)
        assert [reg.path.name for reg in watcher.registrations] == ["pyproject.toml"]
    finally:
        await watcher.dispose()


@pytest.mark.asyncio
async def test_dispose_stops_delivery(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": "{}"})
    recorder = _Recorder()
    watcher = _watcher(repo_builder.path(), recorder)
    await watcher.arm()

    await watcher.dispose()
    _modify(repo_builder.path() / "package.json", '{"name": "late"}')
    await asyncio.sleep(INTERVAL * 10)

    assert recorder.paths == []
    assert watcher.disposed
    assert await watcher.arm() == []


class _CountingFileService(LocalFileService):
    def __init__(self) -> None:
        self.writes: List[Path] = []

    async def write_file(self, path: Path, data: bytes) -> None:
        self.writes.append(path)
        await super().write_file(path, data)


@pytest.mark.asyncio
async def test_modified_manifest_rewrites_cache_once(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"package.json": '{"dependencies": {"express": "4.19.0"}}'})
    root = repo_builder.path()
    files = _CountingFileService()
    orchestrator = Orchestrator(
        root,
        config=ProjectInfoConfig(root=root),
        file_service=files,
        line_counter=StaticLineCounter({}),
        poll_interval=INTERVAL,
    )

    async with orchestrator:
        assert len(files.writes) == 1
        _modify(
            root / "package.json",
            '{"dependencies": {"express": "4.19.0", "react": "18.2.0"}}',
        )
        await _eventually(lambda: len(files.writes) == 2)
        await asyncio.sleep(INTERVAL * 10)

        assert len(files.writes) == 2
        cached = await orchestrator.read(root)
        assert cached is not None
        assert cached.frameworks == ["React", "Express"]
        assert cached.details == {"react": "18.2.0", "express": "4.19.0"}
