"""Tests for the project details cache store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from projectinfo.files import LocalFileService
from projectinfo.models import LineStats, ProjectDetectionResult
from projectinfo.stores import ResultCache, cache_path
from projectinfo.stores.result_cache import dumps_result, loads_result, result_from_dict


def _sample() -> ProjectDetectionResult:
    return ProjectDetectionResult(
        languages=["JavaScript", "TypeScript", "Python"],
        frameworks=["React"],
        details={"react": "18.2.0", "python": "^3.11"},
        cloc={"Python": LineStats(code=120, n_files=4)},
    )


def test_dumps_uses_cloc_field_names() -> None:
    payload = json.loads(dumps_result(_sample()))

    assert payload == {
        "languages": ["JavaScript", "TypeScript", "Python"],
        "frameworks": ["React"],
        "details": {"react": "18.2.0", "python": "^3.11"},
        "cloc": {"Python": {"code": 120, "nFiles": 4}},
    }


def test_dumps_is_pretty_printed() -> None:
    text = dumps_result(ProjectDetectionResult.empty())

    assert text == '{\n  "languages": [],\n  "frameworks": [],\n  "details": {},\n  "cloc": {}\n}\n'


def test_loads_rejects_garbage() -> None:
    assert loads_result("not json") is None
    assert loads_result("[1, 2]") is None


def test_from_dict_drops_invalid_entries() -> None:
    result = result_from_dict(
        {
            "languages": ["Python", "", 3],
            "frameworks": "React",
            "details": {"python": "^3.11", "bad": 1},
            "cloc": {"Python": {"code": 1, "nFiles": 1}, "Go": {"code": "x"}},
        }
    )

    assert result == ProjectDetectionResult(
        languages=["Python"],
        frameworks=[],
        details={"python": "^3.11"},
        cloc={"Python": LineStats(code=1, n_files=1)},
    )


@pytest.mark.asyncio
async def test_persist_creates_vscode_folder_and_round_trips(tmp_path: Path) -> None:
    cache = ResultCache(LocalFileService())

    target = await cache.persist(tmp_path, _sample())

    assert target == cache_path(tmp_path) == tmp_path / ".vscode" / "projectdetails.json"
    assert await cache.load(tmp_path) == _sample()


@pytest.mark.asyncio
async def test_persist_overwrites_previous_contents(tmp_path: Path) -> None:
    cache = ResultCache(LocalFileService())
    await cache.persist(tmp_path, _sample())

    await cache.persist(tmp_path, ProjectDetectionResult.empty())

    assert await cache.load(tmp_path) == ProjectDetectionResult.empty()


@pytest.mark.asyncio
async def test_load_missing_cache_returns_none(tmp_path: Path) -> None:
    assert await ResultCache(LocalFileService()).load(tmp_path) is None
