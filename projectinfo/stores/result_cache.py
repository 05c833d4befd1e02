"""Persistent cache of the detection result at .vscode/projectdetails.json."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from ..files import FileService
from ..models import LineStats, ProjectDetectionResult

CACHE_DIRNAME = ".vscode"
CACHE_FILENAME = "projectdetails.json"


def cache_dir(root: Path) -> Path:
    return root / CACHE_DIRNAME


def cache_path(root: Path) -> Path:
    return cache_dir(root) / CACHE_FILENAME


class ResultCache:
    """Reads and overwrites the cached result through a file service.

    Errors from the file service propagate; callers decide how to report them.
    """

    def __init__(self, file_service: FileService) -> None:
        self._files = file_service

    async def persist(self, root: Path, result: ProjectDetectionResult) -> Path:
        directory = cache_dir(root)
        if not await self._files.exists(directory):
            await self._files.create_folder(directory)
        target = cache_path(root)
        await self._files.write_file(target, dumps_result(result).encode("utf-8"))
        return target

    async def load(self, root: Path) -> Optional[ProjectDetectionResult]:
        target = cache_path(root)
        if not await self._files.exists(target):
            return None
        raw = await self._files.read_file(target)
        return loads_result(raw.decode("utf-8", errors="replace"))


def dumps_result(result: ProjectDetectionResult) -> str:
    return json.dumps(result_to_dict(result), indent=2) + "\n"


def loads_result(text: str) -> Optional[ProjectDetectionResult]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return None
    return result_from_dict(payload)


def result_to_dict(result: ProjectDetectionResult) -> Dict[str, object]:
    return {
        "languages": list(result.languages),
        "frameworks": list(result.frameworks),
        "details": dict(result.details),
        "cloc": {
            language: {"code": stats.code, "nFiles": stats.n_files}
            for language, stats in result.cloc.items()
        },
    }


def result_from_dict(payload: object) -> Optional[ProjectDetectionResult]:
    if not isinstance(payload, dict):
        return None
    cloc: Dict[str, LineStats] = {}
    raw_cloc = payload.get("cloc")
    if isinstance(raw_cloc, dict):
        for language, record in raw_cloc.items():
            if not isinstance(record, dict):
                continue
            code = record.get("code")
            n_files = record.get("nFiles")
            if isinstance(code, int) and isinstance(n_files, int):
                cloc[language] = LineStats(code=code, n_files=n_files)
    details = payload.get("details")
    return ProjectDetectionResult(
        languages=_str_list(payload.get("languages")),
        frameworks=_str_list(payload.get("frameworks")),
        details=(
            {key: value for key, value in details.items() if isinstance(value, str)}
            if isinstance(details, dict)
            else {}
        ),
        cloc=cloc,
    )


def _str_list(value: object) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


__all__ = [
    "CACHE_DIRNAME",
    "CACHE_FILENAME",
    "ResultCache",
    "cache_path",
    "dumps_result",
    "loads_result",
    "result_from_dict",
    "result_to_dict",
]
