"""Per-language line statistics from an external counter (cloc)."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence, runtime_checkable

from .logging import get_logger
from .models import LineStats

DEFAULT_COMMAND = ("cloc", "--json")

# Top-level cloc keys that are not languages.
_RESERVED_KEYS = {"header", "SUM"}

logger = get_logger("linecount")


@runtime_checkable
class LineCounter(Protocol):
    """Computes per-language line and file counts for a directory."""

    async def count(self, root: Path) -> Dict[str, LineStats]: ...


class LineCountError(RuntimeError):
    """Raised internally when the counter output cannot be used."""


class ClocLineCounter:
    """Runs ``cloc --json`` against the root and normalises its report."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        if not command:
            raise ValueError("Line counter command must not be empty")
        self.command = list(command)
        self.timeout = timeout

    async def count(self, root: Path) -> Dict[str, LineStats]:
        try:
            stdout = await self._run(root)
            return parse_cloc_report(stdout)
        except (OSError, LineCountError, asyncio.TimeoutError) as exc:
            logger.warning("Line counter failed for %s: %s", root, str(exc) or type(exc).__name__)
            return {}

    async def _run(self, root: Path) -> str:
        process = await asyncio.create_subprocess_exec(
            *self.command,
            str(root),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise
        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise LineCountError(
                f"{self.command[0]} exited with code {process.returncode}: {message}"
            )
        return stdout.decode("utf-8", errors="replace")


class NullLineCounter:
    """Line counter used when statistics are disabled."""

    async def count(self, root: Path) -> Dict[str, LineStats]:
        return {}


def parse_cloc_report(text: str) -> Dict[str, LineStats]:
    """Convert ``cloc --json`` output into a language -> LineStats map."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LineCountError(f"unparsable output: {exc}") from exc
    if not isinstance(data, dict):
        raise LineCountError("expected a JSON object")

    stats: Dict[str, LineStats] = {}
    for language, record in data.items():
        if language in _RESERVED_KEYS or not language:
            continue
        if not isinstance(record, dict):
            continue
        code = record.get("code")
        n_files = record.get("nFiles")
        if not _is_count(code) or not _is_count(n_files):
            continue
        stats[language] = LineStats(code=code, n_files=n_files)
    return stats


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


__all__ = [
    "ClocLineCounter",
    "LineCounter",
    "NullLineCounter",
    "parse_cloc_report",
]
