"""Core data models shared across projectinfo components."""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass
class LineStats:
    """Per-language totals reported by the line counter."""

    code: int
    n_files: int


@dataclass
class ProjectDetectionResult:
    """Canonical characterization of a workspace root."""

    languages: List[str] = field(default_factory=list)
    frameworks: List[str] = field(default_factory=list)
    details: Dict[str, str] = field(default_factory=dict)
    cloc: Dict[str, LineStats] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "ProjectDetectionResult":
        return cls()


@dataclass
class ManifestSignals:
    """Partial signal set produced by a single extractor."""

    source: str
    languages: List[str] = field(default_factory=list)
    frameworks: List[str] = field(default_factory=list)
    details: Dict[str, str] = field(default_factory=dict)


@dataclass
class DirectoryListing:
    """Top-level entries of a workspace root, in listing order."""

    root: Path
    names: List[str]

    def has(self, name: str) -> bool:
        return name in self.names

    def first_matching(self, suffix: str) -> Optional[str]:
        for name in self.names:
            if name.endswith(suffix):
                return name
        return None


class WatchState(enum.Enum):
    """Lifecycle of a single watched manifest file."""

    UNARMED = "unarmed"
    ARMED = "armed"
    DETECTING = "detecting"


@dataclass
class WatchRegistration:
    """A live watch on one manifest file path."""

    path: Path
    handle: Optional["asyncio.Task[None]"] = None
    state: WatchState = WatchState.UNARMED

    def close(self) -> None:
        if self.handle is not None and not self.handle.done():
            self.handle.cancel()
        self.handle = None
        self.state = WatchState.UNARMED
