"""Combine extractor outputs and line statistics into one canonical result."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from .models import LineStats, ManifestSignals, ProjectDetectionResult


def merge_signals(
    outputs: Iterable[ManifestSignals],
    cloc: Mapping[str, LineStats] | None = None,
) -> ProjectDetectionResult:
    """Merge partial signal sets in order, applying line statistics last.

    Languages and frameworks keep the position of their first occurrence and
    drop repeats. Details are last-writer-wins per key. Every language the
    line counter reports is folded into ``languages`` after the manifests.
    """
    languages: List[str] = []
    frameworks: List[str] = []
    details: Dict[str, str] = {}

    for output in outputs:
        _extend_unique(languages, output.languages)
        _extend_unique(frameworks, output.frameworks)
        details.update(output.details)

    stats = dict(cloc or {})
    _extend_unique(languages, stats.keys())

    return ProjectDetectionResult(
        languages=languages,
        frameworks=frameworks,
        details=details,
        cloc=stats,
    )


def _extend_unique(target: List[str], values: Iterable[str]) -> None:
    for value in values:
        if value and value not in target:
            target.append(value)


__all__ = ["merge_signals"]
