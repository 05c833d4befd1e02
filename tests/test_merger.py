"""Tests for signal merging."""

from __future__ import annotations

from projectinfo.merger import merge_signals
from projectinfo.models import LineStats, ManifestSignals


def test_languages_and_frameworks_keep_first_position() -> None:
    result = merge_signals(
        [
            ManifestSignals(source="node", languages=["JavaScript", "TypeScript"], frameworks=["React"]),
            ManifestSignals(source="python", languages=["Python", "JavaScript"], frameworks=["React", ""]),
        ]
    )

    assert result.languages == ["JavaScript", "TypeScript", "Python"]
    assert result.frameworks == ["React"]


def test_details_last_writer_wins() -> None:
    result = merge_signals(
        [
            ManifestSignals(source="a", details={"react": "17.0.0", "node": ">=16"}),
            ManifestSignals(source="b", details={"react": "18.2.0"}),
        ]
    )

    assert result.details == {"react": "18.2.0", "node": ">=16"}


def test_line_counter_languages_are_folded_in_last() -> None:
    cloc = {
        "Python": LineStats(code=120, n_files=4),
        "YAML": LineStats(code=12, n_files=1),
    }

    result = merge_signals(
        [ManifestSignals(source="python", languages=["Python"])],
        cloc,
    )

    assert result.languages == ["Python", "YAML"]
    assert result.cloc == cloc
    assert set(result.cloc).issubset(result.languages)


def test_no_inputs_yields_empty_result() -> None:
    result = merge_signals([], {})

    assert result.languages == []
    assert result.frameworks == []
    assert result.details == {}
    assert result.cloc == {}


def test_cloc_only_directory() -> None:
    result = merge_signals([], {"Go": LineStats(code=50, n_files=2)})

    assert result.languages == ["Go"]
    assert result.frameworks == []
    assert result.details == {}
