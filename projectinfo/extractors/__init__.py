"""Manifest extractor implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import Extractor
from .dotnet import DotnetExtractor
from .node import NodeExtractor
from .python import PythonExtractor

_ENTRY_POINT_GROUP = "projectinfo.extractors"

# Registration order is merge order.
_BUILTIN_FACTORIES: dict[str, Callable[[], Extractor]] = {
    "node": NodeExtractor,
    "python": PythonExtractor,
    "dotnet": DotnetExtractor,
}


def discover_extractors(enabled: Sequence[str] | None = None) -> List[Extractor]:
    """Return instantiated extractors, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    extractors: List[Extractor] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Extractor]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Extractor):
            raise TypeError(f"Extractor factory for '{name}' did not return an Extractor instance")
        extractors.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - broken third-party plugin
            raise RuntimeError(f"Failed to load extractor entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Extractor:
            return _coerce_extractor(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown extractors requested: {missing}")

    return extractors


def _coerce_extractor(obj: object) -> Extractor:
    if isinstance(obj, Extractor):
        return obj
    if isinstance(obj, type) and issubclass(obj, Extractor):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Extractor):
            return instance
    raise TypeError("Extractor entry point must be an Extractor subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "discover_extractors",
    "DotnetExtractor",
    "Extractor",
    "NodeExtractor",
    "PythonExtractor",
]
