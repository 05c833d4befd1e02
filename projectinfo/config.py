"""Configuration loading for projectinfo (.projectinfo.yml)."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .linecount import DEFAULT_COMMAND
from .watcher import DEFAULT_INTERVAL

CONFIG_FILENAME = ".projectinfo.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ExtractorConfig:
    """Extractor enablement; None means every discovered extractor."""

    enabled: Optional[List[str]] = None


@dataclass
class LineCounterConfig:
    """External line counter invocation."""

    enabled: bool = True
    command: List[str] = field(default_factory=lambda: list(DEFAULT_COMMAND))
    timeout: Optional[float] = None


@dataclass
class WatchConfig:
    """Manifest watch behaviour."""

    interval: float = DEFAULT_INTERVAL
    watch_new_files: bool = False


@dataclass
class ProjectInfoConfig:
    """Represents the settings defined in .projectinfo.yml."""

    root: Path
    extractors: ExtractorConfig = field(default_factory=ExtractorConfig)
    line_counter: LineCounterConfig = field(default_factory=LineCounterConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)


def load_config(config_path: Path) -> ProjectInfoConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProjectInfoConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    extractors = ExtractorConfig()
    extractor_data = _as_dict(data.get("extractors"))
    if "enabled" in extractor_data:
        extractors.enabled = _as_str_list(extractor_data.get("enabled"))

    line_counter = LineCounterConfig()
    counter_data = _as_dict(data.get("line_counter"))
    if counter_data:
        enabled = _as_bool(counter_data.get("enabled"))
        if enabled is not None:
            line_counter.enabled = enabled
        command = _as_command(counter_data.get("command"))
        if command:
            line_counter.command = command
        timeout = _as_float(counter_data.get("timeout"))
        if timeout is not None and timeout > 0:
            line_counter.timeout = timeout

    watch = WatchConfig()
    watch_data = _as_dict(data.get("watch"))
    if watch_data:
        interval = _as_float(watch_data.get("interval"))
        if interval is not None and interval > 0:
            watch.interval = interval
        watch.watch_new_files = _as_bool(watch_data.get("watch_new_files")) or False

    return ProjectInfoConfig(
        root=root,
        extractors=extractors,
        line_counter=line_counter,
        watch=watch,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    # A path that does not exist yet names a workspace root, not a file inside one.
    if config_path.is_dir() or (
        not config_path.exists() and config_path.name != CONFIG_FILENAME
    ):
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_command(value: Any) -> List[str]:
    if isinstance(value, str):
        return shlex.split(value)
    return _as_str_list(value)


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
