"""Shared parsing helpers for extractor implementations."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from typing import Any, Dict, Mapping, Optional, Sequence

# JSON / TOML helpers


def parse_package_json(text: Optional[str]) -> Dict[str, Any]:
    """Return the parsed package.json contents or an empty dict."""
    if text is None:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return {}
    if isinstance(data, dict):
        return data
    return {}


def combined_node_dependencies(package: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge runtime and development dependencies; dev entries win on clashes."""
    combined: Dict[str, Any] = {}
    for key in ("dependencies", "devDependencies"):
        deps = package.get(key)
        if isinstance(deps, dict):
            combined.update(deps)
    return combined


def parse_toml(text: Optional[str]) -> Optional[Dict[str, Any]]:
    if text is None:
        return None
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return None


def lookup(data: Any, path: Sequence[str]) -> Any:
    """Walk nested mappings, returning None as soon as a level is missing."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


# XML helpers


def parse_xml(text: Optional[str]) -> Optional[ET.Element]:
    if text is None:
        return None
    try:
        return ET.fromstring(text)
    except ET.ParseError:
        return None


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


def qualified(element: ET.Element, tag: str) -> str:
    """Return ``tag`` qualified with the namespace used by ``element``."""
    namespace = _detect_xml_namespace(element)
    return f"{{{namespace}}}{tag}" if namespace else tag
