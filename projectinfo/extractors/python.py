"""Python extractor implementation."""

from __future__ import annotations

from typing import List, Mapping

from .base import Extractor
from .utils import lookup, parse_toml
from ..models import DirectoryListing, ManifestSignals

PYPROJECT = "pyproject.toml"
REQUIREMENTS = "requirements.txt"


class PythonExtractor(Extractor):
    """Detects Python from pyproject.toml (preferred) or requirements.txt."""

    name = "python"

    def supports(self, listing: DirectoryListing) -> bool:
        return listing.has(PYPROJECT) or listing.has(REQUIREMENTS)

    def inputs(self, listing: DirectoryListing) -> List[str]:
        # requirements.txt only proves presence; its contents are never needed.
        if listing.has(PYPROJECT):
            return [PYPROJECT]
        return []

    def extract(
        self, listing: DirectoryListing, contents: Mapping[str, str]
    ) -> ManifestSignals:
        signals = ManifestSignals(source=self.name, languages=["Python"])
        if not listing.has(PYPROJECT):
            return signals

        data = parse_toml(contents.get(PYPROJECT))
        version = lookup(data, ("tool", "poetry", "dependencies", "python"))
        if isinstance(version, str) and version:
            signals.details["python"] = version
        return signals
