"""C# / .NET extractor implementation."""

from __future__ import annotations

from typing import List, Mapping, Optional

from .base import Extractor
from .utils import parse_xml, qualified
from ..models import DirectoryListing, ManifestSignals

CSPROJ_SUFFIX = ".csproj"


class DotnetExtractor(Extractor):
    """Detects C# and the target framework from the first project file."""

    name = "dotnet"

    def supports(self, listing: DirectoryListing) -> bool:
        return listing.first_matching(CSPROJ_SUFFIX) is not None

    def inputs(self, listing: DirectoryListing) -> List[str]:
        project = listing.first_matching(CSPROJ_SUFFIX)
        return [project] if project else []

    def extract(
        self, listing: DirectoryListing, contents: Mapping[str, str]
    ) -> ManifestSignals:
        signals = ManifestSignals(
            source=self.name, languages=["C#"], frameworks=[".NET"]
        )
        project = listing.first_matching(CSPROJ_SUFFIX)
        if project is None:
            return signals

        target = _target_framework(contents.get(project))
        if target:
            signals.details["dotnet"] = target
        return signals


def _target_framework(text: Optional[str]) -> Optional[str]:
    root = parse_xml(text)
    if root is None:
        return None
    group = root.find(qualified(root, "PropertyGroup"))
    if group is None:
        return None
    element = group.find(qualified(root, "TargetFramework"))
    if element is None or not element.text:
        return None
    return element.text.strip() or None
