"""JavaScript / TypeScript extractor implementation."""

from __future__ import annotations

from typing import List, Mapping

from .base import Extractor
from .utils import combined_node_dependencies, lookup, parse_package_json
from ..models import DirectoryListing, ManifestSignals

PACKAGE_JSON = "package.json"

# Dependency name -> framework label, checked in this order.
FRAMEWORKS = {
    "react": "React",
    "next": "Next.js",
    "@angular/core": "Angular",
    "vue": "Vue.js",
    "svelte": "Svelte",
    "@sveltejs/kit": "SvelteKit",
    "electron": "Electron",
    "express": "Express",
    "@nestjs/core": "NestJS",
}


class NodeExtractor(Extractor):
    """Detects JavaScript/TypeScript and front/back-end frameworks from package.json."""

    name = "node"

    def supports(self, listing: DirectoryListing) -> bool:
        return listing.has(PACKAGE_JSON)

    def inputs(self, listing: DirectoryListing) -> List[str]:
        return [PACKAGE_JSON]

    def extract(
        self, listing: DirectoryListing, contents: Mapping[str, str]
    ) -> ManifestSignals:
        signals = ManifestSignals(source=self.name, languages=["JavaScript"])
        package = parse_package_json(contents.get(PACKAGE_JSON))
        if not package:
            return signals

        node_version = lookup(package, ("engines", "node"))
        if isinstance(node_version, str) and node_version:
            signals.details["node"] = node_version

        deps = combined_node_dependencies(package)
        if "typescript" in deps:
            signals.languages.append("TypeScript")

        for dependency, framework in FRAMEWORKS.items():
            if dependency not in deps:
                continue
            signals.frameworks.append(framework)
            version = deps[dependency]
            if isinstance(version, str):
                signals.details[dependency] = version

        return signals
