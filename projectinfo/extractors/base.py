"""Base classes for manifest extractor plugins."""

from abc import ABC, abstractmethod
from typing import List, Mapping

from ..models import DirectoryListing, ManifestSignals


class Extractor(ABC):
    """Contract for extractors that derive signals from manifest files."""

    name: str = ""

    @abstractmethod
    def supports(self, listing: DirectoryListing) -> bool:
        """Return True when this extractor's ecosystem is present."""

    @abstractmethod
    def inputs(self, listing: DirectoryListing) -> List[str]:
        """Return the file names whose contents ``extract`` needs."""

    @abstractmethod
    def extract(
        self, listing: DirectoryListing, contents: Mapping[str, str]
    ) -> ManifestSignals:
        """Produce languages, frameworks and details for the ecosystem.

        ``contents`` maps each requested file name to its text. Names that
        could not be read are absent and must be treated as malformed.
        """
