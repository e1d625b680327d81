from abc import ABC, abstractmethod
from pathlib import Path


class BaseSource(ABC):
    """Contract for retrieving a package's source files."""

    @abstractmethod
    def prepare_files(self, destination: Path) -> None:
        """Materialize the source under ``destination`` and record its checksums.

        Raises:
            TransportError: if the source cannot be downloaded.
            ContentValidationError: if the downloaded content is malformed.
            FilesystemError: if files cannot be written locally.
        """

    @abstractmethod
    def get_checksum(self) -> str:
        """Combined checksum of the prepared files, empty before preparation."""

    @abstractmethod
    def get_files(self) -> list[str]:
        """Paths of the prepared files, empty before preparation."""
