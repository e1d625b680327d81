from abc import ABC, abstractmethod


class BaseStorageProvider(ABC):
    """Contract for blob storage used to hold audit report artifacts.

    Providers are long-lived and shared by all workers; implementations must be
    safe to call from several threads at once.
    """

    @abstractmethod
    def upload_file(self, local_path: str, remote_key: str) -> None:
        """Upload a local file under ``remote_key``.

        Uploading the same key twice overwrites the earlier object.

        Raises:
            TransportError: if the upload fails.
        """

    @abstractmethod
    def kind(self) -> str:
        """Short storage-kind tag recorded in artifact references, e.g. ``s3``."""

    @abstractmethod
    def collection_ref(self) -> str:
        """Bucket or collection the artifacts are stored in."""
