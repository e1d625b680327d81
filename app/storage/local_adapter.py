import shutil
from pathlib import Path

from app.exceptions import TransportError
from app.storage.base import BaseStorageProvider


class LocalStorageProvider(BaseStorageProvider):
    """Stores artifacts as files under a root directory."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def upload_file(self, local_path: str, remote_key: str) -> None:
        target = self._resolve(remote_key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(local_path, target)
        except OSError as exc:
            raise TransportError(f"Local upload of '{remote_key}' failed: {exc}") from exc

    def kind(self) -> str:
        return "local"

    def collection_ref(self) -> str:
        return str(self._root)

    def _resolve(self, remote_key: str) -> Path:
        target = (self._root / remote_key.lstrip("/")).resolve()
        if not target.is_relative_to(self._root.resolve()):
            raise TransportError(f"Key '{remote_key}' escapes the storage root")
        return target
