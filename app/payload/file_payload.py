import threading
from pathlib import Path

from app.exceptions import TransportError
from app.logging.logger import Log
from app.payload.base import BasePayloadSender, ensure_not_cancelled


class FilePayload(BasePayloadSender):
    """Writes payloads to local files. Used offline and in tests.

    Only ``root`` is created, once, at construction; a destination whose
    directory does not exist fails instead of growing new directory trees.
    """

    def __init__(self, root: Path | None = None) -> None:
        if root is not None:
            try:
                root.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise TransportError(f"Could not create payload root {root}: {exc}") from exc

    def send_payload(
        self,
        destination: str,
        payload: bytes,
        cancel: threading.Event | None = None,
    ) -> bytes:
        ensure_not_cancelled(cancel, destination)
        try:
            with Path(destination).open("wb") as fh:
                fh.write(payload)
        except OSError as exc:
            raise TransportError(f"Could not write payload to {destination}: {exc}") from exc
        Log.info(f"Wrote {len(payload)} byte payload", destination=destination)
        return b"ok"
