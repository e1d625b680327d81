import threading
from abc import ABC, abstractmethod

from app.exceptions import SendCancelledError


class BasePayloadSender(ABC):
    """Contract for delivering a built payload to its consumer."""

    @abstractmethod
    def send_payload(
        self,
        destination: str,
        payload: bytes,
        cancel: threading.Event | None = None,
    ) -> bytes:
        """Deliver ``payload`` to ``destination`` and return the consumer's reply.

        ``cancel`` is checked before delivery starts; bytes already being
        written are not interrupted.

        Raises:
            TransportError: if delivery fails.
            SendCancelledError: if ``cancel`` was set before delivery started.
        """

    def close(self) -> None:
        """Release transport resources."""


def ensure_not_cancelled(cancel: threading.Event | None, destination: str) -> None:
    if cancel is not None and cancel.is_set():
        raise SendCancelledError(f"Send to {destination} cancelled")
