from pathlib import Path

from app.config.settings import Settings
from app.payload.base import BasePayloadSender
from app.payload.file_payload import FilePayload
from app.payload.http_payload import HttpPayload


class PayloadSenderFactory:
    """Creates the configured payload transport."""

    TRANSPORTS = ("file", "http")

    @classmethod
    def create(cls, settings: Settings) -> BasePayloadSender:
        transport = settings.payload_transport.lower()
        if transport == "file":
            return FilePayload(root=cls._payload_root(settings.payload_destination))
        if transport == "http":
            return HttpPayload(
                api_token=settings.payload_api_token,
                timeout_seconds=settings.payload_timeout_seconds,
            )
        raise ValueError(
            f"Unknown payload transport '{transport}'. Choose from: {list(cls.TRANSPORTS)}"
        )

    @staticmethod
    def _payload_root(destination: str) -> Path | None:
        """Directory of the destination template, unless it is itself templated."""
        parent = Path(destination).parent
        if "{" in str(parent):
            return None
        return parent
