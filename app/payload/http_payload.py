import threading

import httpx

from app.exceptions import TransportError
from app.logging.logger import Log
from app.payload.base import BasePayloadSender, ensure_not_cancelled


class HttpPayload(BasePayloadSender):
    """POSTs payloads as JSON to an HTTP endpoint."""

    def __init__(
        self,
        *,
        api_token: str = "",
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            follow_redirects=True,
        )
        self._headers = headers

    def send_payload(
        self,
        destination: str,
        payload: bytes,
        cancel: threading.Event | None = None,
    ) -> bytes:
        ensure_not_cancelled(cancel, destination)
        try:
            response = self._client.post(destination, content=payload, headers=self._headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"Payload delivery to {destination} failed: {exc}") from exc
        if not response.is_success:
            raise TransportError(
                f"Payload delivery to {destination} failed: HTTP {response.status_code}"
            )
        Log.info(f"Delivered {len(payload)} byte payload", destination=destination)
        return response.content

    def close(self) -> None:
        self._client.close()
