import threading
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from app.exceptions import SendCancelledError, TransportError
from app.payload.factory import PayloadSenderFactory
from app.payload.file_payload import FilePayload
from app.payload.http_payload import HttpPayload

PAYLOAD = b'{"title":"","checksum":"abcdefg"}'


class TestFilePayload:
    def test_writes_file(self, tmp_path: Path) -> None:
        destination = tmp_path / "temp.txt"

        response = FilePayload().send_payload(str(destination), PAYLOAD)

        assert response == b"ok"
        assert destination.read_bytes() == PAYLOAD

    def test_missing_directory_raises_and_creates_nothing(self, tmp_path: Path) -> None:
        destination = tmp_path / "nested" / "deeper" / "temp.txt"

        with pytest.raises(TransportError):
            FilePayload().send_payload(str(destination), PAYLOAD)

        assert list(tmp_path.iterdir()) == []

    def test_root_is_created_once(self, tmp_path: Path) -> None:
        root = tmp_path / "payloads"

        sender = FilePayload(root=root)
        sender.send_payload(str(root / "abcdefg.json"), PAYLOAD)

        assert (root / "abcdefg.json").read_bytes() == PAYLOAD

    def test_uncreatable_root_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_bytes(b"")

        with pytest.raises(TransportError):
            FilePayload(root=blocker / "payloads")

    def test_directory_destination_raises(self, tmp_path: Path) -> None:
        with pytest.raises(TransportError) as exc_info:
            FilePayload().send_payload(str(tmp_path), b"Nothing will write")

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_unset_cancel_event_writes(self, tmp_path: Path) -> None:
        destination = tmp_path / "temp.txt"

        response = FilePayload().send_payload(str(destination), PAYLOAD, threading.Event())

        assert response == b"ok"

    def test_cancelled_send_writes_nothing(self, tmp_path: Path) -> None:
        cancel = threading.Event()
        cancel.set()
        destination = tmp_path / "temp.txt"

        with pytest.raises(SendCancelledError):
            FilePayload().send_payload(str(destination), PAYLOAD, cancel)

        assert not destination.exists()


class TestHttpPayload:
    def _sender(self, handler, api_token: str = "") -> HttpPayload:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return HttpPayload(api_token=api_token, client=client)

    def test_posts_payload_with_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b'{"status":"ok"}')

        response = self._sender(handler, api_token="secret").send_payload(
            "https://api.example.com/audits", PAYLOAD
        )

        assert response == b'{"status":"ok"}'
        assert seen[0].method == "POST"
        assert seen[0].content == PAYLOAD
        assert seen[0].headers["Authorization"] == "Bearer secret"
        assert seen[0].headers["Content-Type"] == "application/json"

    def test_omits_authorization_without_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        self._sender(handler).send_payload("https://api.example.com/audits", PAYLOAD)

        assert "Authorization" not in seen[0].headers

    def test_error_status_raises(self) -> None:
        sender = self._sender(lambda request: httpx.Response(502))

        with pytest.raises(TransportError, match="502"):
            sender.send_payload("https://api.example.com/audits", PAYLOAD)

    def test_transport_failure_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(TransportError):
            self._sender(handler).send_payload("https://api.example.com/audits", PAYLOAD)

    def test_cancelled_send_makes_no_request(self) -> None:
        handler = MagicMock(return_value=httpx.Response(200))
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SendCancelledError):
            self._sender(handler).send_payload("https://api.example.com/audits", PAYLOAD, cancel)

        handler.assert_not_called()


class TestPayloadSenderFactory:
    def test_creates_file_sender_and_its_root(self, tmp_path: Path) -> None:
        settings = MagicMock(
            payload_transport="file",
            payload_destination=str(tmp_path / "payloads" / "{checksum}.json"),
        )

        assert isinstance(PayloadSenderFactory.create(settings), FilePayload)
        assert (tmp_path / "payloads").is_dir()

    def test_templated_directory_is_not_created(self, tmp_path: Path) -> None:
        settings = MagicMock(
            payload_transport="file",
            payload_destination=str(tmp_path / "{checksum}" / "payload.json"),
        )

        PayloadSenderFactory.create(settings)

        assert list(tmp_path.iterdir()) == []

    def test_creates_http_sender(self) -> None:
        settings = MagicMock(
            payload_transport="HTTP", payload_api_token="t", payload_timeout_seconds=5
        )

        sender = PayloadSenderFactory.create(settings)

        assert isinstance(sender, HttpPayload)
        sender.close()

    def test_unknown_transport_raises(self) -> None:
        settings = MagicMock(payload_transport="pigeon")

        with pytest.raises(ValueError, match="Unknown payload transport"):
            PayloadSenderFactory.create(settings)
