from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class Task:
    """A unit of audit work referencing a source archive."""

    title: str = ""
    source_url: str = ""
    source_type: str = "zip"
    audits: list[str] = field(default_factory=list)
    content: str = ""
    version: str = ""
    visibility: str = ""
    project_type: str = ""
    checksum: str = ""
    response_endpoint: str = ""
    id: str | None = None
    retries: int = 0

    def to_payload(self) -> dict[str, Any]:
        """Return the embedded task payload stored in the queue document."""
        payload = asdict(self)
        payload.pop("id")
        payload.pop("retries")
        return payload

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Task":
        """Build a Task from a queue document (``task`` payload plus envelope)."""
        payload = dict(document.get("task") or {})
        known = {name for name in cls.__dataclass_fields__ if name not in ("id", "retries")}
        kwargs = {key: value for key, value in payload.items() if key in known}
        kwargs["audits"] = list(kwargs.get("audits") or [])
        return cls(
            **kwargs,
            id=document.get("_id"),
            retries=int(document.get("retries", 0)),
        )
