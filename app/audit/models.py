"""Audit results and the per-task result bag shared by processors."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.storage.base import BaseStorageProvider


@dataclass
class AuditDetails:
    """Reference to a stored report artifact. Empty fields are omitted."""

    type: str = ""
    key: str = ""
    bucket_name: str = ""
    filename: str = ""
    path: str = ""

    def is_empty(self) -> bool:
        return not (self.type or self.key or self.bucket_name or self.filename or self.path)

    def to_dict(self) -> dict[str, str]:
        fields = {
            "type": self.type,
            "key": self.key,
            "bucket_name": self.bucket_name,
            "filename": self.filename,
            "path": self.path,
        }
        return {name: value for name, value in fields.items() if value}


@dataclass
class AuditSummary:
    """Headline counts for one audit. Unset counts are omitted."""

    files_count: int | None = None
    errors_count: int | None = None
    warnings_count: int | None = None

    def to_dict(self) -> dict[str, int]:
        fields = {
            "files_count": self.files_count,
            "errors_count": self.errors_count,
            "warnings_count": self.warnings_count,
        }
        return {name: value for name, value in fields.items() if value is not None}


@dataclass
class AuditResult:
    """Per-kind audit record accumulated while a task is processed."""

    raw: AuditDetails = field(default_factory=AuditDetails)
    parsed: AuditDetails = field(default_factory=AuditDetails)
    summary: AuditSummary = field(default_factory=AuditSummary)
    details: AuditDetails = field(default_factory=AuditDetails)
    compatible_versions: list[str] = field(default_factory=list)
    error: str = ""

    def append_error(self, message: str) -> None:
        """Append to the error text; earlier content is never replaced."""
        self.error = f"{self.error}\n{message}" if self.error else message


@dataclass(frozen=True)
class InfoDetail:
    key: str
    value: str


@dataclass(frozen=True)
class ClocResult:
    """Line counts for one language as reported by cloc."""

    blank: int = 0
    comment: int = 0
    code: int = 0
    n_files: int = 0


@dataclass
class CodeInfo:
    """Code-structure summary of a package."""

    type: str = ""
    details: list[InfoDetail] = field(default_factory=list)
    cloc: dict[str, ClocResult] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "details": [{"key": d.key, "value": d.value} for d in self.details],
            "cloc": {
                language: {
                    "blank": result.blank,
                    "comment": result.comment,
                    "code": result.code,
                    "nFiles": result.n_files,
                }
                for language, result in sorted(self.cloc.items())
            },
        }


class ResultBag:
    """Mutable results of one task run.

    Holds the well-known context every processor may need (requested audits,
    temp folder, package checksum, file store) plus one ``AuditResult`` per
    processor kind and per-kind processor error entries. A bag belongs to a
    single task and is mutated by one processor at a time.
    """

    def __init__(
        self,
        audits: list[str] | None = None,
        *,
        temp_folder: str | None = None,
        source_folder: str | None = None,
        checksum: str | None = None,
        file_store: "BaseStorageProvider | None" = None,
        code_info: CodeInfo | None = None,
    ) -> None:
        self.audits: list[str] = list(audits or [])
        self.temp_folder = temp_folder
        self.source_folder = source_folder
        self.checksum = checksum
        self.file_store = file_store
        self.code_info = code_info
        self._results: dict[str, AuditResult] = {}
        self._errors: dict[str, str] = {}

    def get(self, kind: str) -> AuditResult | None:
        return self._results.get(kind)

    def set(self, kind: str, result: AuditResult) -> None:
        self._results[kind] = result

    def kinds(self) -> list[str]:
        """Processor kinds with a stored result, sorted."""
        return sorted(self._results)

    def results(self) -> dict[str, AuditResult]:
        return dict(self._results)

    def record_error(self, kind: str, message: str) -> None:
        """Record a processor error under ``kind``, appending to any earlier one."""
        previous = self._errors.get(kind)
        self._errors[kind] = f"{previous}\n{message}" if previous else message

    def error(self, kind: str) -> str | None:
        return self._errors.get(kind)

    def errors(self) -> dict[str, str]:
        return dict(self._errors)
