"""PHPCompatibility post-processing.

Turns a raw PHPCS PHPCompatibility report into the set of PHP major versions
the package is compatible with, and uploads a detail report grouped by sniff:

    {"<sniff source>": {"breaks": ["5.2", ...], "files": {"<file>": {...message}}}}

Each failure is recorded once and processing stops; earlier error text on
the parent result is kept.
"""

import json
from typing import Any, BinaryIO

from app.audit.artifacts import report_path, upload_report
from app.audit.base import PostProcessor, Processor
from app.audit.models import AuditResult, ResultBag
from app.audit.phpcs.models import PhpcsResults
from app.audit.phpcs.report_parser import parse_phpcs_report
from app.audit.phpcs.versions import (
    breaks_versions,
    exclude_versions,
    merge_versions,
    php_major_versions,
)
from app.exceptions import ContentValidationError, StateError, TransportError
from app.queue.models import Task


class PhpCompat(PostProcessor):
    """Determines compatible PHP versions from a PHPCompatibility report."""

    KIND = "phpcs_phpcompatibility"

    def __init__(self) -> None:
        self._report: BinaryIO | None = None
        self._parent_kind: str | None = None

    @property
    def kind(self) -> str:
        return self.KIND

    def set_report(self, report: BinaryIO | None) -> None:
        self._report = report

    def parent(self, processor: Processor) -> None:
        self._parent_kind = processor.kind

    def process(self, task: Task, results: ResultBag) -> None:
        raw = self._report.read() if self._report is not None else b""

        audit_result = results.get(self._parent_kind) if self._parent_kind else None
        if audit_result is None:
            results.record_error(self.kind, "could not get results from parent process")
            return

        try:
            phpcs_results = parse_phpcs_report(raw)
        except ContentValidationError:
            self._fail(results, audit_result, "could not get phpcs results")
            return

        broken_versions, sources = self._group_by_source(phpcs_results)

        try:
            filename, path = report_path(results, self.kind, "detail")
        except StateError as exc:
            self._fail(results, audit_result, f"could not write PHPCompatibility details: {exc}")
            return

        try:
            path.write_bytes(json.dumps(sources, sort_keys=True).encode("utf-8"))
        except OSError:
            self._fail(results, audit_result, "could not write PHPCompatibility details to disk")
            return

        try:
            details = upload_report(results, filename, path)
        except (StateError, TransportError):
            self._fail(
                results, audit_result, "could not write PHPCompatibility details to file store"
            )
            return

        if audit_result.details.is_empty():
            audit_result.details = details

        audit_result.compatible_versions = exclude_versions(php_major_versions(), broken_versions)

    @staticmethod
    def _group_by_source(
        phpcs_results: PhpcsResults,
    ) -> tuple[list[str], dict[str, dict[str, Any]]]:
        broken_versions: list[str] = []
        sources: dict[str, dict[str, Any]] = {}
        for filename, data in phpcs_results.files.items():
            for message in data.messages:
                entry = sources.get(message.source)
                if entry is None:
                    broken = breaks_versions(message)
                    broken_versions = merge_versions(broken_versions, broken)
                    entry = {"breaks": broken, "files": {}}
                    sources[message.source] = entry
                entry["files"][filename] = message.to_dict()
        return broken_versions, sources

    def _fail(self, results: ResultBag, audit_result: AuditResult, message: str) -> None:
        results.record_error(self.kind, message)
        audit_result.append_error(message)
