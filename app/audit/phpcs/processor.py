import io
import subprocess
from typing import BinaryIO

from app.audit.artifacts import report_path, upload_report
from app.audit.base import Processor
from app.audit.models import AuditResult, AuditSummary, ResultBag
from app.audit.phpcs.report_parser import parse_phpcs_report
from app.audit.phpcs.versions import php_major_versions
from app.exceptions import ContentValidationError, StateError, TransportError
from app.logging.logger import Log
from app.queue.models import Task


class CommandRunner:
    """Runs external commands. Injected so tests can fake the phpcs binary."""

    def run(self, args: list[str]) -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(args, capture_output=True, check=False)


class PhpcsProcessor(Processor):
    """Runs PHPCS with one coding standard over the extracted package.

    The raw JSON report is uploaded to the file store and kept in memory so
    post-processors can read it through ``report()``.
    """

    # phpcs exits 1/2 when it found violations; only other codes are failures.
    SUCCESS_EXIT_CODES = frozenset({0, 1, 2})

    def __init__(
        self,
        standard: str,
        *,
        phpcs_bin: str = "phpcs",
        extensions: str = "php",
        runner: CommandRunner | None = None,
    ) -> None:
        self._standard = standard
        self._phpcs_bin = phpcs_bin
        self._extensions = extensions
        self._runner = runner or CommandRunner()
        self._last_report: bytes | None = None

    @property
    def kind(self) -> str:
        return f"phpcs_{self._standard.lower()}"

    def report(self) -> BinaryIO | None:
        if self._last_report is None:
            return None
        return io.BytesIO(self._last_report)

    def process(self, task: Task, results: ResultBag) -> None:
        self._last_report = None
        if not results.source_folder:
            results.record_error(self.kind, "no source folder to run phpcs against")
            return

        try:
            filename, path = report_path(results, self.kind, "raw")
        except StateError as exc:
            results.record_error(self.kind, str(exc))
            return

        try:
            completed = self._runner.run(self._command(results.source_folder))
        except OSError as exc:
            results.record_error(self.kind, f"could not run phpcs: {exc}")
            return
        if completed.returncode not in self.SUCCESS_EXIT_CODES:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            results.record_error(
                self.kind, f"phpcs exited with code {completed.returncode}: {stderr}"
            )
            return

        try:
            phpcs_results = parse_phpcs_report(completed.stdout)
        except ContentValidationError as exc:
            results.record_error(self.kind, f"could not parse phpcs report: {exc}")
            return

        try:
            path.write_bytes(completed.stdout)
            raw_details = upload_report(results, filename, path)
        except (OSError, StateError, TransportError) as exc:
            results.record_error(self.kind, f"could not store phpcs report: {exc}")
            return

        self._last_report = completed.stdout
        results.set(
            self.kind,
            AuditResult(
                raw=raw_details,
                summary=AuditSummary(
                    files_count=len(phpcs_results.files),
                    errors_count=phpcs_results.totals.errors,
                    warnings_count=phpcs_results.totals.warnings,
                ),
            ),
        )
        Log.info(
            f"{self.kind} found {phpcs_results.totals.errors} errors, "
            f"{phpcs_results.totals.warnings} warnings",
            task_id=task.id,
        )

    def _command(self, source_folder: str) -> list[str]:
        args = [
            self._phpcs_bin,
            "-q",
            "--report=json",
            f"--standard={self._standard}",
            f"--extensions={self._extensions}",
        ]
        if self._standard.lower() == "phpcompatibility":
            args += ["--runtime-set", "testVersion", f"{php_major_versions()[0]}-"]
        args.append(source_folder)
        return args
