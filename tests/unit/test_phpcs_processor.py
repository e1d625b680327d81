import json
import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

from app.audit.models import ResultBag
from app.audit.phpcs.processor import CommandRunner, PhpcsProcessor
from app.queue.models import Task

REPORT = json.dumps(
    {
        "totals": {"errors": 3, "warnings": 1, "fixable": 0},
        "files": {
            "/src/a.php": {"errors": 2, "warnings": 1, "messages": []},
            "/src/b.php": {"errors": 1, "warnings": 0, "messages": []},
        },
    }
).encode()


def _make_runner(returncode: int = 1, stdout: bytes = REPORT, stderr: bytes = b"") -> MagicMock:
    runner = MagicMock(spec=CommandRunner)
    runner.run.return_value = subprocess.CompletedProcess(
        args=["phpcs"], returncode=returncode, stdout=stdout, stderr=stderr
    )
    return runner


def _make_bag(tmp_path: Path, **kwargs: Any) -> ResultBag:
    store = MagicMock()
    store.kind.return_value = "local"
    store.collection_ref.return_value = "reports"
    defaults: dict[str, Any] = {
        "temp_folder": str(tmp_path),
        "source_folder": str(tmp_path / "source"),
        "checksum": "abc",
        "file_store": store,
    }
    defaults.update(kwargs)
    return ResultBag(["phpcs_wordpress"], **defaults)


class TestPhpcsProcessor:
    def test_kind_derives_from_standard(self) -> None:
        assert PhpcsProcessor("WordPress").kind == "phpcs_wordpress"

    def test_stores_raw_reference_and_summary(self, tmp_path: Path) -> None:
        results = _make_bag(tmp_path)
        processor = PhpcsProcessor("WordPress", runner=_make_runner())

        processor.process(Task(), results)

        result = results.get("phpcs_wordpress")
        assert result is not None
        assert result.raw.key == "abc-phpcs_wordpress-raw.json"
        assert result.summary.to_dict() == {
            "files_count": 2,
            "errors_count": 3,
            "warnings_count": 1,
        }
        assert (tmp_path / "abc-phpcs_wordpress-raw.json").read_bytes() == REPORT
        assert processor.report().read() == REPORT

    def test_builds_command(self, tmp_path: Path) -> None:
        runner = _make_runner()
        processor = PhpcsProcessor("PHPCompatibility", phpcs_bin="/usr/bin/phpcs", runner=runner)

        processor.process(Task(), _make_bag(tmp_path))

        args = runner.run.call_args.args[0]
        assert args[0] == "/usr/bin/phpcs"
        assert "--standard=PHPCompatibility" in args
        assert args[-4:-1] == ["--runtime-set", "testVersion", "5.2-"]
        assert args[-1] == str(tmp_path / "source")

    def test_failed_exit_code_records_error(self, tmp_path: Path) -> None:
        results = _make_bag(tmp_path)
        processor = PhpcsProcessor("WordPress", runner=_make_runner(returncode=3, stderr=b"bad"))

        processor.process(Task(), results)

        assert results.get("phpcs_wordpress") is None
        assert results.error("phpcs_wordpress") == "phpcs exited with code 3: bad"
        assert processor.report() is None

    def test_missing_binary_records_error(self, tmp_path: Path) -> None:
        runner = MagicMock(spec=CommandRunner)
        runner.run.side_effect = FileNotFoundError("phpcs")
        results = _make_bag(tmp_path)

        PhpcsProcessor("WordPress", runner=runner).process(Task(), results)

        assert results.error("phpcs_wordpress").startswith("could not run phpcs")

    def test_invalid_report_records_error(self, tmp_path: Path) -> None:
        results = _make_bag(tmp_path)

        PhpcsProcessor("WordPress", runner=_make_runner(stdout=b"oops")).process(Task(), results)

        assert results.error("phpcs_wordpress").startswith("could not parse phpcs report")

    def test_missing_source_folder_records_error(self, tmp_path: Path) -> None:
        runner = _make_runner()
        results = _make_bag(tmp_path, source_folder=None)

        PhpcsProcessor("WordPress", runner=runner).process(Task(), results)

        runner.run.assert_not_called()
        assert results.error("phpcs_wordpress") == "no source folder to run phpcs against"
