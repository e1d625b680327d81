import json

import pytest

from app.audit.phpcs.report_parser import parse_phpcs_report
from app.exceptions import ContentValidationError


def _report(**overrides: object) -> bytes:
    report = {
        "totals": {"errors": 1, "warnings": 0, "fixable": 0},
        "files": {
            "/src/function.php": {
                "errors": 1,
                "warnings": 0,
                "messages": [
                    {
                        "message": "Function foo() is not present in PHP version 5.3 or earlier",
                        "source": "PHPCompatibility.FunctionUse.NewFunctions.fooFound",
                        "severity": 5,
                        "type": "ERROR",
                        "line": 3,
                        "column": 5,
                        "fixable": False,
                    }
                ],
            }
        },
    }
    report.update(overrides)
    return json.dumps(report).encode()


class TestParsePhpcsReport:
    def test_parses_totals_and_messages(self) -> None:
        results = parse_phpcs_report(_report())

        assert results.totals.errors == 1
        message = results.files["/src/function.php"].messages[0]
        assert message.source == "PHPCompatibility.FunctionUse.NewFunctions.fooFound"
        assert message.line == 3

    def test_empty_report_has_no_files(self) -> None:
        results = parse_phpcs_report(b'{"totals": {"errors": 0, "warnings": 0}, "files": {}}')

        assert results.files == {}

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"not json",
            b"[]",
            _report(totals=[]),
            _report(files={"/a.php": {"messages": "nope"}}),
            _report(files={"/a.php": {"messages": [{"message": "no source"}]}}),
            _report(totals={"errors": "1"}),
        ],
    )
    def test_invalid_reports_raise(self, raw: bytes) -> None:
        with pytest.raises(ContentValidationError):
            parse_phpcs_report(raw)
