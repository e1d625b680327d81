"""Builds PhpcsResults from a PHPCS ``--report=json`` document."""

import json
from typing import Any

from app.audit.phpcs.models import PhpcsFile, PhpcsMessage, PhpcsResults, PhpcsTotals
from app.exceptions import ContentValidationError


def parse_phpcs_report(raw: bytes) -> PhpcsResults:
    """Parse and validate a raw PHPCS JSON report.

    Raises:
        ContentValidationError: if the report is not valid PHPCS JSON.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ContentValidationError(f"Invalid PHPCS JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ContentValidationError("PHPCS report must be an object")
    return PhpcsResults(
        totals=_build_totals(data.get("totals", {})),
        files=_build_files(data.get("files", {})),
    )


def _build_totals(raw: Any) -> PhpcsTotals:
    if not isinstance(raw, dict):
        raise ContentValidationError("'totals' must be an object")
    return PhpcsTotals(
        errors=_int(raw, "errors", "totals"),
        warnings=_int(raw, "warnings", "totals"),
        fixable=_int(raw, "fixable", "totals"),
    )


def _build_files(raw: Any) -> dict[str, PhpcsFile]:
    if not isinstance(raw, dict):
        raise ContentValidationError("'files' must be an object")
    files: dict[str, PhpcsFile] = {}
    for filename, item in raw.items():
        if not isinstance(item, dict):
            raise ContentValidationError(f"files['{filename}'] must be an object")
        messages = item.get("messages", [])
        if not isinstance(messages, list):
            raise ContentValidationError(f"files['{filename}'].messages must be a list")
        files[filename] = PhpcsFile(
            errors=_int(item, "errors", filename),
            warnings=_int(item, "warnings", filename),
            messages=[_build_message(m, filename) for m in messages],
        )
    return files


def _build_message(raw: Any, filename: str) -> PhpcsMessage:
    if not isinstance(raw, dict):
        raise ContentValidationError(f"Message in '{filename}' must be an object")
    source = raw.get("source")
    if not source or not isinstance(source, str):
        raise ContentValidationError(f"Message in '{filename}' has no source")
    message = raw.get("message", "")
    if not isinstance(message, str):
        raise ContentValidationError(f"Message text in '{filename}' must be a string")
    return PhpcsMessage(
        message=message,
        source=source,
        severity=_int(raw, "severity", filename, default=5),
        type=str(raw.get("type", "ERROR")),
        line=_int(raw, "line", filename),
        column=_int(raw, "column", filename),
        fixable=bool(raw.get("fixable", False)),
    )


def _int(raw: dict[str, Any], key: str, where: str, default: int = 0) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ContentValidationError(f"'{key}' in '{where}' must be an integer")
    return value
