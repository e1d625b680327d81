from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PhpcsMessage:
    """A single sniff violation reported by PHPCS."""

    message: str
    source: str
    severity: int = 5
    type: str = "ERROR"
    line: int = 0
    column: int = 0
    fixable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "source": self.source,
            "severity": self.severity,
            "type": self.type,
            "line": self.line,
            "column": self.column,
            "fixable": self.fixable,
        }


@dataclass(frozen=True)
class PhpcsFile:
    errors: int = 0
    warnings: int = 0
    messages: list[PhpcsMessage] = field(default_factory=list)


@dataclass(frozen=True)
class PhpcsTotals:
    errors: int = 0
    warnings: int = 0
    fixable: int = 0


@dataclass(frozen=True)
class PhpcsResults:
    """Full JSON report of one PHPCS run."""

    totals: PhpcsTotals
    files: dict[str, PhpcsFile] = field(default_factory=dict)
