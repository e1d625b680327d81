"""PHP version arithmetic for PHPCompatibility results.

A sniff message such as "Function foo() is not present in PHP version 5.3 or
earlier" breaks every known major version up to and including 5.3. Version
lists are treated as sets and always returned in ascending version order.
"""

import re
from collections.abc import Callable, Iterable

from app.audit.phpcs.models import PhpcsMessage

PHP_MAJOR_VERSIONS = (
    "5.2",
    "5.3",
    "5.4",
    "5.5",
    "5.6",
    "7.0",
    "7.1",
    "7.2",
    "7.3",
    "7.4",
    "8.0",
    "8.1",
    "8.2",
    "8.3",
    "8.4",
)

_VERSION = r"(?:versions? )?(\d+\.\d+)"

_RULES: list[tuple[re.Pattern[str], Callable[[tuple[int, ...], tuple[int, ...]], bool]]] = [
    # "not present in PHP version 5.3 or earlier", "PHP 5.6 and lower"
    (
        re.compile(rf"PHP {_VERSION} (?:or|and) (?:earlier|lower|below)", re.IGNORECASE),
        lambda candidate, bound: candidate <= bound,
    ),
    # "not available prior to PHP 7.1", "before PHP 7.1", "lower than PHP 7.1"
    (
        re.compile(
            rf"(?:prior to|before|below|lower than|less than) PHP {_VERSION}",
            re.IGNORECASE,
        ),
        lambda candidate, bound: candidate < bound,
    ),
    # "deprecated since PHP 5.3 and removed since PHP 5.4"
    (
        re.compile(rf"removed (?:since|in|as of) PHP {_VERSION}", re.IGNORECASE),
        lambda candidate, bound: candidate >= bound,
    ),
    # "is a reserved keyword as of PHP version 7.0", "not allowed since PHP 7.1"
    (
        re.compile(
            rf"(?:not allowed|invalid|reserved(?: keyword)?|no longer supported)"
            rf"(?: \w+)*? (?:since|as of|in) PHP {_VERSION}",
            re.IGNORECASE,
        ),
        lambda candidate, bound: candidate >= bound,
    ),
]


def php_major_versions() -> list[str]:
    """All PHP major versions compatibility is reported against."""
    return list(PHP_MAJOR_VERSIONS)


def breaks_versions(message: PhpcsMessage) -> list[str]:
    """Major versions a PHPCompatibility violation breaks.

    Messages that only deprecate a feature break nothing.
    """
    broken: set[str] = set()
    for pattern, breaks in _RULES:
        for match in pattern.finditer(message.message):
            bound = _version_key(match.group(1))
            broken.update(
                version for version in PHP_MAJOR_VERSIONS if breaks(_version_key(version), bound)
            )
    return _sorted(broken)


def merge_versions(versions: Iterable[str], other: Iterable[str]) -> list[str]:
    """Union of two version lists."""
    return _sorted(set(versions) | set(other))


def exclude_versions(versions: Iterable[str], excluded: Iterable[str]) -> list[str]:
    """Versions not present in ``excluded``."""
    return _sorted(set(versions) - set(excluded))


def _sorted(versions: set[str]) -> list[str]:
    return sorted(versions, key=_version_key)


def _version_key(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))
