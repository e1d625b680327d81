from app.audit.phpcs.models import PhpcsMessage
from app.audit.phpcs.versions import (
    breaks_versions,
    exclude_versions,
    merge_versions,
    php_major_versions,
)


def _message(text: str) -> PhpcsMessage:
    return PhpcsMessage(message=text, source="PHPCompatibility.Test.Sniff")


class TestBreaksVersions:
    def test_or_earlier(self) -> None:
        message = _message("Function array_column() is not present in PHP version 5.4 or earlier")

        assert breaks_versions(message) == ["5.2", "5.3", "5.4"]

    def test_prior_to(self) -> None:
        message = _message("Nullable types are not available prior to PHP 7.1")

        assert breaks_versions(message) == ["5.2", "5.3", "5.4", "5.5", "5.6", "7.0"]

    def test_removed_since(self) -> None:
        message = _message(
            "Extension 'mysql_' is deprecated since PHP 5.5 and removed since PHP 7.0"
        )

        assert breaks_versions(message) == ["7.0", "7.1", "7.2", "7.3", "7.4", "8.0", "8.1", "8.2", "8.3", "8.4"]

    def test_reserved_keyword(self) -> None:
        message = _message("'object' is a reserved keyword as of PHP version 7.2")

        assert breaks_versions(message)[0] == "7.2"
        assert "7.1" not in breaks_versions(message)

    def test_deprecation_breaks_nothing(self) -> None:
        message = _message("Function create_function() is deprecated since PHP 7.2")

        assert breaks_versions(message) == []


class TestVersionSets:
    def test_merge_is_sorted_union(self) -> None:
        assert merge_versions(["7.0", "5.3"], ["5.3", "5.2"]) == ["5.2", "5.3", "7.0"]

    def test_exclude_keeps_version_order(self) -> None:
        result = exclude_versions(php_major_versions(), php_major_versions()[:-2])

        assert result == ["8.3", "8.4"]

    def test_sorts_numerically(self) -> None:
        assert merge_versions(["8.10"], ["8.9"]) == ["8.9", "8.10"]
