from unittest.mock import MagicMock

import pytest

from app.audit.factory import AuditRunnerFactory
from app.audit.phpcs.phpcompat import PhpCompat
from app.audit.phpcs.processor import PhpcsProcessor
from app.queue.models import Task
from app.source.factory import SourceFactory
from app.source.zip_source import ZipSource


class TestSourceFactory:
    def test_creates_zip_source(self) -> None:
        factory = SourceFactory(MagicMock(download_timeout_seconds=10))

        source = factory.create(Task(source_url="https://example.com/p.zip", source_type="zip"))

        assert isinstance(source, ZipSource)
        assert source.url == "https://example.com/p.zip"

    def test_empty_source_type_defaults_to_zip(self) -> None:
        factory = SourceFactory(MagicMock(download_timeout_seconds=10))

        assert isinstance(factory.create(Task(source_type="")), ZipSource)

    def test_unknown_source_type_raises(self) -> None:
        factory = SourceFactory(MagicMock(download_timeout_seconds=10))

        with pytest.raises(ValueError, match="Unknown source type"):
            factory.create(Task(source_type="git"))


class TestAuditRunnerFactory:
    def _settings(self, standards: list[str]) -> MagicMock:
        settings = MagicMock(phpcs_bin="phpcs")
        settings.phpcs_standard_list.return_value = standards
        return settings

    def test_registers_phpcompat_under_its_parent(self) -> None:
        runner = AuditRunnerFactory(self._settings(["PHPCompatibility", "WordPress"])).create()

        kinds = [processor.kind for processor in runner._processors]
        assert kinds == ["phpcs_phpcompatibility", "phpcs_wordpress"]
        post = runner._post_processors["phpcs_phpcompatibility"]
        assert len(post) == 1
        assert isinstance(post[0], PhpCompat)

    def test_creates_fresh_instances(self) -> None:
        factory = AuditRunnerFactory(self._settings(["PHPCompatibility"]))

        first = factory.create()
        second = factory.create()

        assert first._processors[0] is not second._processors[0]
        assert isinstance(first._processors[0], PhpcsProcessor)
