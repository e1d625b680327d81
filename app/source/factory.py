from app.config.settings import Settings
from app.queue.models import Task
from app.source.base import BaseSource
from app.source.zip_source import ZipSource


class SourceFactory:
    """Creates the source handler for a task's ``source_type``."""

    SOURCES: dict[str, type[ZipSource]] = {
        "zip": ZipSource,
    }

    def __init__(self, settings: Settings) -> None:
        self._timeout_seconds = settings.download_timeout_seconds

    def create(self, task: Task) -> BaseSource:
        source_type = (task.source_type or "zip").lower()
        source_cls = self.SOURCES.get(source_type)
        if source_cls is None:
            raise ValueError(
                f"Unknown source type '{source_type}'. Choose from: {list(self.SOURCES)}"
            )
        return source_cls(task.source_url, timeout_seconds=self._timeout_seconds)
