import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from app.audit.models import ResultBag
from app.queue.models import Task
from app.source.base import BaseSource


@dataclass(slots=True)
class PipelineContext:
    task: Task
    results: ResultBag
    workspace: Path | None = None
    source: BaseSource | None = None
    payload: bytes = b""
    destination: str = ""
    response: bytes = b""
    cancel: threading.Event | None = None


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
