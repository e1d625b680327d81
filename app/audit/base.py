from abc import ABC, abstractmethod
from typing import BinaryIO

from app.audit.models import ResultBag
from app.queue.models import Task


class Processor(ABC):
    """A pluggable analysis step writing into the task's result bag.

    ``process`` must not raise for recoverable failures; it records an error
    entry in the bag instead.
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """Stable identifier, matched against the task's requested audits."""

    @abstractmethod
    def process(self, task: Task, results: ResultBag) -> None:
        """Run the analysis and store its outcome in ``results``."""

    def report(self) -> BinaryIO | None:
        """Raw report of the last run, for post-processors. None if there is none."""
        return None


class PostProcessor(Processor):
    """A processor that consumes its parent processor's raw report."""

    @abstractmethod
    def set_report(self, report: BinaryIO | None) -> None:
        """Receive the parent's raw report stream."""

    @abstractmethod
    def parent(self, processor: Processor) -> None:
        """Receive the parent processor; only its ``kind`` is read."""


def can_run_audit(processor: Processor, results: ResultBag) -> bool:
    """True if the processor's kind is among the requested audits."""
    return processor.kind in results.audits
