import shutil
import threading
from pathlib import Path

from app.audit.factory import AuditRunnerFactory
from app.audit.models import ResultBag
from app.audit.phpcs.processor import CommandRunner
from app.config.settings import Settings
from app.logging.logger import Log
from app.payload.base import BasePayloadSender
from app.payload.builder import PayloadBuilder
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    BuildPayloadStep,
    FetchSourceStep,
    PrepareWorkspaceStep,
    RunAuditsStep,
    SendPayloadStep,
)
from app.queue.models import Task
from app.source.factory import SourceFactory
from app.storage.base import BaseStorageProvider


class TaskProcessor:
    """Runs the audit pipeline for one task.

    Pipeline: workspace -> fetch -> audits -> build payload -> send.
    Every task gets its own result bag and workspace; the workspace is
    removed whether the pipeline succeeded or not.
    """

    def __init__(self, steps: list[PipelineStep], file_store: BaseStorageProvider) -> None:
        self._steps = steps
        self._file_store = file_store

    def process(self, task: Task, cancel: threading.Event | None = None) -> PipelineContext:
        Log.info(f"Processing task '{task.title}'", task_id=task.id, retries=task.retries)
        context = PipelineContext(
            task=task,
            results=ResultBag(task.audits, file_store=self._file_store),
            cancel=cancel,
        )
        try:
            for step in self._steps:
                context = step.run(context)
        finally:
            self._cleanup(context)
        return context

    @staticmethod
    def _cleanup(context: PipelineContext) -> None:
        if context.workspace is None:
            return
        shutil.rmtree(context.workspace, ignore_errors=True)
        Log.debug(f"Removed workspace {context.workspace}", task_id=context.task.id)


def build_processor(
    settings: Settings,
    file_store: BaseStorageProvider,
    sender: BasePayloadSender,
    command_runner: CommandRunner | None = None,
) -> TaskProcessor:
    """Build a TaskProcessor with all required steps."""
    steps: list[PipelineStep] = [
        PrepareWorkspaceStep(Path(settings.workspace_root)),
        FetchSourceStep(SourceFactory(settings)),
        RunAuditsStep(AuditRunnerFactory(settings, runner=command_runner)),
        BuildPayloadStep(PayloadBuilder()),
        SendPayloadStep(sender, settings.payload_destination),
    ]
    return TaskProcessor(steps, file_store)
