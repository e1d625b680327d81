import tempfile
from pathlib import Path

from app.audit.factory import AuditRunnerFactory
from app.audit.models import CodeInfo
from app.exceptions import FilesystemError, StateError
from app.logging.logger import Log
from app.payload.base import BasePayloadSender
from app.payload.builder import PayloadBuilder
from app.processor.pipeline import PipelineContext, PipelineStep
from app.source.factory import SourceFactory

SOURCE_DIR = "source"


class PrepareWorkspaceStep(PipelineStep):
    def __init__(self, workspace_root: Path) -> None:
        self._workspace_root = workspace_root

    def run(self, context: PipelineContext) -> PipelineContext:
        prefix = f"task-{context.task.id}-" if context.task.id else "task-"
        try:
            self._workspace_root.mkdir(parents=True, exist_ok=True)
            workspace = Path(tempfile.mkdtemp(prefix=prefix, dir=self._workspace_root))
        except OSError as exc:
            raise FilesystemError(f"Could not create workspace: {exc}") from exc
        context.workspace = workspace
        context.results.temp_folder = str(workspace)
        Log.debug(f"Workspace {workspace} ready", task_id=context.task.id)
        return context


class FetchSourceStep(PipelineStep):
    def __init__(self, source_factory: SourceFactory) -> None:
        self._source_factory = source_factory

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.workspace is None:
            raise StateError("PipelineContext.workspace must be set before fetching sources")
        source = self._source_factory.create(context.task)
        source_dir = context.workspace / SOURCE_DIR
        source.prepare_files(source_dir)

        checksum = source.get_checksum()
        if context.task.checksum and context.task.checksum != checksum:
            Log.warning(
                "Package checksum differs from the submitted one",
                task_id=context.task.id,
                submitted=context.task.checksum,
                computed=checksum,
            )
        context.source = source
        context.results.source_folder = str(source_dir)
        context.results.checksum = checksum
        return context


class RunAuditsStep(PipelineStep):
    def __init__(self, audit_factory: AuditRunnerFactory) -> None:
        self._audit_factory = audit_factory

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.results.code_info is None:
            context.results.code_info = CodeInfo(type=context.task.project_type)
        self._audit_factory.create().run(context.task, context.results)
        Log.info(
            f"Audits finished with {len(context.results.kinds())} results",
            task_id=context.task.id,
            errors=len(context.results.errors()),
        )
        return context


class BuildPayloadStep(PipelineStep):
    def __init__(self, builder: PayloadBuilder) -> None:
        self._builder = builder

    def run(self, context: PipelineContext) -> PipelineContext:
        context.payload = self._builder.build(context.task, context.results)
        return context


class SendPayloadStep(PipelineStep):
    """Deliver the payload to the task's endpoint, or the configured default."""

    def __init__(self, sender: BasePayloadSender, default_destination: str) -> None:
        self._sender = sender
        self._default_destination = default_destination

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.payload:
            raise StateError("PipelineContext.payload must be built before sending")
        checksum = context.results.checksum or context.task.checksum
        destination = context.task.response_endpoint or self._default_destination.format(
            checksum=checksum
        )
        context.destination = destination
        context.response = self._sender.send_payload(destination, context.payload, context.cancel)
        return context
