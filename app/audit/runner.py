from app.audit.base import PostProcessor, Processor, can_run_audit
from app.audit.models import ResultBag
from app.logging.logger import Log
from app.queue.models import Task


class AuditRunner:
    """Runs the processor chain for one task.

    Processors run sequentially in registration order. Post-processors run
    right after their parent, receiving its raw report. A post-processor
    whose parent was not requested still runs, so the missing parent result
    is reported rather than ignored.
    """

    def __init__(
        self,
        processors: list[Processor],
        post_processors: dict[str, list[PostProcessor]] | None = None,
    ) -> None:
        self._processors = processors
        self._post_processors = post_processors or {}

    def run(self, task: Task, results: ResultBag) -> None:
        for processor in self._processors:
            parent_ran = False
            if can_run_audit(processor, results):
                self._run_isolated(processor, task, results)
                parent_ran = True
            for post_processor in self._post_processors.get(processor.kind, []):
                if not can_run_audit(post_processor, results):
                    continue
                post_processor.set_report(processor.report() if parent_ran else None)
                post_processor.parent(processor)
                self._run_isolated(post_processor, task, results)

    @staticmethod
    def _run_isolated(processor: Processor, task: Task, results: ResultBag) -> None:
        Log.info(f"Running {processor.kind}", task_id=task.id)
        try:
            processor.process(task, results)
        except Exception as exc:
            Log.exception(f"Processor {processor.kind} crashed", task_id=task.id)
            results.record_error(processor.kind, f"{processor.kind} failed: {exc}")
            return
        error = results.error(processor.kind)
        if error:
            Log.warning(f"Processor {processor.kind} reported errors: {error}", task_id=task.id)
