import threading

from app.exceptions import ProviderError, SendCancelledError
from app.logging.logger import Log
from app.processor.processor import TaskProcessor
from app.queue.models import Task
from app.queue.task_queue import TaskQueue


class JobRunner:
    """Run one leased task, catch exceptions, and apply retry logic."""

    def __init__(
        self,
        processor: TaskProcessor,
        queue: TaskQueue,
        cancel: threading.Event | None = None,
    ) -> None:
        self._processor = processor
        self._queue = queue
        self._cancel = cancel

    def run(self, task: Task) -> None:
        """Execute a single task with error handling."""
        Log.info(f"Running task {task.id} (attempt {task.retries} of {self._queue.max_retries})")
        try:
            self._processor.process(task, self._cancel)
            self._queue.complete(task)
            Log.info(f"Task {task.id} completed successfully")
        except SendCancelledError as exc:
            Log.warning(f"Task {task.id} cancelled: {exc}")
            self._settle(task, exc, cancelled=True)
        except Exception as exc:
            Log.error(f"Task {task.id} failed: {exc}")
            self._settle(task, exc)

    def _settle(self, task: Task, exc: Exception, cancelled: bool = False) -> None:
        """Dead-letter once the lease used the final retry, otherwise release."""
        try:
            if not cancelled and self._queue.is_last_attempt(task):
                self._queue.dead_letter(task, str(exc))
                Log.error(f"Task {task.id} permanently failed after {task.retries} attempts")
            else:
                self._queue.release(task, str(exc))
        except ProviderError as queue_exc:
            # Lease expiry makes the task eligible again.
            Log.error(f"Could not record failure of task {task.id}: {queue_exc}")
