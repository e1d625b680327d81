import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor

from app.config.settings import Settings
from app.logging.logger import Log
from app.queue.models import Task
from app.queue.task_queue import TaskQueue
from app.worker.job_runner import JobRunner


class Worker:
    """Poll loop: sleep -> lease -> dispatch to the thread pool."""

    def __init__(
        self,
        queue: TaskQueue,
        job_runner: JobRunner,
        settings: Settings,
        cancel: threading.Event | None = None,
    ) -> None:
        self._queue = queue
        self._job_runner = job_runner
        self._settings = settings
        self._cancel = cancel or threading.Event()

    def run(self, max_tasks: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_tasks is set, stop after processing that many tasks (for testing).
        """
        Log.info(
            "Worker started, polling for tasks",
            collection=self._settings.task_collection,
            threads=self._settings.worker_threads,
        )
        pool = ThreadPoolExecutor(
            max_workers=max(1, self._settings.worker_threads),
            thread_name_prefix="task",
        )
        tasks_done = 0
        try:
            while max_tasks is None or tasks_done < max_tasks:
                tasks = self._try_poll(self._poll_limit(max_tasks, tasks_done))
                if not tasks:
                    Log.debug("No tasks available, sleeping")
                    time.sleep(self._settings.task_poll_interval_seconds)
                    continue
                futures = [pool.submit(self._job_runner.run, task) for task in tasks]
                for future in futures:
                    self._wait(future)
                tasks_done += len(tasks)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")
            self._cancel.set()
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    def _poll_limit(self, max_tasks: int | None, tasks_done: int) -> int:
        limit = max(1, self._settings.task_poll_limit)
        if max_tasks is not None:
            limit = min(limit, max_tasks - tasks_done)
        return limit

    def _try_poll(self, limit: int) -> list[Task]:
        """Lease the next batch of tasks. Gracefully handle queue errors."""
        try:
            return self._queue.poll(limit)
        except Exception as exc:
            Log.warning(f"Queue error, will retry: {exc}")
            return []

    @staticmethod
    def _wait(future: Future[None]) -> None:
        try:
            future.result()
        except Exception as exc:
            Log.error(f"Task runner crashed: {exc}")
