import time
from collections.abc import Callable
from typing import Any

from app.exceptions import StateError
from app.logging.logger import Log
from app.queue.client_base import BaseDocumentClient, Condition, Order
from app.queue.models import Task

STATUS_PENDING = "pending"
STATUS_FAILED = "failed"


class TaskQueue:
    """Lease/retry queue of audit tasks over a document collection.

    Each poll increments ``retries`` and stamps ``lease_until`` on every
    matched document in the same round trip. Tasks whose retry count reached
    ``max_retries`` stop matching the poll conditions and stay in the
    collection for inspection. Delivery is at-least-once.
    """

    def __init__(
        self,
        client: BaseDocumentClient,
        collection: str,
        max_retries: int,
        lease_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._collection = collection
        self._max_retries = max_retries
        self._lease_seconds = lease_seconds
        self._clock = clock

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def add_task(self, task: Task) -> str:
        """Enqueue a new task and return its document identifier."""
        document = {
            "retries": 0,
            "lease_until": 0,
            "created": self._clock(),
            "status": STATUS_PENDING,
            "error": "",
            "task": task.to_payload(),
        }
        task_id = self._client.add_doc(self._collection, document)
        Log.info("Task enqueued", task_id=task_id, title=task.title)
        return task_id

    def get_task(self, task_id: str) -> Task | None:
        document = self._client.get_doc(self._path(task_id))
        if document is None:
            return None
        return Task.from_document({**document, "_id": task_id})

    def poll(self, limit: int = 1) -> list[Task]:
        """Lease up to ``limit`` eligible tasks, fewest retries and oldest first."""
        now = self._clock()
        conditions = [
            Condition("retries", "<", self._max_retries),
            Condition("lease_until", "<=", now),
        ]
        ordering = [Order("retries", "asc"), Order("created", "asc")]
        documents = self._client.query_items(
            self._collection,
            conditions,
            ordering,
            limit,
            self._lease_update(now),
        )
        return [Task.from_document(document) for document in documents]

    def complete(self, task: Task) -> None:
        """Remove a successfully processed task."""
        self._client.delete_doc(self._path(self._require_id(task)))
        Log.info("Task completed and removed", task_id=task.id)

    def release(self, task: Task, error: str) -> None:
        """Annotate a failed attempt and make the task eligible for another poll."""
        self._annotate(task, error, {"lease_until": 0})
        Log.warning("Task released for retry", task_id=task.id, retries=task.retries)

    def dead_letter(self, task: Task, error: str) -> None:
        """Annotate a terminal failure. The document is kept for inspection."""
        self._annotate(task, error, {"status": STATUS_FAILED, "lease_until": 0})
        Log.error("Task dead-lettered", task_id=task.id, retries=task.retries)

    def is_last_attempt(self, task: Task) -> bool:
        """True when the current lease consumed the final eligible retry."""
        return task.retries >= self._max_retries

    def _lease_update(self, now: float) -> Callable[[dict[str, Any]], dict[str, Any]]:
        def update(fields: dict[str, Any]) -> dict[str, Any]:
            return {
                "retries": int(fields.get("retries", 0)) + 1,
                "lease_until": now + self._lease_seconds,
            }

        return update

    def _annotate(self, task: Task, error: str, overrides: dict[str, Any]) -> None:
        """Append ``error`` and apply ``overrides`` while this lease is still current.

        A document whose retry count moved past ``task.retries`` was leased again
        after our lease expired; it belongs to the newer holder and is left alone.
        """

        def update(fields: dict[str, Any]) -> dict[str, Any]:
            if int(fields.get("retries", 0)) != task.retries:
                raise StateError(
                    f"lease superseded: retries is {fields.get('retries')}, held {task.retries}"
                )
            previous = fields.get("error") or ""
            return {**overrides, "error": f"{previous}\n{error}" if previous else error}

        updated = self._client.update_doc(self._path(self._require_id(task)), update)
        if updated is None:
            Log.warning(
                "Task document gone or leased again, annotation skipped",
                task_id=task.id,
                retries=task.retries,
            )

    def _path(self, task_id: str) -> str:
        return f"{self._collection}/{task_id}"

    @staticmethod
    def _require_id(task: Task) -> str:
        if not task.id:
            raise ValueError("Task has no document identifier")
        return task.id
