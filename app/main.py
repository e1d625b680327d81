import threading

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.logging.logger import Log
from app.payload.factory import PayloadSenderFactory
from app.processor.processor import build_processor
from app.queue.postgres_client import PostgresDocumentClient
from app.queue.task_queue import TaskQueue
from app.storage.factory import StorageProviderFactory
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings, max_size=max(settings.worker_threads + 1, 2))

    sender = PayloadSenderFactory.create(settings)
    document_client = PostgresDocumentClient()
    try:
        document_client.create_schema()
        cancel = threading.Event()
        file_store = StorageProviderFactory.create(settings)
        processor = build_processor(settings, file_store, sender)
        queue = TaskQueue(
            document_client,
            settings.task_collection,
            max_retries=settings.max_task_retries,
            lease_seconds=settings.task_lease_seconds,
        )
        job_runner = JobRunner(processor, queue, cancel)
        worker = Worker(queue, job_runner, settings, cancel)
        worker.run()
    finally:
        sender.close()
        close_pool()


if __name__ == "__main__":
    main()
