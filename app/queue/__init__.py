from app.queue.client_base import BaseDocumentClient, Condition, Order
from app.queue.models import Task
from app.queue.task_queue import TaskQueue

__all__ = ["BaseDocumentClient", "Condition", "Order", "Task", "TaskQueue"]
