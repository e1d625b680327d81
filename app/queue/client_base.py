from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

UpdateFunc = Callable[[dict[str, Any]], dict[str, Any]]
"""Receives a document's current fields and returns the fields to override.

Raising from the function leaves that document untouched.
"""

ID_FIELD = "_id"


@dataclass(frozen=True)
class Condition:
    """A field/operator/value predicate. Dotted fields address nested values."""

    field: str
    operator: str
    value: Any


@dataclass(frozen=True)
class Order:
    """Sort key for query results."""

    field: str
    direction: str = "asc"


class BaseDocumentClient(ABC):
    """Contract for document store providers backing the task queue."""

    @abstractmethod
    def authenticated(self) -> bool:
        """Return True if the provider connection is usable."""

    @abstractmethod
    def close(self) -> None:
        """Release provider resources."""

    @abstractmethod
    def get_doc(self, path: str) -> dict[str, Any] | None:
        """Return the document at ``<collection>/<id>``, or None if missing."""

    @abstractmethod
    def set_doc(self, path: str, data: dict[str, Any]) -> None:
        """Replace (or create) the document at ``<collection>/<id>``."""

    @abstractmethod
    def update_doc(self, path: str, update_func: UpdateFunc) -> dict[str, Any] | None:
        """Atomically merge the fields returned by ``update_func`` into a document.

        Returns the merged document, or None when the document is missing or
        ``update_func`` raised; neither case writes anything.
        """

    @abstractmethod
    def add_doc(self, collection: str, data: dict[str, Any]) -> str:
        """Insert a new document and return its assigned identifier.

        Raises:
            ProviderError: on any provider failure; nothing is written.
        """

    @abstractmethod
    def delete_doc(self, path: str) -> None:
        """Delete the document at ``<collection>/<id>``."""

    @abstractmethod
    def query_items(
        self,
        collection: str,
        conditions: list[Condition],
        ordering: list[Order],
        limit: int,
        update_func: UpdateFunc,
    ) -> list[dict[str, Any]]:
        """Select and atomically update up to ``limit`` matching documents.

        Each match is passed to ``update_func``; its returned fields are merged
        over the stored fields and persisted. The merged documents are returned
        with ``_id`` set when the provider assigns identifiers.
        """


def split_path(path: str) -> tuple[str, str]:
    """Split ``<collection>/<id>`` into its two parts."""
    collection, sep, doc_id = path.strip("/").rpartition("/")
    if not sep or not collection or not doc_id:
        raise ValueError(f"Invalid document path '{path}', expected '<collection>/<id>'")
    return collection, doc_id
