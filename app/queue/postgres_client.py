"""PostgreSQL-backed document store.

Documents live as JSONB rows in a single ``documents`` table, partitioned by a
``collection`` column. The lease query locks matched rows with
``FOR UPDATE SKIP LOCKED`` so concurrent pollers skip rows that another
transaction is already updating.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import close_pool, get_connection
from app.exceptions import ProviderError
from app.logging.logger import Log
from app.queue.client_base import (
    ID_FIELD,
    BaseDocumentClient,
    Condition,
    Order,
    UpdateFunc,
    split_path,
)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    collection TEXT NOT NULL,
    data JSONB NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS documents_collection_idx ON documents (collection);
"""

_OPERATORS = {
    "==": "=",
    "!=": "<>",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
}

_DIRECTIONS = {"asc": "ASC", "desc": "DESC"}


class PostgresDocumentClient(BaseDocumentClient):
    """Document client over the shared psycopg connection pool."""

    def authenticated(self) -> bool:
        try:
            with get_connection() as conn:
                conn.execute("SELECT 1")
        except (psycopg.Error, RuntimeError) as exc:
            Log.warning(f"Document store not reachable: {exc}")
            return False
        return True

    def close(self) -> None:
        close_pool()

    def create_schema(self) -> None:
        """Create the documents table if it does not exist."""
        with self._connection() as conn:
            conn.execute(SCHEMA_SQL)
            conn.commit()

    def get_doc(self, path: str) -> dict[str, Any] | None:
        collection, doc_id = split_path(path)
        with self._connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT data FROM documents WHERE collection = %s AND id = %s",
                    (collection, doc_id),
                )
                row = cur.fetchone()
        if row is None:
            return None
        return {**row["data"], ID_FIELD: doc_id}

    def set_doc(self, path: str, data: dict[str, Any]) -> None:
        collection, doc_id = split_path(path)
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO documents (id, collection, data)
                VALUES (%s, %s, %s)
                ON CONFLICT (id) DO UPDATE SET data = EXCLUDED.data
                """,
                (doc_id, collection, Jsonb(_without_id(data))),
            )
            conn.commit()

    def update_doc(self, path: str, update_func: UpdateFunc) -> dict[str, Any] | None:
        collection, doc_id = split_path(path)
        with self._connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT data FROM documents WHERE collection = %s AND id = %s FOR UPDATE",
                    (collection, doc_id),
                )
                row = cur.fetchone()
                if row is None:
                    conn.rollback()
                    return None
                current = dict(row["data"])
                try:
                    overrides = update_func(dict(current))
                except Exception as exc:
                    Log.warning(
                        f"Update rejected for document, leaving it untouched: {exc}",
                        document_id=doc_id,
                    )
                    conn.rollback()
                    return None
                overrides = _without_id(overrides or {})
                if overrides:
                    cur.execute(
                        "UPDATE documents SET data = data || %s WHERE id = %s",
                        (Jsonb(overrides), doc_id),
                    )
            conn.commit()
        return {**current, **overrides, ID_FIELD: doc_id}

    def add_doc(self, collection: str, data: dict[str, Any]) -> str:
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "INSERT INTO documents (collection, data) VALUES (%s, %s) RETURNING id",
                    (collection, Jsonb(_without_id(data))),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise ProviderError(f"Insert into '{collection}' returned no identifier")
        return str(row[0])

    def delete_doc(self, path: str) -> None:
        collection, doc_id = split_path(path)
        with self._connection() as conn:
            conn.execute(
                "DELETE FROM documents WHERE collection = %s AND id = %s",
                (collection, doc_id),
            )
            conn.commit()

    def query_items(
        self,
        collection: str,
        conditions: list[Condition],
        ordering: list[Order],
        limit: int,
        update_func: UpdateFunc,
    ) -> list[dict[str, Any]]:
        query, params = self._build_query(collection, conditions, ordering, limit)
        items: list[dict[str, Any]] = []
        with self._connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
                for row in rows:
                    current = dict(row["data"])
                    try:
                        overrides = update_func(dict(current))
                    except Exception as exc:
                        Log.warning(
                            f"Update rejected for document, leaving it untouched: {exc}",
                            document_id=row["id"],
                        )
                        continue
                    overrides = _without_id(overrides or {})
                    if overrides:
                        cur.execute(
                            "UPDATE documents SET data = data || %s WHERE id = %s",
                            (Jsonb(overrides), row["id"]),
                        )
                    items.append({**current, **overrides, ID_FIELD: row["id"]})
            conn.commit()
        return items

    @staticmethod
    def _build_query(
        collection: str,
        conditions: list[Condition],
        ordering: list[Order],
        limit: int,
    ) -> tuple[sql.Composed, list[Any]]:
        params: list[Any] = [collection]
        clauses = [sql.SQL("collection = %s")]
        for condition in conditions:
            operator = _OPERATORS.get(condition.operator)
            if operator is None:
                raise ValueError(
                    f"Unsupported operator '{condition.operator}'. "
                    f"Choose from: {list(_OPERATORS)}"
                )
            clauses.append(sql.SQL("data #> %s::text[] {} %s").format(sql.SQL(operator)))
            params.extend([condition.field.split("."), Jsonb(condition.value)])

        order_by = [sql.SQL("created_at ASC")]
        if ordering:
            order_by = []
            for order in ordering:
                direction = _DIRECTIONS.get(order.direction.lower())
                if direction is None:
                    raise ValueError(f"Unsupported ordering direction '{order.direction}'")
                order_by.append(sql.SQL("data #> %s::text[] {}").format(sql.SQL(direction)))
                params.append(order.field.split("."))

        params.append(limit)
        query = sql.SQL(
            "SELECT id, data FROM documents WHERE {} ORDER BY {} LIMIT %s "
            "FOR UPDATE SKIP LOCKED"
        ).format(sql.SQL(" AND ").join(clauses), sql.SQL(", ").join(order_by))
        return query, params

    @staticmethod
    @contextmanager
    def _connection() -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a pooled connection, reporting driver failures as ProviderError."""
        try:
            with get_connection() as conn:
                yield conn
        except psycopg.Error as exc:
            raise ProviderError(f"Document store error: {exc}") from exc


def _without_id(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key != ID_FIELD}
