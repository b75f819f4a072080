"""
Catalog document store.

Songs and categories are schemaless JSON documents addressed by an opaque
string id the store assigns on creation. Two backends share one contract:
``SqlDocumentStore`` (SQLite or PostgreSQL through the core connection
factory) and ``InMemoryDocumentStore``.

Natural order is insertion order. Ordering by a field is a stable sort on
top of it, so documents with equal sort keys keep their natural order.
"""

import copy
import json
import threading
import uuid
from typing import Any, Iterable, Optional, Protocol

from loguru import logger

from mezmurhub.core.database import ConnectionFactory

from .exceptions import NotFoundError, TransportError


class DocumentStore(Protocol):
    """Contract every catalog store backend satisfies."""

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]: ...

    def list(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        array_contains: Optional[tuple[str, Any]] = None,
    ) -> list[dict[str, Any]]: ...

    def add(self, collection: str, data: dict[str, Any]) -> str: ...

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None: ...

    def delete(self, collection: str, doc_id: str) -> bool: ...


def new_document_id() -> str:
    return uuid.uuid4().hex


def _sort_key(value: Any) -> tuple:
    # None sorts before every real value; numbers and strings never mix in a field
    return (value is not None, value if value is not None else 0)


def select_documents(
    docs: Iterable[dict[str, Any]],
    order_by: Optional[str] = None,
    descending: bool = False,
    array_contains: Optional[tuple[str, Any]] = None,
) -> list[dict[str, Any]]:
    """Filter and order documents that are already in natural order."""
    result = list(docs)
    if array_contains is not None:
        field_name, needle = array_contains
        result = [d for d in result if needle in (d.get(field_name) or [])]
    if order_by:
        # sorted() keeps equal keys in natural order, also with reverse=True
        result = sorted(
            result, key=lambda d: _sort_key(d.get(order_by)), reverse=descending
        )
    return result


class InMemoryDocumentStore:
    """Dictionary-backed store used by tests and the ``memory`` backend."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return {**copy.deepcopy(doc), "id": doc_id} if doc is not None else None

    def list(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        array_contains: Optional[tuple[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        with self._lock:
            docs = [
                {**copy.deepcopy(doc), "id": doc_id}
                for doc_id, doc in self._collections.get(collection, {}).items()
            ]
        return select_documents(docs, order_by, descending, array_contains)

    def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = new_document_id()
        payload = copy.deepcopy({k: v for k, v in data.items() if k != "id"})
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = payload
        return doc_id

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            if doc is None:
                raise NotFoundError(collection, doc_id)
            doc.update(copy.deepcopy({k: v for k, v in fields.items() if k != "id"}))

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._collections.get(collection, {}).pop(doc_id, None) is not None


class SqlDocumentStore:
    """Documents stored as JSON text in the ``documents`` table."""

    def __init__(self, connect: ConnectionFactory) -> None:
        self._connect = connect

    @staticmethod
    def _decode(row: Any) -> dict[str, Any]:
        doc = json.loads(row["data"])
        doc["id"] = row["id"]
        return doc

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                    (collection, doc_id),
                ).fetchone()
        except Exception as e:
            raise TransportError(f"Failed to read {collection}/{doc_id}: {e}") from e
        return self._decode(row) if row else None

    def list(
        self,
        collection: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        array_contains: Optional[tuple[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT id, data FROM documents WHERE collection = ? ORDER BY seq ASC",
                    (collection,),
                ).fetchall()
        except Exception as e:
            raise TransportError(f"Failed to list {collection}: {e}") from e
        docs = [self._decode(row) for row in rows]
        return select_documents(docs, order_by, descending, array_contains)

    def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = new_document_id()
        payload = json.dumps({k: v for k, v in data.items() if k != "id"})
        try:
            with self._connect() as conn:
                try:
                    # seq is assigned by the INSERT itself
                    conn.execute(
                        "INSERT INTO documents (collection, id, seq, data) "
                        "SELECT ?, ?, COALESCE(MAX(seq), 0) + 1, ? FROM documents",
                        (collection, doc_id, payload),
                    )
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise
        except Exception as e:
            raise TransportError(f"Failed to create {collection} document: {e}") from e
        logger.debug(f"Created {collection}/{doc_id}")
        return doc_id

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        try:
            with self._connect() as conn:
                try:
                    row = conn.execute(
                        "SELECT data FROM documents WHERE collection = ? AND id = ?",
                        (collection, doc_id),
                    ).fetchone()
                    if row is None:
                        raise NotFoundError(collection, doc_id)
                    doc = json.loads(row["data"])
                    doc.update({k: v for k, v in fields.items() if k != "id"})
                    conn.execute(
                        "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
                        (json.dumps(doc), collection, doc_id),
                    )
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise
        except NotFoundError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to update {collection}/{doc_id}: {e}") from e

    def delete(self, collection: str, doc_id: str) -> bool:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM documents WHERE collection = ? AND id = ?",
                    (collection, doc_id),
                )
                conn.commit()
                return cursor.rowcount > 0
        except Exception as e:
            raise TransportError(f"Failed to delete {collection}/{doc_id}: {e}") from e
