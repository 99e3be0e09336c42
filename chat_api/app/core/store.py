"""
Document collections used by the service layer.

Services never talk to SQLite directly.  Each service receives a
``DocumentCollection`` at construction time which offers a small set
of filter-based CRUD operations, modelled after document databases:

* ``find_one(filter)`` and ``find(filter, sort)`` for lookups,
* ``create(document)`` which assigns the ``id``,
* ``find_one_and_update(filter, updates)`` returning the updated document,
* ``find_one_and_delete(filter)`` returning the removed document.

Filters are equality matches on document fields.  Store failures are
raised as ``StoreError``; a uniqueness violation is raised as
``DuplicateKeyError`` so callers can tell it apart.

``SQLiteCollection`` implements the interface on top of the tables
created by ``core.db.init_db``.
"""

import sqlite3
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .db import get_connection

Document = Dict[str, Any]
SortSpec = Sequence[Tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


class StoreError(Exception):
    """Raised when the underlying store fails to execute an operation."""


class DuplicateKeyError(StoreError):
    """Raised when a write violates a unique index."""


class DocumentCollection(ABC):
    @abstractmethod
    async def find_one(self, filter: Mapping[str, Any]) -> Optional[Document]: ...

    @abstractmethod
    async def find(self, filter: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None) -> List[Document]: ...

    @abstractmethod
    async def create(self, document: Mapping[str, Any]) -> Document: ...

    @abstractmethod
    async def find_one_and_update(self, filter: Mapping[str, Any], updates: Mapping[str, Any]) -> Optional[Document]: ...

    @abstractmethod
    async def find_one_and_delete(self, filter: Mapping[str, Any]) -> Optional[Document]: ...


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SQLiteCollection(DocumentCollection):
    """A document collection stored in one SQLite table.

    ``fields`` maps document field names to column names.  Every table
    has a text ``id`` primary key which is generated here on insert.
    Fields listed in ``datetime_fields`` are stored as UTC ISO-8601
    strings, so ordering by those columns is chronological.
    """

    def __init__(
        self,
        table: str,
        fields: Mapping[str, str],
        datetime_fields: Iterable[str] = (),
        database_path: Optional[str] = None,
    ) -> None:
        self.table = table
        self.fields = dict(fields)
        self.datetime_fields = set(datetime_fields)
        self.database_path = database_path

    def _column(self, field: str) -> str:
        if field == "id":
            return "id"
        try:
            return self.fields[field]
        except KeyError:
            raise StoreError(f"Unknown field {field!r} for collection {self.table}") from None

    def _encode(self, field: str, value: Any) -> Any:
        if field in self.datetime_fields and isinstance(value, datetime):
            try:
                return to_utc(value).isoformat()
            except OverflowError as exc:
                raise StoreError(f"{field} is out of range: {value.isoformat()}") from exc
        return value

    def _to_document(self, row: sqlite3.Row) -> Document:
        document: Document = {"id": row["id"]}
        for field, column in self.fields.items():
            value = row[column]
            if field in self.datetime_fields and value is not None:
                value = datetime.fromisoformat(value)
            document[field] = value
        return document

    def _where(self, filter: Optional[Mapping[str, Any]]) -> Tuple[str, List[Any]]:
        if not filter:
            return "", []
        clauses = []
        values = []
        for field, value in filter.items():
            clauses.append(f"{self._column(field)} = ?")
            values.append(self._encode(field, value))
        return " WHERE " + " AND ".join(clauses), values

    def _select(self) -> str:
        columns = ", ".join(["id", *self.fields.values()])
        return f"SELECT {columns} FROM {self.table}"

    def _fetch_one(self, cursor: sqlite3.Cursor, filter: Mapping[str, Any]) -> Optional[sqlite3.Row]:
        where, values = self._where(filter)
        return cursor.execute(f"{self._select()}{where} LIMIT 1", values).fetchone()

    def _run(self, operation):
        conn = get_connection(self.database_path)
        try:
            result = operation(conn.cursor())
            conn.commit()
            return result
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise DuplicateKeyError(str(exc)) from exc
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    async def find_one(self, filter: Mapping[str, Any]) -> Optional[Document]:
        row = self._run(lambda cursor: self._fetch_one(cursor, filter))
        return self._to_document(row) if row else None

    async def find(self, filter: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None) -> List[Document]:
        where, values = self._where(filter)
        order = ""
        if sort:
            parts = [
                f"{self._column(field)} {'DESC' if direction == DESCENDING else 'ASC'}"
                for field, direction in sort
            ]
            order = " ORDER BY " + ", ".join(parts)
        rows = self._run(lambda cursor: cursor.execute(f"{self._select()}{where}{order}", values).fetchall())
        return [self._to_document(row) for row in rows]

    async def create(self, document: Mapping[str, Any]) -> Document:
        document_id = uuid.uuid4().hex
        columns = ["id"]
        values: List[Any] = [document_id]
        for field, value in document.items():
            if field == "id":
                continue
            columns.append(self._column(field))
            values.append(self._encode(field, value))
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders})"

        def insert(cursor: sqlite3.Cursor) -> sqlite3.Row:
            cursor.execute(sql, values)
            return self._fetch_one(cursor, {"id": document_id})

        return self._to_document(self._run(insert))

    async def find_one_and_update(self, filter: Mapping[str, Any], updates: Mapping[str, Any]) -> Optional[Document]:
        assignments = []
        values: List[Any] = []
        for field, value in updates.items():
            if field == "id":
                raise StoreError("The id field cannot be updated")
            assignments.append(f"{self._column(field)} = ?")
            values.append(self._encode(field, value))

        def update(cursor: sqlite3.Cursor) -> Optional[sqlite3.Row]:
            row = self._fetch_one(cursor, filter)
            if not row:
                return None
            if assignments:
                cursor.execute(
                    f"UPDATE {self.table} SET {', '.join(assignments)} WHERE id = ?",
                    (*values, row["id"]),
                )
            return self._fetch_one(cursor, {"id": row["id"]})

        row = self._run(update)
        return self._to_document(row) if row else None

    async def find_one_and_delete(self, filter: Mapping[str, Any]) -> Optional[Document]:
        def delete(cursor: sqlite3.Cursor) -> Optional[sqlite3.Row]:
            row = self._fetch_one(cursor, filter)
            if row:
                cursor.execute(f"DELETE FROM {self.table} WHERE id = ?", (row["id"],))
            return row

        row = self._run(delete)
        return self._to_document(row) if row else None


def user_collection(database_path: Optional[str] = None) -> SQLiteCollection:
    """Collection of user documents: ``username``, ``password``, ``dateJoined``."""
    return SQLiteCollection(
        "users",
        {"username": "username", "password": "password", "dateJoined": "date_joined"},
        datetime_fields=("dateJoined",),
        database_path=database_path,
    )


def message_collection(database_path: Optional[str] = None) -> SQLiteCollection:
    """Collection of message documents: ``msg``, ``msgFrom``, ``msgDateTime``."""
    return SQLiteCollection(
        "messages",
        {"msg": "msg", "msgFrom": "msg_from", "msgDateTime": "msg_date_time"},
        datetime_fields=("msgDateTime",),
        database_path=database_path,
    )
