from __future__ import annotations

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Generator, Iterator, List, Optional, Tuple

from .filters import Filter, check_field_name, is_range
from .repositories import Document, DocumentRepository, SortSpec

logger = logging.getLogger(__name__)


def _path(field: str) -> str:
    return f"json_extract(doc, '$.{check_field_name(field)}')"


def compile_filter(flt: Filter) -> Tuple[str, List[Any]]:
    """
    Compile a filter document into a parameterized SQL expression over the
    JSON ``doc`` column. Only field names are interpolated, and those are
    checked against a strict identifier pattern first.
    """
    clauses: List[str] = []
    params: List[Any] = []
    for key, condition in flt.items():
        if key in ("$and", "$or"):
            parts = [compile_filter(sub) for sub in condition]
            if not parts:
                clauses.append("1=1" if key == "$and" else "1=0")
                continue
            joiner = " AND " if key == "$and" else " OR "
            clauses.append("(" + joiner.join(sql for sql, _ in parts) + ")")
            for _, sub_params in parts:
                params.extend(sub_params)
        elif key.startswith("$"):
            raise ValueError(f"Unsupported filter operator: {key}")
        elif is_range(condition):
            if "$gte" in condition:
                clauses.append(f"{_path(key)} >= ?")
                params.append(condition["$gte"])
            if "$lte" in condition:
                clauses.append(f"{_path(key)} <= ?")
                params.append(condition["$lte"])
        else:
            clauses.append(f"{_path(key)} IS ?")
            params.append(condition)
    if not clauses:
        return "1=1", []
    return " AND ".join(clauses), params


class SQLiteRepository(DocumentRepository):
    """
    Lightweight SQLite repository implementing the DocumentRepository interface.

    Each collection is a table of JSON documents; the integer ``seq`` column
    records insertion order and breaks sort ties.
    """

    def __init__(self, db_path: str, collection: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._table = check_field_name(collection)
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    doc TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{self._table}_id ON {self._table}({_path('id')})"
            )

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> Document:
        return json.loads(row["doc"])

    def find(
        self,
        flt: Filter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Iterator[Document]:
        where_sql, params = compile_filter(flt)
        if sort is not None:
            direction = "DESC" if sort.descending else "ASC"
            order_sql = f"ORDER BY {_path(sort.field)} {direction}, seq ASC"
        else:
            order_sql = "ORDER BY seq ASC"
        page_params = [-1 if limit is None else max(limit, 0), max(skip, 0)]
        logger.debug("SQLite find on %s where %s %s", self._table, where_sql, order_sql)
        with self._conn() as conn:
            cursor = conn.execute(
                f"SELECT doc FROM {self._table} WHERE {where_sql} {order_sql} LIMIT ? OFFSET ?",
                [*params, *page_params],
            )
            for row in cursor:
                yield self._row_to_document(row)

    def count(self, flt: Filter) -> int:
        where_sql, params = compile_filter(flt)
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM {self._table} WHERE {where_sql}", params
            ).fetchone()
            return int(row["cnt"]) if row else 0

    def insert(self, doc: Document) -> Document:
        with self._conn() as conn:
            conn.execute(f"INSERT INTO {self._table} (doc) VALUES (?)", (json.dumps(doc),))
        return dict(doc)

    def update_one(self, flt: Filter, changes: Document) -> bool:
        where_sql, params = compile_filter(flt)
        # json_patch applies the changes in a single atomic statement
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                UPDATE {self._table}
                SET doc = json_patch(doc, ?)
                WHERE seq = (SELECT seq FROM {self._table} WHERE {where_sql} ORDER BY seq LIMIT 1)
                """,
                [json.dumps(changes), *params],
            )
            return cur.rowcount > 0

    def delete_one(self, flt: Filter) -> bool:
        where_sql, params = compile_filter(flt)
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                DELETE FROM {self._table}
                WHERE seq = (SELECT seq FROM {self._table} WHERE {where_sql} ORDER BY seq LIMIT 1)
                """,
                params,
            )
            return cur.rowcount > 0
