"""Table-level CRUD over plain dicts.

``ORM`` works with a table name, a primary key column and row dicts; it
does not know about models. Table and column names are interpolated
into SQL, so they are checked against a strict identifier pattern.
Values always travel as bound parameters.
"""

import re
from collections.abc import Mapping
from typing import Any

from migus.data.database import Database

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        msg = f"Invalid SQL identifier: {name!r}"
        raise ValueError(msg)
    return name


def build_where(criteria: Mapping[str, Any] | None) -> tuple[str, list[Any]]:
    """``{"a": 1, "b": 2}`` -> ``("WHERE a = ? AND b = ?", [1, 2])``.

    Empty criteria give ``("", [])``.
    """
    if not criteria:
        return "", []
    parts = [f"{_ident(column)} = ?" for column in criteria]
    return "WHERE " + " AND ".join(parts), list(criteria.values())


class ORM:
    """Dict-in, dict-out access to arbitrary tables."""

    __slots__ = ("_db",)

    def __init__(self, db: Database) -> None:
        self._db = db

    @property
    def db(self) -> Database:
        return self._db

    def find(self, table: str, pk: str, id: int | str) -> dict[str, Any] | None:
        sql = f"SELECT * FROM {_ident(table)} WHERE {_ident(pk)} = ? LIMIT 1"
        return self._db.fetch_row(sql, id)

    def find_by(
        self,
        table: str,
        criteria: Mapping[str, Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        where, params = build_where(criteria)
        sql = f"SELECT * FROM {_ident(table)}"
        if where:
            sql += f" {where}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        if offset is not None:
            if limit is None:
                # SQLite only accepts OFFSET after LIMIT
                sql += " LIMIT -1"
            sql += " OFFSET ?"
            params.append(int(offset))
        return self._db.fetch_all(sql, *params)

    def insert(self, table: str, data: Mapping[str, Any]) -> int:
        """Insert one row and return its id.

        Raises:
            ValueError: *data* is empty.
        """
        if not data:
            msg = "Cannot insert an empty row"
            raise ValueError(msg)
        columns = ", ".join(_ident(c) for c in data)
        placeholders = ", ".join("?" for _ in data)
        sql = f"INSERT INTO {_ident(table)} ({columns}) VALUES ({placeholders})"
        return self._db.insert(sql, *data.values())

    def update(self, table: str, pk: str, id: int | str, data: Mapping[str, Any]) -> bool:
        """Update one row by primary key. ``True`` when a row changed."""
        if not data:
            return False
        assignments = ", ".join(f"{_ident(c)} = ?" for c in data)
        sql = f"UPDATE {_ident(table)} SET {assignments} WHERE {_ident(pk)} = ?"
        return self._db.execute(sql, *data.values(), id) > 0

    def delete(self, table: str, pk: str, id: int | str) -> bool:
        sql = f"DELETE FROM {_ident(table)} WHERE {_ident(pk)} = ?"
        return self._db.execute(sql, id) > 0
