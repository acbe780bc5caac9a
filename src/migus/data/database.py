"""Synchronous SQLite access.

SQL in, dicts or frozen dataclasses out::

    db = Database("sqlite:///storage/app.db")
    user = db.fetch_one(User, "SELECT * FROM users WHERE email = ?", email)
    count = db.fetch_val("SELECT COUNT(*) FROM users")

Handlers run in worker threads, so one connection is shared behind a
reentrant lock and opened with ``check_same_thread=False``. Statements
autocommit unless they run inside ``transaction()``.

Connection URL format::

    sqlite:///path/to/db.sqlite    # file
    sqlite:///:memory:             # in-memory
"""

import logging
import sqlite3
import threading
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from migus.data._mapping import map_row, map_rows
from migus.data.errors import DataError, IntegrityError, QueryError

logger = logging.getLogger("migus.data")


class Database:
    """One SQLite connection, opened lazily on first use.

    Args:
        url: ``sqlite:///`` URL.
        echo: Log every statement with its timing on ``migus.data``.
    """

    __slots__ = ("_conn", "_depth", "_echo", "_lock", "_path", "_url")

    def __init__(self, url: str, /, *, echo: bool = False) -> None:
        self._url = url
        self._path = _parse_sqlite_path(url)
        self._echo = echo
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._depth = 0

    @property
    def url(self) -> str:
        return self._url

    @property
    def connected(self) -> bool:
        return self._conn is not None

    # -- Lifecycle --

    def connect(self) -> None:
        """Open the connection. Idempotent."""
        with self._lock:
            if self._conn is not None:
                return
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._path, check_same_thread=False, autocommit=True)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            self._conn = conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> Database:
        self.connect()
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.connect()
        assert self._conn is not None
        return self._conn

    # -- Transactions --

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed statements atomically.

        Commits on normal exit, rolls back on any exception. Nested
        calls join the outer transaction.

        Usage::

            with db.transaction():
                db.execute("DELETE FROM sessions WHERE user_id = ?", user_id)
                db.execute("DELETE FROM users WHERE id = ?", user_id)
        """
        with self._lock:
            conn = self._connection()
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            conn.autocommit = False
            self._depth = 1
            try:
                yield
            except BaseException:
                conn.rollback()
                raise
            else:
                conn.commit()
            finally:
                self._depth = 0
                conn.autocommit = True

    # -- Query API --

    def fetch_all(self, sql: str, /, *params: Any) -> list[dict[str, Any]]:
        """All rows as plain dicts."""
        cursor = self._run(sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def fetch_row(self, sql: str, /, *params: Any) -> dict[str, Any] | None:
        """First row as a dict, or ``None``."""
        cursor = self._run(sql, params)
        row = cursor.fetchone()
        return dict(row) if row is not None else None

    def fetch[T](self, cls: type[T], sql: str, /, *params: Any) -> list[T]:
        """All rows mapped to the dataclass *cls*."""
        return map_rows(cls, self.fetch_all(sql, *params))

    def fetch_one[T](self, cls: type[T], sql: str, /, *params: Any) -> T | None:
        """First row mapped to *cls*, or ``None``."""
        row = self.fetch_row(sql, *params)
        return map_row(cls, row) if row is not None else None

    def fetch_val(self, sql: str, /, *params: Any) -> Any:
        """First column of the first row, or ``None``."""
        row = self._run(sql, params).fetchone()
        return row[0] if row is not None else None

    def execute(self, sql: str, /, *params: Any) -> int:
        """Run a statement and return the affected row count."""
        return self._run(sql, params).rowcount

    def insert(self, sql: str, /, *params: Any) -> int:
        """Run an INSERT and return the new row id."""
        rowid = self._run(sql, params).lastrowid
        if rowid is None:
            msg = f"Statement did not insert a row: {sql}"
            raise QueryError(msg)
        return rowid

    def execute_script(self, sql: str, /) -> None:
        """Run several ``;``-separated statements (schema setup)."""
        t0 = time.perf_counter()
        with self._lock:
            try:
                self._connection().executescript(sql)
            except sqlite3.Error as exc:
                raise _wrap(exc, sql) from exc
            finally:
                self._log_query(sql, (), time.perf_counter() - t0)

    def _run(self, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
        t0 = time.perf_counter()
        with self._lock:
            try:
                return self._connection().execute(sql, tuple(params))
            except sqlite3.Error as exc:
                raise _wrap(exc, sql) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)

    def _log_query(self, sql: str, params: Sequence[Any], elapsed: float) -> None:
        if not self._echo:
            return
        param_str = f"  params={tuple(params)!r}" if params else ""
        logger.debug("%6.1fms  %s%s", elapsed * 1000, sql, param_str)

    def __repr__(self) -> str:
        return f"Database({self._url!r})"


def _wrap(exc: sqlite3.Error, sql: str) -> QueryError:
    msg = f"{exc}\n  SQL: {sql}"
    if isinstance(exc, sqlite3.IntegrityError):
        return IntegrityError(msg)
    return QueryError(msg)


def _parse_sqlite_path(url: str) -> str:
    # sqlite:///path/to/db -> path/to/db
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            path = url[len(prefix) :]
            if path:
                return path
    msg = f"Unsupported database URL: {url!r}. Expected sqlite:///path or sqlite:///:memory:"
    raise DataError(msg)
