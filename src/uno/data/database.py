"""Database handle: owns the connection and hands out Dao builders.

Supports SQLite via stdlib ``sqlite3``. Any other DB-API 2.0 connection
that uses ``?`` placeholders can be wrapped with ``from_connection``.

Connection URL format::

    sqlite:///path/to/db.sqlite    # SQLite file
    sqlite:///:memory:             # In-memory SQLite

Usage::

    db = Database("sqlite:///app.db", sql_dir="sql")
    db.dao().sql("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)").execute()
    dao = db.dao()
    user = dao.file("users/by_id", {"id": dao.bind(7)}).one(User)

Every ``dao()`` call returns a fresh builder, so one statement in flight
never sees another's SQL or parameters.

Free-threading safety:
    - ``connect``/``disconnect`` use a Lock with a double check
    - The SQLite connection is opened with ``check_same_thread=False``;
      builders are per-statement and never shared
"""

from __future__ import annotations

import os
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Self

from kida import Environment

from uno.data.dao import Binder, ConnectionState, Dao, Escaper, create_sql_environment
from uno.data.errors import ConnectionError, DataError
from uno.data.escaping import mysql_style_escaper


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Database connection configuration."""

    url: str
    sql_dir: str | Path = "sql"
    echo: bool = False


class Database:
    """Owns one relational connection and the defaults for its builders."""

    __slots__ = (
        "_binders",
        "_config",
        "_conn",
        "_env",
        "_escaper",
        "_lock",
        "_owned",
        "_state",
    )

    def __init__(
        self,
        url: str,
        /,
        *,
        sql_dir: str | os.PathLike[str] = "sql",
        echo: bool = False,
    ) -> None:
        _parse_sqlite_path(url)
        self._config = DatabaseConfig(url=url, sql_dir=Path(sql_dir), echo=echo)
        self._conn: Any = None
        self._owned = True
        self._lock = threading.Lock()
        self._escaper: Escaper = mysql_style_escaper
        self._binders: dict[str, Binder] = {}
        self._env: Environment | None = None
        self._state = ConnectionState()

    @classmethod
    def from_connection(
        cls,
        connection: Any,
        *,
        sql_dir: str | os.PathLike[str] = "sql",
        echo: bool = False,
    ) -> Database:
        """Wrap an already-open DB-API connection. ``disconnect`` leaves it open."""
        db = cls("sqlite:///:memory:", sql_dir=sql_dir, echo=echo)
        db._conn = connection
        db._owned = False
        return db

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    # -- Builder defaults --

    def set_escaper(self, escaper: Escaper) -> None:
        """Escaper used by every builder created after this call."""
        self._escaper = escaper

    def register_binder(self, name: str, func: Binder) -> None:
        """Binder available on every builder created after this call."""
        self._binders[name.lower()] = func

    def dao(self) -> Dao:
        """A fresh, clean statement builder on this connection."""
        if self._env is None:
            self._env = create_sql_environment(self._config.sql_dir)
        return Dao(
            self.connection,
            self._config.sql_dir,
            escaper=self._escaper,
            binders=self._binders,
            env=self._env,
            echo=self._config.echo,
            state=self._state,
        )

    def last_id(self) -> Any:
        """Row id generated by the most recent INSERT through any of this database's builders."""
        return self._state.last_id

    # -- Lifecycle --

    @property
    def connection(self) -> Any:
        """The live connection, opened on first use."""
        if self._conn is None:
            self.connect()
        return self._conn

    def connect(self) -> None:
        """Open the connection. Called automatically on first use."""
        if self._conn is not None:
            return
        with self._lock:
            if self._conn is not None:
                return
            if not self._owned:
                msg = "the wrapped connection was released by disconnect()"
                raise ConnectionError(msg)
            path = _parse_sqlite_path(self._config.url)
            try:
                conn = sqlite3.connect(path, check_same_thread=False)
            except sqlite3.Error as exc:
                msg = f"cannot open {self._config.url!r}: {exc}"
                raise ConnectionError(msg) from exc
            conn.isolation_level = None  # autocommit each statement
            conn.execute("PRAGMA foreign_keys=ON")
            self._conn = conn

    def disconnect(self) -> None:
        """Close the connection if this Database opened it."""
        if self._conn is None:
            return
        with self._lock:
            if self._conn is None:
                return
            if self._owned:
                self._conn.close()
            self._conn = None
            self._state = ConnectionState()

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(self, *_: Any) -> None:
        self.disconnect()


def _parse_sqlite_path(url: str) -> str:
    """Extract the file path from a sqlite:// URL."""
    # sqlite:///path/to/db  ->  path/to/db
    # sqlite:///:memory:    ->  :memory:
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            return url[len(prefix) :]
    msg = (
        f"Unsupported database URL scheme: {url!r}. "
        "Supported: sqlite:///path, or Database.from_connection(conn)"
    )
    raise DataError(msg)
