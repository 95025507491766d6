"""Single-statement SQL builder and executor.

A ``Dao`` builds exactly one statement at a time. Values are bound as
positional ``?`` parameters as the SQL text is composed; identifiers go
through the escaper; the statement runs through the DB-API connection
and the builder is clean again afterwards::

    dao = db.dao()
    users = dao.sql(
        f"SELECT * FROM {dao.escape('users')} WHERE id IN ({dao.bind(ids)})"
    ).list(User)

SQL may also come from a template file under the SQL directory, rendered
with kida::

    -- sql/users/active.sql
    SELECT * FROM users WHERE active = 1
    {% if since %}AND created_at >= {{ since }}{% end %}

    dao.file("users/active", {"since": dao.bind(cutoff)}).list(User)

Because ``bind`` is usually evaluated before ``sql``/``file`` (it sits
inside the argument), parameters may be recorded before the text is set.

Transparency: ``.pending`` and ``.params`` show exactly what will run.

Thread safety:
    A Dao is not reentrant. Take a fresh builder per statement
    (``db.dao()``, ``dao.clone()``, or the container's ``dao`` name)
    instead of sharing one between concurrent users.
"""

from __future__ import annotations

import copy
import logging
import os
import sys
import time
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any, Self

from kida import Environment, FileSystemLoader

from uno.data._mapping import row_factory
from uno.data.errors import PendingStatement, QueryError, TooManyRows, UnknownBinder
from uno.data.escaping import ParamType, json_binder, must_in_dir, mysql_style_escaper

logger = logging.getLogger("uno.data")

Escaper = Callable[[str], str]
Binder = Callable[..., str]

_BIND_PREFIX = "bind_"


def create_sql_environment(sql_dir: str | os.PathLike[str]) -> Environment:
    """Kida environment for SQL templates. No HTML autoescaping."""
    return Environment(
        loader=FileSystemLoader(str(sql_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class ConnectionState:
    """Per-connection facts shared by every builder on that connection."""

    __slots__ = ("last_id",)

    def __init__(self) -> None:
        self.last_id: Any = None


class Dao:
    """Builds and runs one SQL statement, then resets for the next."""

    __slots__ = (
        "_binders",
        "_conn",
        "_echo",
        "_env",
        "_escaper",
        "_params",
        "_sql",
        "_sql_dir",
        "_state",
    )

    def __init__(
        self,
        connection: Any,
        sql_dir: str | os.PathLike[str] = ".",
        *,
        escaper: Escaper = mysql_style_escaper,
        binders: dict[str, Binder] | None = None,
        env: Environment | None = None,
        echo: bool = False,
        state: ConnectionState | None = None,
    ) -> None:
        self._conn = connection
        self._sql_dir = Path(sql_dir)
        self._escaper = escaper
        self._env = env
        self._echo = echo
        self._binders: dict[str, Binder] = {"json": json_binder}
        if binders:
            for name, func in binders.items():
                self.register_binder(name, func)
        self._sql: str | None = None
        self._params: list[tuple[Any, ParamType]] = []
        self._state = state if state is not None else ConnectionState()

    # -- Statement text --

    def sql(self, text: str) -> Self:
        """Set the statement text.

        Raises ``PendingStatement`` if a statement is already pending; the
        builder is reset first, so it is clean for the next statement.
        """
        self._check_idle()
        self._sql = text
        return self

    def file(self, name: str, *data: dict[str, Any]) -> Self:
        """Set the statement text from ``<sql_dir>/<name>.sql``.

        The file is a kida template rendered with the merged *data* maps.
        Raises ``InsecureFileAccess`` if *name* escapes the SQL directory.
        Any failure (containment, a missing file, rendering) resets the
        builder, dropping values bound for this statement.
        """
        self._check_idle()
        try:
            path = must_in_dir(self._sql_dir, self._sql_dir / f"{name}.sql")
            source = Path(path).read_text(encoding="utf-8")
            context: dict[str, Any] = {}
            for mapping in data:
                context.update(mapping)
            self._sql = self.environment.from_string(source).render(context)
        except BaseException:
            self.reset()
            raise
        return self

    def _check_idle(self) -> None:
        if self._sql is not None:
            pending = self._sql
            self.reset()
            raise PendingStatement(pending)

    @property
    def environment(self) -> Environment:
        if self._env is None:
            self._env = create_sql_environment(self._sql_dir)
        return self._env

    # -- Values and identifiers --

    def bind(self, value: Any, type: ParamType = ParamType.STR) -> str:  # noqa: A002
        """Record *value* and return its placeholder text.

        A list, tuple, set or generator binds each element and returns
        ``"?,?,?"`` for use inside ``IN (...)``.
        """
        values = list(value) if _is_sequence(value) else [value]
        for item in values:
            self._params.append((item, type))
        return ",".join("?" for _ in values)

    __call__ = bind

    def escape(self, identifier: str) -> str:
        """Quote an identifier with the configured escaper."""
        return self._escaper(identifier)

    def set_escaper(self, escaper: Escaper) -> None:
        self._escaper = escaper

    def register_binder(self, name: str, func: Binder) -> None:
        """Register ``func(dao, *args)`` as the binder ``bind_<name>``."""
        self._binders[name.lower()] = func

    def binder(self, name: str) -> Callable[..., str]:
        """Return the named binder, ready to call with its arguments."""
        func = self._binders.get(name.lower())
        if func is None:
            raise UnknownBinder(name)
        return lambda *args, **kwargs: func(self, *args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not slots or methods.
        if name.startswith(_BIND_PREFIX):
            return self.binder(name[len(_BIND_PREFIX) :])
        msg = f"{type(self).__name__!r} object has no attribute {name!r}"
        raise AttributeError(msg)

    # -- Builder state --

    @property
    def pending(self) -> str | None:
        """The SQL text that will run next, if any."""
        return self._sql

    @property
    def params(self) -> tuple[Any, ...]:
        """The bound values, in placeholder order."""
        return tuple(value for value, _ in self._params)

    def reset(self) -> Self:
        """Discard any pending SQL and parameters."""
        self._sql = None
        self._params = []
        return self

    def clone(self) -> Dao:
        """A clean builder sharing this one's connection and configuration."""
        return copy.copy(self)

    def __copy__(self) -> Dao:
        twin = Dao.__new__(Dao)
        twin._conn = self._conn
        twin._sql_dir = self._sql_dir
        twin._escaper = self._escaper
        twin._env = self._env
        twin._echo = self._echo
        twin._binders = dict(self._binders)
        twin._sql = None
        twin._params = []
        twin._state = self._state
        return twin

    @property
    def connection(self) -> Any:
        return self._conn

    # -- Execution --

    def execute(self, params: Sequence[Any] | None = None) -> Any:
        """Run the pending statement and return its DB-API cursor.

        Bound parameters are converted by their recorded ``ParamType``.
        Passing *params* runs with those values instead. The builder is
        reset whether or not the statement succeeds.
        """
        sql, bound = self._sql, self._params
        self.reset()
        values = (
            tuple(params)
            if params is not None
            else tuple(kind.convert(value) for value, kind in bound)
        )
        if sql is None:
            msg = "no SQL statement pending: call sql() or file() first"
            raise QueryError(msg)

        logger.debug("SQL: %s", sql)
        t0 = time.perf_counter()
        try:
            cursor = self._conn.cursor()
            cursor.execute(sql, values)
        except Exception as exc:
            raise QueryError(str(exc)) from exc
        finally:
            self._log_query(sql, values, time.perf_counter() - t0)
        last_id = getattr(cursor, "lastrowid", None)
        if last_id is not None:
            self._state.last_id = last_id
        return cursor

    def last_id(self) -> Any:
        """Row id generated by the most recent INSERT on this connection.

        Shared by every builder from the same ``Database`` and by clones.
        """
        return self._state.last_id

    def _log_query(self, sql: str, params: Sequence[Any], elapsed: float) -> None:
        """Print a statement to stderr when echo is enabled."""
        if not self._echo:
            return
        ms = elapsed * 1000
        param_str = f"  params={tuple(params)!r}" if params else ""
        print(f"[uno.data] {ms:6.1f}ms  {sql}{param_str}", file=sys.stderr)

    # -- Materialization --

    def list(
        self, cls: type | None = None, mapper: Callable[[Any], Any] | None = None
    ) -> list[Any]:
        """Execute and collect every row, optionally passed through *mapper*."""
        make = row_factory(cls)
        cursor = self.execute()
        try:
            return [
                mapper(make(row)) if mapper is not None else make(row)
                for row in _rows(cursor)
            ]
        finally:
            cursor.close()

    def one(self, cls: type | None = None, mapper: Callable[[Any], Any] | None = None) -> Any:
        """Execute and return the only row, or ``None`` when there is none.

        Raises ``TooManyRows`` if the statement produces more than one row.
        """
        make = row_factory(cls)
        cursor = self.execute()
        try:
            rows = _fetch(cursor, 2)
        finally:
            cursor.close()
        if len(rows) > 1:
            raise TooManyRows(len(rows))
        if not rows:
            return None
        item = make(rows[0])
        return mapper(item) if mapper is not None else item

    def map(
        self, key: str, cls: type | None = None, value_key: str | None = None
    ) -> dict[Any, Any]:
        """Execute and index rows by the *key* column.

        With *value_key*, each entry holds that column instead of the row.
        Duplicate keys keep the last row.
        """
        make = row_factory(cls)
        cursor = self.execute()
        try:
            result: dict[Any, Any] = {}
            for row in _rows(cursor):
                result[row[key]] = row[value_key] if value_key is not None else make(row)
            return result
        finally:
            cursor.close()

    def column(self, index: int = 0) -> Any:
        """Execute and return one column of the first row, or ``None``."""
        cursor = self.execute()
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        if row is None:
            return None
        return row[index]

    def stream(
        self,
        handler: Callable[[Any], Any],
        cls: type | None = None,
        *,
        batch_size: int = 100,
    ) -> int:
        """Execute and call *handler* once per row without collecting them.

        Rows are fetched ``batch_size`` at a time. Returns the number of rows.
        Raises ``ValueError`` (and resets the builder) when *batch_size* is
        below 1.
        """
        if batch_size < 1:
            self.reset()
            msg = f"batch_size must be at least 1, got {batch_size}"
            raise ValueError(msg)
        make = row_factory(cls)
        cursor = self.execute()
        count = 0
        try:
            for row in _rows(cursor, batch_size):
                handler(make(row))
                count += 1
        finally:
            cursor.close()
        return count


def _is_sequence(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray, dict)):
        return False
    return isinstance(value, Iterable)


def _columns(cursor: Any) -> list[str]:
    return [desc[0] for desc in cursor.description or ()]


def _fetch(cursor: Any, size: int) -> list[dict[str, Any]]:
    columns = _columns(cursor)
    return [dict(zip(columns, row, strict=True)) for row in cursor.fetchmany(size)]


def _rows(cursor: Any, batch_size: int = 100) -> Iterable[dict[str, Any]]:
    columns = _columns(cursor)
    while True:
        batch = cursor.fetchmany(batch_size)
        if not batch:
            return
        for row in batch:
            yield dict(zip(columns, row, strict=True))
