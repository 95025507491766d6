"""Data layer error hierarchy."""

from uno.errors import UnoError


class DataError(UnoError):
    """Base for all uno.data errors."""


class ConnectionError(DataError):  # noqa: A001
    """Raised when a database connection cannot be established."""


class QueryError(DataError):
    """Raised when the relational client rejects or fails a statement."""


class PendingStatement(DataError):  # noqa: N818
    """A statement is already pending on this Dao.

    One Dao builds one statement at a time: execute or ``reset()`` it
    (or take a fresh builder) before setting new SQL.
    """

    def __init__(self, pending: str) -> None:
        super().__init__(f"a statement is already pending: {pending[:80]!r}")
        self.pending = pending


class UnsafeIdentifier(DataError, ValueError):  # noqa: N818
    """An SQL identifier contains a quote or comment sequence."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"unsafe SQL identifier: {identifier!r}")
        self.identifier = identifier


class InsecureFileAccess(DataError, ValueError):  # noqa: N818
    """A SQL template path resolves outside the configured SQL directory."""

    def __init__(self, path: str) -> None:
        super().__init__(f"insecure file access: {path}")
        self.path = path


class UnknownBinder(DataError, AttributeError):  # noqa: N818
    """No binder is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no binder: {name}")
        self.name = name


class TooManyRows(DataError):  # noqa: N818
    """A query expected to return at most one row returned more."""

    def __init__(self, count: int) -> None:
        super().__init__(f"returned more than one row ({count}+)")
        self.count = count
