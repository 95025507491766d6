"""Identifier escaping, parameter types, and path containment.

Values never enter SQL text: ``Dao.bind`` records them and leaves a ``?``
behind. Identifiers (table and column names) cannot be bound, so they go
through an escaper instead, which refuses anything that could close the
quoting or start a comment::

    mysql_style_escaper("users.name")   # "`users`.`name`"
    mysql_style_escaper("name`--")      # UnsafeIdentifier
"""

from __future__ import annotations

import os
import re
from enum import Enum
from typing import TYPE_CHECKING, Any

from uno.data.errors import InsecureFileAccess, UnsafeIdentifier
from uno.serialization import to_json

if TYPE_CHECKING:
    from uno.data.dao import Dao

# Quote characters of any dialect, and both SQL comment openers.
_UNSAFE = re.compile(r"['\"`]|--|/\*")


class ParamType(Enum):
    """Type hint recorded with each bound value, applied at execution."""

    STR = "str"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    NULL = "null"
    LOB = "lob"

    def convert(self, value: Any) -> Any:
        """Coerce *value* for the driver. ``None`` stays ``None``."""
        if value is None or self is ParamType.NULL:
            return None
        match self:
            case ParamType.STR:
                return value if isinstance(value, str) else str(value)
            case ParamType.INT:
                return int(value)
            case ParamType.FLOAT:
                return float(value)
            case ParamType.BOOL:
                if isinstance(value, str):
                    return value.lower() in ("true", "1", "yes", "on")
                return bool(value)
            case ParamType.LOB:
                if isinstance(value, str):
                    return value.encode("utf-8")
                return bytes(value)
        return value


def _check_identifier(identifier: str) -> list[str]:
    if _UNSAFE.search(identifier):
        raise UnsafeIdentifier(identifier)
    return identifier.split(".")


def mysql_style_escaper(identifier: str) -> str:
    """Back-tick-quote each dot-separated segment of *identifier*."""
    return ".".join(f"`{part}`" for part in _check_identifier(identifier))


def ansi_style_escaper(identifier: str) -> str:
    """Double-quote each dot-separated segment of *identifier*."""
    return ".".join(f'"{part}"' for part in _check_identifier(identifier))


def must_in_dir(directory: str | os.PathLike[str], file: str | os.PathLike[str]) -> str:
    """Return the real path of *file*, which must lie inside *directory*.

    Both paths are resolved (symlinks, ``..``) before comparing whole path
    components, so ``/sql2/x`` is not inside ``/sql``.
    """
    root = os.path.realpath(directory)
    target = os.path.realpath(file)
    try:
        inside = os.path.commonpath([root, target]) == root
    except ValueError:
        inside = False
    if not inside:
        raise InsecureFileAccess(target)
    return target


def json_binder(dao: Dao, data: Any) -> str:
    """Bind *data* as its JSON text."""
    return dao.bind(to_json(data), ParamType.STR)
