"""Row materialization with type coercion.

Converts raw database rows (column -> value dicts) into the caller's row
type: plain dicts, dataclasses, or ``Model`` subclasses. Dataclass mapping
uses field introspection, without metaclasses or descriptors.

Type coercion handles the mismatch between database drivers (SQLite returns
strings for some column types) and Python dataclass annotations. Fields
annotated as ``int`` will coerce string values like ``"45"`` to ``45``,
and empty strings to ``0``.
"""

import dataclasses
import types
from collections.abc import Callable
from typing import Any, TypeVar, get_args, get_origin

from uno.models import Model

# Scalar types we know how to coerce from database driver values.
_COERCIBLE: dict[type, Any] = {
    int: lambda v: int(v) if v != "" else 0,
    float: lambda v: float(v) if v != "" else 0.0,
    bool: lambda v: bool(int(v)) if isinstance(v, str) else bool(v),
    str: str,
}


def _build_coercion_map(cls: type) -> dict[str, type | None]:
    """Build a {field_name: target_type} map for coercible fields.

    Returns ``None`` for fields that don't need coercion (complex types,
    generics, etc.).
    """
    result: dict[str, type | None] = {}
    for f in dataclasses.fields(cls):
        annotation = f.type
        # X | None coerces to X
        if get_origin(annotation) is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            annotation = args[0] if len(args) == 1 else None
        result[f.name] = annotation if annotation in _COERCIBLE else None
    return result


def _coerce(value: Any, target: type | None) -> Any:
    if target is None or value is None or isinstance(value, target):
        return value
    return _COERCIBLE[target](value)


T = TypeVar("T")


def map_row(cls: type[T], row: dict[str, Any]) -> T:
    """Map a row dict to a dataclass instance.

    Extra columns are ignored (``SELECT *`` is fine even if the dataclass
    has fewer fields). Raises ``TypeError`` if required fields are missing.
    """
    if not dataclasses.is_dataclass(cls):
        msg = f"{cls.__name__} is not a dataclass"
        raise TypeError(msg)
    return _dataclass_factory(cls)(row)


def _dataclass_factory(cls: type) -> Callable[[dict[str, Any]], Any]:
    coercion = _build_coercion_map(cls)
    return lambda row: cls(
        **{k: _coerce(v, coercion[k]) for k, v in row.items() if k in coercion}
    )


def row_factory(cls: type | None) -> Callable[[dict[str, Any]], Any]:
    """Return a function turning one row dict into an instance of *cls*.

    ``None`` keeps the dict, dataclasses get per-field coercion, and
    ``Model`` subclasses are instantiated then loaded column by column.
    """
    if cls is None or cls is dict:
        return dict
    if dataclasses.is_dataclass(cls):
        return _dataclass_factory(cls)
    if isinstance(cls, type) and issubclass(cls, Model):
        return lambda row: cls().load(row)
    msg = f"cannot materialize rows as {cls!r}: use a dataclass or a Model subclass"
    raise TypeError(msg)
