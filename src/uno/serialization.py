"""JSON encoding used by the ``json`` helper and the ``json`` SQL binder.

Compact separators and raw (non-ASCII-escaped) text. Knows how to encode
``Model`` objects, dataclasses, dates, sets and bytes.
"""

import dataclasses
import json as json_module
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from uno.models import Model


def _default(obj: Any) -> Any:
    if isinstance(obj, Model):
        return obj.to_map()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


def to_json(data: Any, *, indent: int | None = None) -> str:
    """Encode *data* as JSON text."""
    separators = (",", ":") if indent is None else (",", ": ")
    return json_module.dumps(
        data,
        ensure_ascii=False,
        separators=separators,
        indent=indent,
        default=_default,
    )
