"""Multi-value parameters for query strings and url-encoded form bodies.

Both ``?tag=a&tag=b`` and a posted ``tag=a&tag=b`` body parse into the same
read-only mapping: indexing gives the first value, ``get_list`` all of them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any
from urllib.parse import parse_qsl

_TRUTHY = frozenset({"true", "1", "yes", "on"})


class QueryParams(Mapping[str, str]):
    """Read-only ``name -> [values]`` view of ``a=1&b=2&b=3`` data.

    Blank values are kept, so ``?flag=`` is present with ``""``.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, raw: str | bytes = "") -> None:
        text = raw.decode("latin-1") if isinstance(raw, bytes) else raw
        grouped: dict[str, tuple[str, ...]] = {}
        for name, value in parse_qsl(text, keep_blank_values=True):
            grouped[name] = (*grouped.get(name, ()), value)
        self._raw = text
        self._data = grouped

    @classmethod
    def from_dict(cls, data: Mapping[str, str | list[str]]) -> QueryParams:
        params = cls()
        params._data = {
            name: tuple(value) if isinstance(value, list) else (value,)
            for name, value in data.items()
        }
        return params

    @property
    def raw(self) -> str:
        """The undecoded source text."""
        return self._raw

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({dict(self)!r})"

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, ()))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """First value as an int; *default* when missing or not numeric."""
        return self._converted(key, int, default)

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        """``true``/``1``/``yes``/``on`` are True; any other present value is False."""
        return self._converted(key, lambda v: v.lower() in _TRUTHY, default)

    def _converted(self, key: str, convert: Callable[[str], Any], default: Any) -> Any:
        value = self.get(key)
        if value is None:
            return default
        try:
            return convert(value)
        except ValueError:
            return default
