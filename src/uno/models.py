"""Flat value objects bulk-assigned from name -> value mappings.

``load`` fills the public declared fields of any object from one or more
mappings. ``Model`` adds column-name translation, so a row with a
``user_name`` column lands on a ``userName`` field::

    class User(Model):
        id: int = 0
        userName: str = ""

    user = User().load({"id": 7, "user_name": "ada", "password": "x"})
    user.to_map()   # {"id": 7, "userName": "ada"}

Names that are not declared, or start with an underscore, are ignored.
"""

import dataclasses
import inspect
import re
from collections.abc import Mapping
from typing import Any, Self, TypeVar

_SNAKE = re.compile(r"_([a-z])")


def snake_to_camel(name: str) -> str:
    """``user_name`` -> ``userName``. Other text passes through."""
    return _SNAKE.sub(lambda m: m.group(1).upper(), name)


def public_fields(obj: object) -> tuple[str, ...]:
    """Public, non-ClassVar field names declared on *obj*'s class.

    Dataclass fields and class annotations (across the MRO) both count,
    as do public attributes already set on the instance.
    """
    cls = obj if isinstance(obj, type) else type(obj)
    names: dict[str, None] = {}
    if dataclasses.is_dataclass(cls):
        names.update((f.name, None) for f in dataclasses.fields(cls))
    for klass in reversed(cls.__mro__):
        for name, annotation in inspect.get_annotations(klass).items():
            if "ClassVar" in str(annotation):
                continue
            names[name] = None
    if not isinstance(obj, type):
        names.update((k, None) for k in getattr(obj, "__dict__", {}))
    return tuple(n for n in names if not n.startswith("_"))


def _merge(data: Mapping[str, Any], extra: tuple[Mapping[str, Any], ...]) -> dict[str, Any]:
    merged = dict(data)
    for more in extra:
        merged.update(more)
    return merged


T = TypeVar("T")


def load(instance: T, data: Mapping[str, Any], *extra: Mapping[str, Any]) -> T:
    """Assign every key of the merged mappings that names a public field.

    Later mappings override earlier ones. Returns *instance*.
    """
    merged = _merge(data, extra)
    for name in public_fields(instance):
        if name in merged:
            setattr(instance, name, merged[name])
    return instance


class Model:
    """Base for flat entities loaded from rows or request data."""

    def load(self, data: Mapping[str, Any], *extra: Mapping[str, Any]) -> Self:
        for name, value in _merge(data, extra).items():
            self.assign(name, value)
        return self

    def assign(self, name: str, value: Any) -> bool:
        """Set *name* (or its camelCase form) if it is a public field.

        Returns whether anything was assigned.
        """
        fields = public_fields(self)
        for candidate in (name, snake_to_camel(name)):
            if candidate in fields:
                setattr(self, candidate, value)
                return True
        return False

    def to_map(self) -> dict[str, Any]:
        return {name: getattr(self, name, None) for name in public_fields(self)}

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.to_map().items())
        return f"{type(self).__name__}({fields})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_map() == other.to_map()

    __hash__ = None  # type: ignore[assignment]
