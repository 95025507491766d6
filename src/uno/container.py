"""Name-keyed dependency container with autowiring.

Factories are registered under case-insensitive names. Resolving a name
calls its factory through ``Container.call``, which resolves the factory's
own dependencies first: by the names it declared at registration time,
or by its parameter names when it declared none::

    container = Container()
    container.register("config", lambda: AppConfig())
    container.register("db", lambda config: Database(config.database_url))

    db = container.resolve("db")  # config resolved first, db built once

Cached names (the default) run their factory at most once per container
and hand back the same object afterwards. A name registered with the
``#`` sigil, or with ``cached=False``, re-runs its factory and the whole
chain below it on every resolution.

Free-threading safety:
    - First resolution of a cached name runs under a re-entrant lock with a
      double check, so concurrent first requests build one instance.
    - The resolution stack used for cycle detection lives in a ContextVar,
      so each thread/task tracks its own chain.
"""

import inspect
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, TypeVar

from uno.errors import CyclicDependency, UnresolvedDependency

NOCACHE_SIGIL = "#"

_NEEDS_ATTR = "__uno_needs__"


class _Absent:
    """Sentinel type for ``resolve_optional`` misses."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Any = _Absent()

_UNSET: Any = object()


F = TypeVar("F", bound=Callable[..., Any])


def needs(*names: str) -> Callable[[F], F]:
    """Declare a callable's dependency names explicitly.

    Declared names take precedence over signature introspection and are
    passed positionally, in order::

        @needs("db", "config")
        def make_repo(database, cfg):
            return UserRepo(database, cfg.sql_dir)
    """

    def decorator(func: F) -> F:
        setattr(func, _NEEDS_ATTR, tuple(n.lower() for n in names))
        return func

    return decorator


@dataclass(slots=True)
class Entry:
    """A registry entry. ``instance`` holds the memoized value once built."""

    name: str
    factory: Callable[..., Any]
    cached: bool = True
    needs: tuple[str, ...] | None = None
    instance: Any = field(default=_UNSET, repr=False)

    @property
    def built(self) -> bool:
        return self.instance is not _UNSET


class Container:
    """Registry of named factories with lazy singleton caching."""

    __slots__ = ("_entries", "_lock", "_stack")

    def __init__(self) -> None:
        self._entries: dict[str, Entry] = {}
        self._lock = threading.RLock()
        self._stack: ContextVar[tuple[str, ...]] = ContextVar("uno_resolving", default=())
        self.register("container", lambda: self)

    # -- Registration --

    def register(
        self,
        name: str,
        factory: Callable[..., Any],
        *,
        cached: bool = True,
        needs: tuple[str, ...] | list[str] | None = None,
    ) -> None:
        """Store *factory* under *name*, replacing any previous entry."""
        if name.startswith(NOCACHE_SIGIL):
            name = name[len(NOCACHE_SIGIL) :]
            cached = False
        key = name.lower()
        declared = tuple(n.lower() for n in needs) if needs is not None else None
        self._entries[key] = Entry(key, factory, cached, declared)

    def has(self, name: str) -> bool:
        return name.lower() in self._entries

    def names(self) -> list[str]:
        """Registered names, in registration order."""
        return list(self._entries)

    # -- Resolution --

    def resolve(self, name: str) -> Any:
        """Return the value for *name*, building it (and its chain) if needed.

        Raises ``UnresolvedDependency`` if *name*, or anything it needs, is
        not registered, and ``CyclicDependency`` if the chain loops back.
        """
        key = name.lower()
        entry = self._entries.get(key)
        if entry is None:
            raise UnresolvedDependency(key)

        with self._resolving(key):
            if not entry.cached:
                return self.call(entry.factory, needs=entry.needs)
            if entry.built:
                return entry.instance
            with self._lock:
                if not entry.built:
                    entry.instance = self.call(entry.factory, needs=entry.needs)
                return entry.instance

    def resolve_optional(self, name: str) -> Any:
        """Like ``resolve``, but return ``ABSENT`` when *name* is not registered.

        Only a miss on *name* itself is absorbed; a missing dependency
        further down the chain still raises.
        """
        if not self.has(name):
            return ABSENT
        return self.resolve(name)

    def try_resolve(self, name: str) -> tuple[Any, bool]:
        """Return ``(value, True)`` when *name* resolves, else ``(None, False)``."""
        value = self.resolve_optional(name)
        if value is ABSENT:
            return None, False
        return value, True

    def call(
        self,
        func: Callable[..., Any],
        *,
        needs: tuple[str, ...] | None = None,
    ) -> Any:
        """Invoke *func* with its dependencies resolved by name.

        Names come from *needs*, then from ``@needs`` on *func*, then from
        its signature. Parameters with a default keep it when their name is
        not registered; ``*args`` and ``**kwargs`` are left empty.
        """
        declared = needs if needs is not None else getattr(func, _NEEDS_ATTR, None)
        if declared is not None:
            return func(*(self.resolve(n) for n in declared))

        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for param in inspect.signature(func).parameters.values():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if param.default is not param.empty and not self.has(param.name):
                continue
            value = self.resolve(param.name)
            if param.kind is param.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[param.name] = value
        return func(*args, **kwargs)

    @contextmanager
    def _resolving(self, key: str) -> Iterator[None]:
        stack = self._stack.get()
        if key in stack:
            raise CyclicDependency((*stack, key))
        token = self._stack.set((*stack, key))
        try:
            yield
        finally:
            self._stack.reset(token)
