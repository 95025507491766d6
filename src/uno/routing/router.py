"""Route keys, the group prefix stack, and the default dispatcher.

Routes are exact strings. A route registered inside nested groups is
stored under the groups' prefixes joined with its own path::

    stack = PrefixStack()
    with stack.push("/api/"):
        with stack.push("v2"):
            build_path(stack.prefixes, "users/")   # "/api/v2/users"

Dispatch is a plain function, ``exact_match(routes, path)``, so an App can
swap in pattern matching by registering a different ``router`` dependency.
"""

from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

# Characters stripped from both ends of every path piece.
_TRIM_CHARS = "/\n\t\v "


def trim_path(uri: str) -> str:
    """Strip slashes and whitespace from both ends of *uri*."""
    return uri.strip(_TRIM_CHARS)


def build_path(prefixes: Sequence[str], uri: str) -> str:
    """Build the full route key for *uri* under *prefixes*.

    Always starts with ``/`` and never ends with one (except the root).
    Empty prefixes (``group("/")``) add nothing.

    Examples::

        build_path([], "/users/")            -> "/users"
        build_path(["admin"], "")            -> "/admin"
        build_path(["api", "v2"], "/users")  -> "/api/v2/users"
        build_path([], "/")                  -> "/"
    """
    parts = [p for p in (trim_path(p) for p in prefixes) if p]
    parts.append(trim_path(uri))
    return "/" + trim_path("/".join(parts))


def exact_match(routes: Mapping[str, Callable[..., Any]], path: str) -> Callable[..., Any] | None:
    """Default dispatcher: the handler stored under *path*, or ``None``."""
    return routes.get(path)


class PrefixStack:
    """LIFO stack of group prefixes, pushed and popped as a scope."""

    __slots__ = ("_prefixes",)

    def __init__(self) -> None:
        self._prefixes: list[str] = []

    @property
    def prefixes(self) -> tuple[str, ...]:
        return tuple(self._prefixes)

    def __len__(self) -> int:
        return len(self._prefixes)

    @contextmanager
    def push(self, prefix: str) -> Iterator[str]:
        """Push the trimmed *prefix* for the duration of the ``with`` block.

        The pop happens even when the block raises, so a failing group body
        never leaks its prefix into later registrations.
        """
        trimmed = trim_path(prefix)
        self._prefixes.append(trimmed)
        try:
            yield trimmed
        finally:
            self._prefixes.pop()

    def build(self, uri: str) -> str:
        """Full route key for *uri* under the active prefixes."""
        return build_path(self._prefixes, uri)
