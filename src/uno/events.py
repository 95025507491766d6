"""Synchronous named-event bus.

Handlers subscribe to an event name and are called, in the order they
subscribed, every time that name is emitted. The App emits
``route.before`` and ``route.after`` around each handler::

    bus = EventBus()
    bus.on("route.before", lambda handler, path: log(f"-> {path}"))
    bus.emit("route.before", handler, "/users")

There is no unsubscribe and no error isolation: a failing handler stops
the emission and the exception reaches whoever called ``emit``.

Free-threading safety:
    - ``on`` and the snapshot taken by ``emit`` share a Lock, so a
      subscription racing an emission never sees a half-updated list.
    - Handlers run outside the lock.
"""

import threading
from collections.abc import Callable
from typing import Any

Handler = Callable[..., Any]


class EventBus:
    """Name -> ordered handler list."""

    __slots__ = ("_handlers", "_lock")

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._lock = threading.Lock()

    def on(self, name: str, handler: Handler) -> None:
        """Append *handler* to the list for *name*."""
        with self._lock:
            self._handlers.setdefault(name, []).append(handler)

    def emit(self, name: str, *args: Any) -> None:
        """Call every handler for *name* with *args*, in registration order."""
        for handler in self.handlers(name):
            handler(*args)

    def handlers(self, name: str) -> tuple[Handler, ...]:
        """Snapshot of the handlers currently subscribed to *name*."""
        with self._lock:
            return tuple(self._handlers.get(name, ()))
