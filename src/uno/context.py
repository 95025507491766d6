"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this thread/task.
- ``outgoing_cookies``: Set-Cookie directives queued by the ``cookie`` helper.

Both are set by ``App.handle`` and reset after each request. Accessing
them outside a request raises ``LookupError``.

Thread safety:
    ``ContextVar`` is thread-local under WSGI servers and task-local under
    asyncio. No locks needed.
"""

from contextvars import ContextVar

from uno.http.cookies import SetCookie
from uno.http.request import Request

request_var: ContextVar[Request] = ContextVar("uno_request")
"""The current request. Set by ``App.handle`` before dispatch."""

cookies_var: ContextVar[list[SetCookie]] = ContextVar("uno_cookies")


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def outgoing_cookies() -> list[SetCookie]:
    """The mutable list of cookies queued for the current response."""
    return cookies_var.get()
