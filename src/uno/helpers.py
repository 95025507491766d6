"""Request helpers registered as core dependencies of every App.

Handlers usually receive these by name::

    @app.route("/search")
    def search(query, must_form, json):
        ...

They read the request bound to the current context by ``App.handle``.
Outside a request, readers behave as if the request were empty.
"""

import logging
from typing import Any

from uno.context import get_request, outgoing_cookies
from uno.errors import MissingParameter
from uno.http.cookies import SetCookie
from uno.http.request import Request
from uno.http.response import Redirect, Response
from uno.http.sessions import get_session
from uno.models import load
from uno.serialization import to_json

logger = logging.getLogger("uno.app")

_MISSING: Any = object()

_EMPTY = Request()

__all__ = [
    "cookie",
    "form",
    "json",
    "load",
    "log",
    "must_form",
    "must_query",
    "query",
    "raw_post",
    "redirect",
    "session",
]


def _current() -> Request:
    try:
        return get_request()
    except LookupError:
        return _EMPTY


def query(key: str, default: Any = None) -> Any:
    """Query string value for *key*, or *default*."""
    return _current().query.get(key, default)


def must_query(key: str) -> str:
    """Query string value for *key*; ``MissingParameter`` if absent or empty."""
    value = query(key)
    if value is None or value == "":
        raise MissingParameter("query", key)
    return value


def form(key: str, default: Any = None) -> Any:
    """Url-encoded form value for *key*, or *default*."""
    return _current().form.get(key, default)


def must_form(key: str) -> str:
    """Form value for *key*; ``MissingParameter`` if absent or empty."""
    value = form(key)
    if value is None or value == "":
        raise MissingParameter("form", key)
    return value


def raw_post() -> bytes:
    """The undecoded request body."""
    return _current().body


def cookie(name: str | None = None, value: Any = _MISSING, **options: Any) -> Any:
    """Read or queue cookies.

    - ``cookie()`` -> all request cookies
    - ``cookie(name)`` -> one request cookie, or ``None``
    - ``cookie(name, value, max_age=..., path=..., ...)`` -> queue a
      ``Set-Cookie`` on the response
    """
    if name is None:
        return dict(_current().cookies)
    if value is _MISSING:
        return _current().cookies.get(name)
    directive = SetCookie(name=name, value=str(value), **options)
    outgoing_cookies().append(directive)
    return directive


def session(key: str | None = None, value: Any = _MISSING) -> Any:
    """Read or write the signed session.

    - ``session()`` -> the session dict
    - ``session(key)`` -> one value, or ``None``
    - ``session(key, value)`` -> store *value* under *key*
    """
    data = get_session()
    if key is None:
        return data
    if value is _MISSING:
        return data.get(key)
    data[key] = value
    return None


def redirect(href: str, status: int = 302) -> Redirect:
    """A redirect for the handler to return."""
    return Redirect(url=href, status=status)


def json(data: Any, status: int = 200) -> Response:
    """A JSON response holding *data*."""
    return Response(body=to_json(data), status=status, content_type="application/json")


def log(msg: str) -> None:
    """Write *msg* to the ``uno.app`` logger."""
    logger.info("%s", msg)
