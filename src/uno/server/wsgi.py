"""WSGI surface: response serialization and a development server.

``App`` is itself a WSGI callable; this module holds the pieces that turn
a ``Response`` into ``start_response`` arguments, plus ``serve`` for local
development on top of ``wsgiref``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any
from wsgiref.simple_server import make_server

from uno.http.response import Response

if TYPE_CHECKING:
    from uno.app import App

logger = logging.getLogger("uno.server")

StartResponse = Callable[[str, list[tuple[str, str]]], Any]


def wsgi_headers(response: Response) -> list[tuple[str, str]]:
    """Header list for ``start_response``, including Set-Cookie lines."""
    body = response.body.encode("utf-8") if isinstance(response.body, str) else response.body
    headers = [
        ("Content-Type", response.content_type),
        ("Content-Length", str(len(body))),
    ]
    headers.extend(response.headers)
    headers.extend(("Set-Cookie", c.to_header_value()) for c in response.cookies)
    return headers


def send(response: Response, start_response: StartResponse) -> Iterable[bytes]:
    """Start the WSGI response and return the body iterable."""
    body = response.body.encode("utf-8") if isinstance(response.body, str) else response.body
    start_response(response.status_line, wsgi_headers(response))
    return [body]


def serve(app: App, host: str | None = None, port: int | None = None) -> None:
    """Run *app* on the stdlib development server until interrupted."""
    host = host or app.config.host
    port = port or app.config.port
    logging.basicConfig(
        level=app.config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    with make_server(host, port, app) as httpd:
        logger.info("Serving on http://%s:%d", host, port)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")
