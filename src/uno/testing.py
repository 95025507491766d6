"""Synchronous test client for uno applications.

Builds the same ``Request`` objects the WSGI entry point builds and sends
them through ``App.handle``. No server, no sockets. Cookies set by a
response are sent back on later requests, so signed sessions persist
across calls within one client.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from uno.app import App
from uno.http.request import Request
from uno.http.response import Response
from uno.serialization import to_json


class TestClient:
    """In-process client returning the production ``Response`` type.

    Usage::

        client = TestClient(app)
        response = client.get("/users", query={"page": "2"})
        assert response.status == 200
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("app", "cookies")

    def __init__(self, app: App) -> None:
        self.app = app
        self.cookies: dict[str, str] = {}

    def request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
    ) -> Response:
        """Send one request and remember any cookies it sets."""
        path, _, query_string = path.partition("?")
        if query:
            extra = urlencode(query)
            query_string = f"{query_string}&{extra}" if query_string else extra

        merged = dict(headers or {})
        if self.cookies:
            jar = "; ".join(f"{k}={v}" for k, v in self.cookies.items())
            merged.setdefault("cookie", jar)

        request = Request.build(method, path, query_string=query_string, headers=merged, body=body)
        response = self.app.handle(request)
        for cookie in response.cookies:
            if cookie.max_age == 0:
                self.cookies.pop(cookie.name, None)
            else:
                self.cookies[cookie.name] = cookie.value
        return response

    def get(
        self,
        path: str,
        *,
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        return self.request("GET", path, query=query, headers=headers)

    def post(
        self,
        path: str,
        *,
        form: dict[str, str] | None = None,
        json: Any = None,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a POST with a url-encoded *form*, a *json* document, or raw *body*."""
        extra_headers: dict[str, str] = {}
        request_body = body or b""
        if form is not None:
            request_body = urlencode(form).encode("utf-8")
            extra_headers["content-type"] = "application/x-www-form-urlencoded"
        elif json is not None:
            request_body = to_json(json).encode("utf-8")
            extra_headers["content-type"] = "application/json"
        merged = {**extra_headers, **(headers or {})}
        return self.request("POST", path, headers=merged, body=request_body)
