"""Immutable HTTP request.

Everything a handler can read about the request is captured up front:
method, path, headers, query, cookies, the raw body, and the parsed form.
The request is honest about what it is: received data that doesn't change.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from uno.http.cookies import parse_cookies
from uno.http.query import QueryParams

_FORM_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Header names are lower-cased. ``form`` holds url-encoded body fields
    and is empty for any other content type.
    """

    method: str = "GET"
    path: str = "/"
    headers: Mapping[str, str] = field(default_factory=dict)
    query: QueryParams = field(default_factory=QueryParams)
    form: QueryParams = field(default_factory=QueryParams)
    cookies: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw}"
        return self.path

    def is_method(self, method: str) -> bool:
        """Case-insensitive comparison with the request method."""
        return self.method.casefold() == method.casefold()

    # -- Body access --

    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json_module.loads(self.body)

    # -- Factories --

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        query_string: str = "",
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        """Create a Request from already-split parts, parsing query, cookies and form."""
        lowered = {k.lower(): v for k, v in (headers or {}).items()}
        content_type = lowered.get("content-type", "")
        form = (
            QueryParams(body)
            if method.upper() != "GET" and content_type.startswith(_FORM_TYPE)
            else QueryParams()
        )
        return cls(
            method=method.upper(),
            path=path or "/",
            headers=lowered,
            query=QueryParams(query_string),
            form=form,
            cookies=parse_cookies(lowered.get("cookie", "")),
            body=body,
        )

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> Request:
        """Create a Request from a WSGI environ, reading the whole body."""
        headers: dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-").lower()] = value
        if environ.get("CONTENT_TYPE"):
            headers["content-type"] = environ["CONTENT_TYPE"]
        if environ.get("CONTENT_LENGTH"):
            headers["content-length"] = environ["CONTENT_LENGTH"]

        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = environ.get("wsgi.input")
        body = stream.read(length) if stream is not None and length > 0 else b""

        # PEP 3333: PATH_INFO is latin-1 decoded bytes
        path = environ.get("PATH_INFO", "/").encode("latin-1").decode("utf-8", "replace")
        return cls.build(
            environ.get("REQUEST_METHOD", "GET"),
            path,
            query_string=environ.get("QUERY_STRING", ""),
            headers=headers,
            body=body,
        )
