"""Tests for uno.errors and the default error handler."""

import logging

import pytest

from uno.errors import (
    BadRequest,
    CyclicDependency,
    DependencyError,
    HTTPError,
    MissingParameter,
    NoSuchMethod,
    NotFound,
    RouteNotFound,
    UnoError,
    UnresolvedDependency,
)
from uno.server.errors import format_compact_traceback, make_error_handler, status_for


class TestHierarchy:
    def test_http_errors_are_uno_errors(self) -> None:
        assert issubclass(HTTPError, UnoError)
        assert issubclass(RouteNotFound, NotFound)
        assert issubclass(MissingParameter, BadRequest)

    def test_dependency_errors(self) -> None:
        assert issubclass(UnresolvedDependency, DependencyError)
        assert issubclass(CyclicDependency, DependencyError)

    def test_no_such_method_is_attribute_error(self) -> None:
        assert issubclass(NoSuchMethod, AttributeError)
        assert issubclass(NoSuchMethod, UnresolvedDependency)
        assert NoSuchMethod("x").name == "x"


class TestHTTPError:
    def test_str(self) -> None:
        assert str(HTTPError(status=418, detail="teapot")) == "418: teapot"
        assert str(HTTPError(status=500)) == "500"

    def test_frozen(self) -> None:
        err = NotFound()
        with pytest.raises(AttributeError):
            err.status = 500  # type: ignore[misc]

    def test_route_not_found(self) -> None:
        err = RouteNotFound("/x")
        assert err.status == 404
        assert err.path == "/x"
        assert err.detail == "route not found: /x"

    def test_missing_parameter(self) -> None:
        err = MissingParameter("form", "email")
        assert err.status == 400
        assert err.source == "form"
        assert str(err) == "400: form key required: email"


class TestStatusFor:
    def test_http_error(self) -> None:
        assert status_for(RouteNotFound("/")) == 404

    def test_other(self) -> None:
        assert status_for(ValueError()) == 500


class TestErrorHandler:
    def test_client_error_shows_detail(self) -> None:
        response = make_error_handler()(BadRequest("need <id>"))
        assert response.status == 400
        assert response.text == "need &lt;id&gt;"

    def test_server_error_hides_detail(self) -> None:
        response = make_error_handler()(RuntimeError("db password"))
        assert response.status == 500
        assert response.text == "Internal Server Error"

    def test_server_error_logged(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="uno.server"):
            make_error_handler()(RuntimeError("kaboom"))
        assert "kaboom" in caplog.text

    def test_debug_page(self) -> None:
        try:
            raise KeyError("missing")
        except KeyError as exc:
            response = make_error_handler(debug=True)(exc)
        assert response.status == 500
        assert "<pre" in response.text
        assert "KeyError" in response.text
        assert "Stack Trace" in response.text

    def test_error_headers_copied(self) -> None:
        err = HTTPError(status=401, detail="login", headers=(("WWW-Authenticate", "Basic"),))
        response = make_error_handler()(err)
        assert response.header("WWW-Authenticate") == "Basic"


class TestCompactTraceback:
    def test_includes_message(self) -> None:
        try:
            raise ValueError("bad value")
        except ValueError as exc:
            text = format_compact_traceback(exc)
        assert text.startswith("ValueError: bad value")
        assert "test_errors.py" in text
