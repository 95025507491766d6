"""Tests for uno.http.request and uno.http.query."""

import io

from uno.http.query import QueryParams
from uno.http.request import Request


class TestQueryParams:
    def test_first_value(self) -> None:
        params = QueryParams("a=1&b=2&b=3")
        assert params["b"] == "2"
        assert params.get_list("b") == ["2", "3"]

    def test_blank_values_kept(self) -> None:
        params = QueryParams("empty=&x=1")
        assert params.get("empty") == ""
        assert "empty" in params

    def test_default(self) -> None:
        assert QueryParams("").get("missing", "fallback") == "fallback"

    def test_get_int(self) -> None:
        params = QueryParams("page=3&bad=x")
        assert params.get_int("page") == 3
        assert params.get_int("bad", 1) == 1

    def test_get_bool(self) -> None:
        params = QueryParams("on=yes&off=0")
        assert params.get_bool("on") is True
        assert params.get_bool("off") is False
        assert params.get_bool("missing") is None

    def test_from_dict(self) -> None:
        params = QueryParams.from_dict({"a": "1", "b": ["2", "3"]})
        assert params["a"] == "1"
        assert params.get_list("b") == ["2", "3"]

    def test_bytes_input(self) -> None:
        assert QueryParams(b"name=ada")["name"] == "ada"


class TestRequestBuild:
    def test_defaults(self) -> None:
        request = Request()
        assert request.method == "GET"
        assert request.path == "/"
        assert len(request.query) == 0

    def test_method_upper_cased(self) -> None:
        assert Request.build("post", "/").method == "POST"

    def test_query_and_url(self) -> None:
        request = Request.build("GET", "/search", query_string="q=uno")
        assert request.query["q"] == "uno"
        assert request.url == "/search?q=uno"

    def test_form_parsed_for_post(self) -> None:
        request = Request.build(
            "POST",
            "/save",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=b"name=ada&age=36",
        )
        assert request.form["name"] == "ada"
        assert request.content_type == "application/x-www-form-urlencoded"

    def test_form_empty_for_json(self) -> None:
        request = Request.build(
            "POST", "/save", headers={"content-type": "application/json"}, body=b'{"a": 1}'
        )
        assert len(request.form) == 0
        assert request.json() == {"a": 1}

    def test_cookies_parsed(self) -> None:
        request = Request.build("GET", "/", headers={"Cookie": "theme=dark; lang=en"})
        assert request.cookies == {"theme": "dark", "lang": "en"}

    def test_is_method_case_insensitive(self) -> None:
        request = Request.build("POST", "/")
        assert request.is_method("post")
        assert not request.is_method("get")


class TestFromEnviron:
    def test_reads_wsgi_environ(self) -> None:
        body = b"title=hello"
        environ = {
            "REQUEST_METHOD": "POST",
            "PATH_INFO": "/posts",
            "QUERY_STRING": "draft=1",
            "CONTENT_TYPE": "application/x-www-form-urlencoded",
            "CONTENT_LENGTH": str(len(body)),
            "HTTP_X_REQUESTED_WITH": "test",
            "wsgi.input": io.BytesIO(body),
        }
        request = Request.from_environ(environ)
        assert request.method == "POST"
        assert request.path == "/posts"
        assert request.query["draft"] == "1"
        assert request.form["title"] == "hello"
        assert request.body == body
        assert request.headers["x-requested-with"] == "test"

    def test_missing_body(self) -> None:
        request = Request.from_environ({"REQUEST_METHOD": "GET", "PATH_INFO": "/"})
        assert request.body == b""
        assert request.text() == ""
