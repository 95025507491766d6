"""Tests for uno.testing.TestClient."""

from uno import App, AppConfig
from uno.http.response import Response
from uno.testing import TestClient


class TestTestClient:
    def test_get(self) -> None:
        app = App()
        app.route("/", lambda: "home")
        response = TestClient(app).get("/")
        assert isinstance(response, Response)
        assert response.text == "home"

    def test_query_merged_with_path(self) -> None:
        app = App()
        app.route("/q", lambda request: request.query.raw)
        response = TestClient(app).get("/q?a=1", query={"b": "2"})
        assert response.text == "a=1&b=2"

    def test_method_visible_to_handler(self) -> None:
        app = App()
        app.route("/m", lambda request: request.method)
        client = TestClient(app)
        assert client.post("/m").text == "POST"
        assert client.request("DELETE", "/m").text == "DELETE"

    def test_deleted_cookie_dropped_from_jar(self) -> None:
        app = App()
        app.route("/in", lambda cookie: cookie("flash", "hi") and "")
        app.route("/out", lambda cookie: cookie("flash", "", max_age=0) and "")
        client = TestClient(app)
        client.get("/in")
        assert client.cookies == {"flash": "hi"}
        client.get("/out")
        assert client.cookies == {}

    def test_session_cookie_in_jar(self) -> None:
        app = App(AppConfig(secret_key="k"))
        app.route("/", lambda: "")
        client = TestClient(app)
        client.get("/")
        assert "uno_session" in client.cookies
