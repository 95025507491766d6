"""Tests for view rendering through the ``view`` dependency."""

import pytest

from uno import App, AppConfig
from uno.testing import TestClient


@pytest.fixture
def template_dir(tmp_path):
    (tmp_path / "hello.html").write_text("<p>Hello, {{ name }}!</p>", encoding="utf-8")
    (tmp_path / "list.html").write_text(
        "{% for item in items %}[{{ item }}]{% end %}", encoding="utf-8"
    )
    return tmp_path


class TestView:
    def test_render(self, template_dir) -> None:
        app = App(AppConfig(template_dir=template_dir))
        html = app.view("hello.html", {"name": "uno"})
        assert html.strip() == "<p>Hello, uno!</p>"

    def test_merged_data_maps(self, template_dir) -> None:
        app = App(AppConfig(template_dir=template_dir))
        html = app.view("hello.html", {"name": "first"}, {"name": "second"})
        assert "second" in html

    def test_autoescape(self, template_dir) -> None:
        app = App(AppConfig(template_dir=template_dir))
        html = app.view("hello.html", {"name": "<b>"})
        assert "<b>" not in html

    def test_loop(self, template_dir) -> None:
        app = App(AppConfig(template_dir=template_dir))
        assert app.view("list.html", {"items": [1, 2]}).strip() == "[1][2]"

    def test_handler_renders_view(self, template_dir) -> None:
        app = App(AppConfig(template_dir=template_dir))
        app.route("/", lambda view, query: view("hello.html", {"name": query("name", "you")}))
        assert "Hello, ada!" in TestClient(app).get("/?name=ada").text

    def test_environment_shared(self, template_dir) -> None:
        app = App(AppConfig(template_dir=template_dir))
        assert app.templates is app.templates
