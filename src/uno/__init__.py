"""Uno: a single-object web micro-framework.

Name-based dependency injection, exact-path routing with group prefixes,
an event bus, and a thin SQL layer with templated query files.

Basic usage::

    from uno import App

    app = App()

    @app.route("/hello")
    def hello(query):
        return f"Hello, {query('name', 'world')}!"

    app.run("/hello")

Data access::

    from uno.data import Database
    app = App(db=Database("sqlite:///app.db", sql_dir="sql"))

    @app.route("/users")
    def users(dao, json):
        return json(dao.sql("SELECT * FROM users").list())
"""

__version__ = "0.1.0"
__all__ = [
    "ABSENT",
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "Container",
    "CyclicDependency",
    "DependencyError",
    "EventBus",
    "HTTPError",
    "MissingParameter",
    "Model",
    "NoSuchMethod",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "RouteNotFound",
    "UnoError",
    "UnresolvedDependency",
    "get_request",
    "needs",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import uno`` fast while providing a clean top-level API.
    """
    if name == "App":
        from uno.app import App

        return App

    if name == "AppConfig":
        from uno.config import AppConfig

        return AppConfig

    if name in ("ABSENT", "Container", "needs"):
        from uno import container as _container

        return getattr(_container, name)

    if name == "EventBus":
        from uno.events import EventBus

        return EventBus

    if name == "Model":
        from uno.models import Model

        return Model

    if name == "Request":
        from uno.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from uno.http import response as _resp

        return getattr(_resp, name)

    if name == "get_request":
        from uno.context import get_request

        return get_request

    if name in (
        "BadRequest",
        "ConfigurationError",
        "CyclicDependency",
        "DependencyError",
        "HTTPError",
        "MissingParameter",
        "NoSuchMethod",
        "NotFound",
        "RouteNotFound",
        "UnoError",
        "UnresolvedDependency",
    ):
        from uno import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
