"""Uno application class.

One object owns the dependency container, the route table, the group
prefix stack and the event bus. Everything a handler needs is resolved
by name when it runs::

    app = App(AppConfig(database_url="sqlite:///app.db"))

    app.register("users", lambda dao: UserRepo(dao))

    with app.group("/api"):
        @app.route("/users")
        def list_users(users, json):
            return json(users.all())

    app.run("/api/users")

``run`` dispatches one path and returns what the handler returned;
``handle`` wraps it for a full request (context, sessions, cookies, the
error handler) and is what the WSGI entry point calls.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Mapping
from contextlib import AbstractContextManager, nullcontext
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from uno import helpers
from uno.config import AppConfig
from uno.container import Container
from uno.context import cookies_var, get_request, request_var
from uno.errors import NoSuchMethod, RouteNotFound
from uno.events import EventBus
from uno.http.cookies import SetCookie
from uno.http.request import Request
from uno.http.response import Response, to_response
from uno.http.sessions import SessionConfig, SessionStore
from uno.routing.router import PrefixStack, exact_match
from uno.server.errors import ErrorHandler, make_error_handler
from uno.server.wsgi import StartResponse, send
from uno.templating import create_environment, render_view

if TYPE_CHECKING:
    from uno.data.database import Database

Handler = Callable[..., Any]

_HTTP_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"}
)

# Helpers registered under their own names on every App.
_CORE_HELPERS = (
    "json",
    "redirect",
    "load",
    "query",
    "must_query",
    "form",
    "must_form",
    "raw_post",
    "cookie",
    "session",
    "log",
)


class App:
    """The uno application.

    Routes and dependencies are registered during setup; the route table
    and registry stay mutable so late registrations simply win.

    Thread safety:
        Registration is expected to happen once, at import time. Request
        handling only reads the route table; cached dependencies are built
        once under the container's lock, and request data lives in
        ContextVars.
    """

    __slots__ = (
        "_container",
        "_events",
        "_on_error",
        "_prefixes",
        "_routes",
        "_routes_lock",
        "_sessions",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        deps: Mapping[str, Callable[..., Any]] | None = None,
        db: Database | str | None = None,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._container = Container()
        self._events = EventBus()
        self._prefixes = PrefixStack()
        self._routes: dict[str, Handler] = {}
        self._routes_lock = threading.Lock()
        self._on_error: ErrorHandler = on_error or make_error_handler(self.config.debug)
        self._sessions: SessionStore | None = (
            SessionStore(
                SessionConfig(
                    secret_key=self.config.secret_key,
                    cookie_name=self.config.session_cookie,
                    max_age=self.config.session_max_age,
                )
            )
            if self.config.secret_key
            else None
        )

        self._register_core()
        self._register_database(db if db is not None else self.config.database_url)
        for name, factory in (deps or {}).items():
            self.register(name, factory)

    def _register_core(self) -> None:
        self.register("app", lambda: self)
        self.register("config", lambda: self.config)
        self.register("router", lambda: exact_match)
        self.register("on_error", lambda: self._on_error)
        self.register("#request", get_request)
        self.register("templates", lambda config: create_environment(config))
        self.register("view", lambda templates: partial(render_view, templates))
        for name in _CORE_HELPERS:
            func = getattr(helpers, name)
            self.register(name, lambda func=func: func, needs=())

    def _register_database(self, db: Database | str | None) -> None:
        if db is None:
            return
        if isinstance(db, str):
            from uno.data.database import Database as _Database

            url = db
            self.register(
                "db",
                lambda config: _Database(url, sql_dir=config.sql_dir, echo=config.db_echo),
            )
        else:
            self.register("db", lambda: db)
        self.register("#dao", lambda db: db.dao())

    # -- Dependencies --

    def register(
        self,
        name: str,
        factory: Callable[..., Any],
        *,
        cached: bool = True,
        needs: Iterable[str] | None = None,
    ) -> None:
        """Register *factory* under *name* (``#name`` for a fresh value per resolution)."""
        self._container.register(
            name, factory, cached=cached, needs=tuple(needs) if needs is not None else None
        )

    def resolve(self, name: str) -> Any:
        return self._container.resolve(name)

    def resolve_optional(self, name: str) -> Any:
        return self._container.resolve_optional(name)

    def try_resolve(self, name: str) -> tuple[Any, bool]:
        return self._container.try_resolve(name)

    def call(self, func: Callable[..., Any]) -> Any:
        """Invoke *func* with its parameters resolved by name."""
        return self._container.call(func)

    @property
    def container(self) -> Container:
        return self._container

    # -- Events --

    def on(self, name: str, handler: Handler | None = None) -> Any:
        """Subscribe *handler* to event *name*; decorator when *handler* is omitted."""
        if handler is not None:
            self._events.on(name, handler)
            return handler

        def decorator(func: Handler) -> Handler:
            self._events.on(name, func)
            return func

        return decorator

    def emit(self, name: str, *args: Any) -> None:
        self._events.emit(name, *args)

    @property
    def events(self) -> EventBus:
        return self._events

    # -- Routing --

    def group(self, prefix: str, body: Handler | None = None) -> AbstractContextManager[str] | None:
        """Register routes under *prefix*.

        With *body*, the prefix is pushed, *body* runs through ``call``
        (so it may ask for dependencies by name), and the prefix is popped
        even if *body* raises. Without *body*, returns the scope as a
        context manager::

            with app.group("admin"):
                app.route("users", list_users)    # "/admin/users"
        """
        scope = self._prefixes.push(prefix)
        if body is None:
            return scope
        with scope:
            self.call(body)
        return None

    def route(self, uri: str, handler: Handler | None = None) -> Any:
        """Store *handler* under the full path for *uri*; decorator when omitted.

        Registering the same full path again replaces the earlier handler.
        """
        path = self._prefixes.build(uri)
        if handler is not None:
            with self._routes_lock:
                self._routes[path] = handler
            return handler

        def decorator(func: Handler) -> Handler:
            with self._routes_lock:
                self._routes[path] = func
            return func

        return decorator

    @property
    def routes(self) -> Mapping[str, Handler]:
        """Read-only view of the route table."""
        return MappingProxyType(self._routes)

    @property
    def prefixes(self) -> tuple[str, ...]:
        """Group prefixes active right now, outermost first."""
        return self._prefixes.prefixes

    def run(self, uri: str) -> Any:
        """Dispatch *uri* and return the handler's result.

        Raises ``RouteNotFound`` (before emitting anything) when the
        ``router`` dependency finds no handler. Emits ``route.before`` and,
        only if the handler returns normally, ``route.after``.
        """
        path = self._prefixes.build(uri)
        router = self.resolve("router")
        handler = router(self.routes, path)
        if handler is None:
            raise RouteNotFound(path)

        self.emit("route.before", handler, path)
        result = self.call(handler)
        self.emit("route.after", handler, path)
        return result

    # -- Request handling --

    def handle(self, request: Request) -> Response:
        """Serve one request, always returning a Response.

        Any exception from routing, the handler or its events goes to the
        error handler this App was built with.
        """
        request_token = request_var.set(request)
        cookies: list[SetCookie] = []
        cookies_token = cookies_var.set(cookies)
        scope = (
            self._sessions.activate(request) if self._sessions is not None else nullcontext(None)
        )
        try:
            with scope as session:
                try:
                    response = to_response(self.run(request.path))
                except Exception as exc:
                    response = self._on_error(exc)
        finally:
            cookies_var.reset(cookies_token)
            request_var.reset(request_token)

        for directive in cookies:
            response = response.with_cookie(directive)
        if self._sessions is not None and session is not None:
            response = response.with_cookie(self._sessions.cookie(session))
        return response

    def __call__(self, environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        """WSGI entry point."""
        return send(self.handle(Request.from_environ(environ)), start_response)

    # -- Dynamic lookup --

    def __getattr__(self, name: str) -> Any:
        """Resolve unknown attributes as dependency names.

        ``app.db`` and ``app.json(data)`` resolve registered names. Failing
        that, ``app.is_post()`` / ``app.isGet()`` compare the rest of the
        name with the current request method, for standard HTTP methods
        only. Anything else raises ``NoSuchMethod``, which is also an
        ``UnresolvedDependency``.
        """
        if name.startswith("_"):
            raise AttributeError(name)
        value, found = self._container.try_resolve(name)
        if found:
            return value
        method = name[2:].lstrip("_").upper()
        if name[:2].lower() == "is" and method in _HTTP_METHODS:
            return partial(_request_method_is, method)
        raise NoSuchMethod(name)


def _request_method_is(method: str) -> bool:
    try:
        return get_request().is_method(method)
    except LookupError:
        return False
