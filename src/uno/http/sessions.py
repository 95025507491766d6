"""Signed cookie sessions.

The session is a plain dict, JSON-serialized and signed with
``itsdangerous`` into a single cookie. While a request is handled the dict
is reachable through ``get_session()`` (and the ``session`` helper); the
App signs it back onto the response afterwards.

Sessions are signed, not encrypted: don't keep secrets in them.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from uno.errors import ConfigurationError
from uno.http.cookies import SetCookie
from uno.http.request import Request

_SALT = "uno.session"

_session_var: ContextVar[dict[str, Any] | None] = ContextVar("uno_session", default=None)


def get_session() -> dict[str, Any]:
    """Return the session dict of the request being handled.

    Raises ``LookupError`` outside a request, or when the App has no
    ``secret_key`` and therefore no sessions.
    """
    session = _session_var.get()
    if session is None:
        msg = (
            "No active session. Set AppConfig.secret_key to enable sessions, "
            "and access them while a request is being handled."
        )
        raise LookupError(msg)
    return session


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Cookie settings for the session. ``secret_key`` is required."""

    secret_key: str
    cookie_name: str = "uno_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


class SessionStore:
    """Reads, exposes and re-signs the session for one request at a time::

        store = SessionStore(SessionConfig(secret_key="s3cret"))
        with store.activate(request) as session:
            session["visits"] = session.get("visits", 0) + 1
        response = response.with_cookie(store.cookie(session))
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt=_SALT)

    @property
    def config(self) -> SessionConfig:
        return self._config

    def load(self, request: Request) -> dict[str, Any]:
        """The verified session carried by *request*; ``{}`` if absent, forged or expired."""
        token = request.cookies.get(self._config.cookie_name)
        if not token:
            return {}
        try:
            data = self._serializer.loads(token, max_age=self._config.max_age)
        except BadData:
            return {}
        return data if isinstance(data, dict) else {}

    @contextmanager
    def activate(self, request: Request) -> Iterator[dict[str, Any]]:
        """Make the session loaded from *request* current for the ``with`` block."""
        session = self.load(request)
        token = _session_var.set(session)
        try:
            yield session
        finally:
            _session_var.reset(token)

    def cookie(self, session: dict[str, Any]) -> SetCookie:
        """Sign *session* into the directive that carries it back to the client."""
        cfg = self._config
        return SetCookie(
            name=cfg.cookie_name,
            value=self._serializer.dumps(session),
            max_age=cfg.max_age,
            path=cfg.path,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )
