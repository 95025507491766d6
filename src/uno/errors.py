"""Uno exception hierarchy.

Shared across the container, router, App and data layer so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class UnoError(Exception):
    """Base for all uno-specific errors."""


class ConfigurationError(UnoError):
    """Raised when app configuration is invalid."""


@dataclass(frozen=True, slots=True)
class HTTPError(UnoError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, helpers, or handlers. ``App.handle`` passes
    these to the error handler, which uses ``status`` for the response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: nothing to serve at this path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class RouteNotFound(NotFound):  # noqa: N818
    """No handler is registered for the built path."""

    def __init__(self, path: str) -> None:
        super().__init__(detail=f"route not found: {path}")
        object.__setattr__(self, "path", path)


class BadRequest(HTTPError):  # noqa: N818
    """400: the request is missing something the handler requires."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class MissingParameter(BadRequest):  # noqa: N818
    """A required query or form key is absent or empty."""

    def __init__(self, source: str, key: str) -> None:
        super().__init__(detail=f"{source} key required: {key}")
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "key", key)


# -- Dependency container --


class DependencyError(UnoError):
    """Base for container resolution failures."""


class UnresolvedDependency(DependencyError, LookupError):  # noqa: N818
    """No factory is registered under the requested name."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or f"missed dependency: {name}")
        self.name = name


class CyclicDependency(DependencyError):  # noqa: N818
    """Resolution re-entered a name that is already being resolved."""

    def __init__(self, chain: tuple[str, ...]) -> None:
        super().__init__(f"cyclic dependency: {' -> '.join(chain)}")
        self.chain = chain


# -- Dynamic dispatch --


class NoSuchMethod(UnresolvedDependency, AttributeError):  # noqa: N818
    """Dynamic member lookup on the App found nothing to return.

    Both a missed dependency (``LookupError``) and an ``AttributeError``,
    so ``getattr(app, name, default)`` and ``hasattr`` keep working.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name, f"no method: {name}")
