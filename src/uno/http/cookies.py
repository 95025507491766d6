"""Cookie header parsing and Set-Cookie directives."""

from dataclasses import dataclass
from urllib.parse import quote, unquote


def parse_cookies(header: str) -> dict[str, str]:
    """``"a=1; b=two%20words"`` -> ``{"a": "1", "b": "two words"}``.

    Pairs without ``=`` are skipped; surrounding double quotes are dropped.
    """
    return {
        name.strip(): unquote(value.strip().strip('"'))
        for name, sep, value in (pair.partition("=") for pair in (header or "").split(";"))
        if sep and name.strip()
    }


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` directive queued by the ``cookie`` helper or the session store.

    ``max_age=0`` tells the browser to delete the cookie.
    """

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "lax"

    def to_header_value(self) -> str:
        attributes = (
            ("Max-Age", self.max_age),
            ("Path", self.path or None),
            ("Domain", self.domain),
            ("Secure", self.secure or None),
            ("HttpOnly", self.httponly or None),
            ("SameSite", self.samesite.capitalize() if self.samesite else None),
        )
        parts = [f"{self.name}={quote(self.value, safe='')}"]
        for label, value in attributes:
            if value is True:
                parts.append(label)
            elif value is not None:
                parts.append(f"{label}={value}")
        return "; ".join(parts)
