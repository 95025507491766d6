"""Top-level error handler.

The App calls its error handler with the exception that escaped a
request and sends whatever ``Response`` comes back. The default handler
built here logs the failure and maps it to a status:

- ``HTTPError`` (``RouteNotFound``, ``MissingParameter``, ...) -> its status
- anything else -> 500

In debug mode the body shows the exception class, message, location and
trace, the way a development server should. Otherwise it is just the
status phrase (or the error detail for client errors).
"""

from __future__ import annotations

import html
import logging
import os
import traceback as _traceback
from collections.abc import Callable

from uno.errors import HTTPError
from uno.http.response import Response

logger = logging.getLogger("uno.server")

ErrorHandler = Callable[[BaseException], Response]


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from the application (not stdlib/site-packages)."""
    if "site-packages" in filename or filename.startswith("<"):
        return False
    return not filename.startswith(os.path.dirname(os.__file__))


def format_compact_traceback(exc: BaseException) -> str:
    """Exception summary plus the last few application frames."""
    frames = _traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    display_frames = app_frames if app_frames else frames[-3:]

    parts = [f"{type(exc).__name__}: {exc}"]
    if display_frames:
        parts.append("  Trace (app frames):")
        for frame in display_frames[-5:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")
    return "\n".join(parts)


def status_for(exc: BaseException) -> int:
    """HTTP status reflecting *exc*."""
    if isinstance(exc, HTTPError):
        return exc.status
    return 500


def render_debug_page(exc: BaseException) -> str:
    """``<pre>`` block with class, message, location and full trace."""
    frames = _traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    location = f"{frames[-1].filename}:{frames[-1].lineno}" if frames else "<unknown>"
    trace = "".join(_traceback.format_tb(exc.__traceback__)) if exc.__traceback__ else ""
    return (
        '<pre style="font-size: 13px;">'
        f"<b>{html.escape(type(exc).__name__)}</b>: {html.escape(str(exc))} in "
        f"{html.escape(location)}\n"
        "<b>Stack Trace:</b>\n"
        f"{html.escape(trace)}"
        "</pre>"
    )


def make_error_handler(debug: bool = False) -> ErrorHandler:
    """Build the default error handler."""

    def on_error(exc: BaseException) -> Response:
        status = status_for(exc)
        if status >= 500:
            logger.error("%d %s", status, format_compact_traceback(exc))
        else:
            logger.debug("%d %s", status, exc)

        if debug:
            body = render_debug_page(exc)
        elif isinstance(exc, HTTPError) and status < 500:
            body = html.escape(exc.detail or str(status))
        else:
            body = Response(status=status).status_line.partition(" ")[2] or str(status)

        response = Response(body=body, status=status)
        if isinstance(exc, HTTPError):
            response = response.with_headers(dict(exc.headers))
        return response

    return on_error
