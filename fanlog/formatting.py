"""Presentation helpers for HTTP access-log lines.

Pure lookups from status code and method to ANSI color sequences, plus
client address resolution.  Nothing here holds state; the request
instrumentation that calls these lives outside fanlog.
"""

from __future__ import annotations

from collections.abc import Mapping

GREEN = "\x1b[97;42m"
WHITE = "\x1b[90;47m"
YELLOW = "\x1b[97;43m"
RED = "\x1b[97;41m"
BLUE = "\x1b[97;44m"
MAGENTA = "\x1b[97;45m"
CYAN = "\x1b[97;46m"
RESET = "\x1b[0m"

_METHOD_COLORS: dict[str, str] = {
    "GET": BLUE,
    "POST": CYAN,
    "PUT": YELLOW,
    "DELETE": RED,
    "PATCH": GREEN,
    "HEAD": MAGENTA,
    "OPTIONS": WHITE,
}


def color_for_status(code: int) -> str:
    """2xx green, 3xx white, 4xx yellow, anything else red."""
    if 200 <= code <= 299:
        return GREEN
    if 300 <= code <= 399:
        return WHITE
    if 400 <= code <= 499:
        return YELLOW
    return RED


def color_for_method(method: str) -> str:
    """Color for an HTTP method; unknown methods get ``RESET``."""
    return _METHOD_COLORS.get(method, RESET)


def client_ip(headers: Mapping[str, str], remote_addr: str) -> str:
    """Resolve the client address of a request.

    Preference order: ``X-Real-IP``, then ``X-Forwarded-For`` (verbatim,
    as set by the proxy), then the peer address.  Header names are
    matched case-insensitively.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    return (
        lowered.get("x-real-ip")
        or lowered.get("x-forwarded-for")
        or remote_addr
    )
