"""Record framing for the line-oriented collector protocol.

The collector treats a bare ``\\n`` as the end of a record, so a
multi-line message must be folded into a single line before it goes on
the wire.  Interior newlines are replaced with U+2028 LINE SEPARATOR;
a single trailing newline survives as the record terminator.

Wire layout::

    <token> [<prefix>] <message>\\n
"""

from __future__ import annotations

LINE_SEPARATOR = "\u2028"
LINE_SEPARATOR_BYTES = LINE_SEPARATOR.encode("utf-8")


def normalize_newlines(payload: bytes) -> bytes:
    """Fold interior newlines of *payload* into the line-separator marker.

    Examples
    --------
    >>> normalize_newlines(b"a\\nb\\nc\\n") == "a\\u2028b\\u2028c\\n".encode()
    True
    >>> normalize_newlines(b"no newline")
    b'no newline'
    """
    if payload.endswith(b"\n"):
        return payload[:-1].replace(b"\n", LINE_SEPARATOR_BYTES) + b"\n"
    return payload.replace(b"\n", LINE_SEPARATOR_BYTES)


def frame_record(token: str, prefix: str, payload: bytes) -> bytes:
    """Return the wire-ready bytes for one record.

    No escaping beyond newline folding is done; callers must not embed
    the marker themselves.
    """
    head = f"{token} [{prefix}] ".encode("utf-8")
    return head + normalize_newlines(payload)
