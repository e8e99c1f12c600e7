"""Local sink — raw passthrough to standard output."""

from __future__ import annotations

import sys
from typing import TextIO


class StdoutSink:
    """Writes records to standard output without framing.

    Parameters
    ----------
    stream:
        Text stream to write to.  Defaults to whatever ``sys.stdout`` is
        at write time, so redirection after construction is honoured.

    Bytes go to the stream's underlying binary ``buffer`` untouched.
    Only a text-only stream (one without a ``buffer``, such as
    ``io.StringIO``) gets a UTF-8 decode, with invalid sequences replaced.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def sink_name(self) -> str:
        return "stdout"

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def write(self, data: bytes) -> int:
        stream = self.stream
        buffer = getattr(stream, "buffer", None)
        if buffer is None:
            stream.write(data.decode("utf-8", errors="replace"))
            stream.flush()
            return len(data)
        # Text already queued in the wrapper must land before these bytes.
        stream.flush()
        buffer.write(data)
        buffer.flush()
        return len(data)

    def flush(self) -> None:
        self.stream.flush()
