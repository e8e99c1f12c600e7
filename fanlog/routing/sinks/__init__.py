"""Sink protocol for fanlog broadcasting.

All sinks implement the ``Sink`` protocol: a ``sink_name`` property and
a ``write(data)`` method returning the number of bytes the destination
accepted.  The broadcaster calls ``write`` on every registered sink for
every record.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    """Protocol that every fanlog sink must implement.

    Attributes
    ----------
    sink_name : str
        A human-readable identifier for this sink instance
        (e.g. ``"stdout"``, ``"network:logs.example.com:10000"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the name of this sink."""
        ...

    def write(self, data: bytes) -> int:
        """Deliver one record and return the byte count written.

        Failures raise; the broadcaster records them and carries on to
        the next sink.
        """
        ...
