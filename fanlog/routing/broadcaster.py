"""Broadcaster — fans each log record out to ALL registered sinks.

A broadcaster holds an ordered list of sinks.  Every record written to
it goes to every sink, in registration order, each write finishing
before the next starts.  A failing sink never stops the others.

Broadcasters are sinks themselves, which is how contextual loggers work:
``new_child_logger`` returns a broadcaster whose only sink is its parent,
so everything written to the child ends up at the parent's sinks.
Registering a sink that would make a broadcaster forward to itself is
refused with ``ForwardingCycleError``.

Two write paths are offered:

* ``write`` / ``fatalln`` are synchronous and report sink failures;
* ``printf`` / ``println`` / ``print`` enqueue the record on a bounded
  dispatch worker and return at once.  Delivery failures on this path
  are logged, never raised.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sys
import threading
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from fanlog.routing.prefixes import PrefixGenerator, empty_prefix, timestamp_prefix
from fanlog.routing.sinks.network import DEFAULT_DIAL_TIMEOUT, NetworkSink
from fanlog.routing.sinks.queued import QueuedSink
from fanlog.routing.sinks.stdout import StdoutSink
from fanlog.routing.worker import DEFAULT_MAX_QUEUE, DispatchWorker, WorkerClosedError

if TYPE_CHECKING:
    from fanlog.routing.sinks import Sink

logger = logging.getLogger(__name__)

# Guards every cycle check together with the append it allows.  The sink
# graph spans many broadcasters, so no single instance lock covers it.
_registration_lock = threading.Lock()


class BroadcastError(RuntimeError):
    """Raised after a synchronous write in which one or more sinks failed.

    Every sink is still attempted.  ``failures`` lists each failing sink
    with its exception, in registration order; ``count`` is what the
    last sink reported (0 if the last sink itself failed).
    """

    def __init__(self, failures: list[tuple[str, Exception]], count: int) -> None:
        self.failures = failures
        self.count = count
        super().__init__(
            f"{len(failures)} sink(s) failed: "
            + "; ".join(f"{name}: {exc}" for name, exc in failures)
        )


class ForwardingCycleError(ValueError):
    """Raised when registering a sink would make a broadcaster reach itself."""


def _downstream(sink: Any) -> list[Any]:
    """Sinks that *sink* forwards to, for cycle detection."""
    if isinstance(sink, Broadcaster):
        return sink.sinks
    if isinstance(sink, QueuedSink):
        return [sink.inner]
    return []


def _format_line(args: Iterable[Any]) -> str:
    return " ".join(str(arg) for arg in args) + "\n"


def terminate_process(status: int) -> None:
    """Flush the standard streams and end the whole process with *status*.

    Unlike ``sys.exit`` this works from any thread and cannot be caught.
    """
    for stream in (sys.stdout, sys.stderr):
        if stream is None:
            continue
        with contextlib.suppress(OSError, ValueError):
            stream.flush()
    os._exit(status)


class Broadcaster:
    """Synchronous and asynchronous fanout over an ordered set of sinks.

    Parameters
    ----------
    name:
        Used as ``sink_name`` when this broadcaster is registered with
        another one.
    prefix_generator:
        Called once per record; a non-empty result plus one space is
        prepended to the payload.  Defaults to ``timestamp_prefix``.
    tags:
        Informational labels attached to this instance.
    max_queue:
        Capacity of the asynchronous dispatch queue.
    exit_func:
        Called with status 1 by ``fatalln``.  Defaults to
        ``terminate_process``, which ends the process from any thread.

    Usage
    -----
    >>> log = Broadcaster()
    >>> log.add_local_sink()
    >>> log.printf("served %s in %dms", "/index", 12)
    >>> request_log = log.new_child_logger("request", "abc123")
    """

    def __init__(
        self,
        name: str = "root",
        *,
        prefix_generator: PrefixGenerator = timestamp_prefix,
        tags: Iterable[str] = (),
        max_queue: int = DEFAULT_MAX_QUEUE,
        exit_func: Callable[[int], Any] = terminate_process,
    ) -> None:
        self._name = name
        self._sinks: list[Sink] = []
        self._owned: list[Any] = []
        self._prefix_generator = prefix_generator
        self._tags: tuple[str, ...] = tuple(tags)
        self._max_queue = max_queue
        self._exit = exit_func
        self._lock = threading.Lock()
        self._worker: DispatchWorker | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def sink_name(self) -> str:
        return f"broadcaster:{self._name}"

    @property
    def sinks(self) -> list[Sink]:
        """Return a copy of the registered sinks, in broadcast order."""
        with self._lock:
            return list(self._sinks)

    @property
    def tags(self) -> tuple[str, ...]:
        return self._tags

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_prefix_generator(self, prefix_generator: PrefixGenerator) -> None:
        with self._lock:
            self._prefix_generator = prefix_generator

    def set_tags(self, *tags: str) -> None:
        with self._lock:
            self._tags = tuple(tags)

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def add_sink(self, sink: Sink) -> None:
        """Append *sink*; it receives records after every earlier sink.

        Raises
        ------
        ForwardingCycleError
            If *sink* is this broadcaster or forwards back to it.
        """
        with _registration_lock:
            if self._reachable_from(sink):
                raise ForwardingCycleError(
                    f"Registering {sink.sink_name} on {self.sink_name} "
                    "would create a forwarding cycle"
                )
            with self._lock:
                self._sinks.append(sink)
        logger.debug("Broadcaster %s: registered sink %s", self._name, sink.sink_name)

    def add_network_sink(
        self,
        token: str,
        host: str,
        port: int,
        *,
        prefix: str = "",
        dial_timeout: float = DEFAULT_DIAL_TIMEOUT,
        queued: bool = False,
    ) -> NetworkSink:
        """Create, register and own a ``NetworkSink``.

        With ``queued=True`` the sink is wrapped in a ``QueuedSink`` so a
        stalled collector cannot hold up the other sinks.
        """
        sink = NetworkSink(prefix=prefix, dial_timeout=dial_timeout)
        sink.configure(token, host, port)
        registered: Any = QueuedSink(sink, max_queue=self._max_queue) if queued else sink
        self.add_sink(registered)
        self._owned.append(registered)
        return sink

    def add_local_sink(self) -> StdoutSink:
        """Create, register and own a ``StdoutSink``."""
        sink = StdoutSink()
        self.add_sink(sink)
        self._owned.append(sink)
        return sink

    def _reachable_from(self, sink: Any) -> bool:
        seen: set[int] = set()
        stack = [sink]
        while stack:
            node = stack.pop()
            if node is self:
                return True
            if id(node) in seen:
                continue
            seen.add(id(node))
            stack.extend(_downstream(node))
        return False

    # ------------------------------------------------------------------
    # Child loggers
    # ------------------------------------------------------------------

    def new_child_logger(self, *tags: str) -> Broadcaster:
        """Return a broadcaster that forwards everything to this one.

        The child stamps no prefix of its own; the parent's generator
        decorates the record once when it passes through.
        """
        child = Broadcaster(
            name=f"{self._name}/{'.'.join(tags) or 'child'}",
            prefix_generator=empty_prefix,
            tags=tags,
            max_queue=self._max_queue,
            exit_func=self._exit,
        )
        child.add_sink(self)
        return child

    # ------------------------------------------------------------------
    # Synchronous path
    # ------------------------------------------------------------------

    def write(self, data: bytes) -> int:
        """Broadcast *data* to every sink and return the last sink's count.

        Raises
        ------
        BroadcastError
            After all sinks were attempted, if any of them failed.
        """
        with self._lock:
            sinks = list(self._sinks)
            prefix = self._prefix_generator()

        if not sinks:
            logger.debug("Broadcaster %s: no sinks registered, record dropped", self._name)
            return 0

        payload = f"{prefix} ".encode("utf-8") + data if prefix else data
        count = 0
        failures: list[tuple[str, Exception]] = []
        for sink in sinks:
            try:
                count = sink.write(payload)
            except Exception as exc:  # noqa: BLE001
                count = 0
                logger.error(
                    "Broadcaster %s: sink %s failed: %s", self._name, sink.sink_name, exc
                )
                failures.append((sink.sink_name, exc))

        if failures:
            raise BroadcastError(failures, count)
        return count

    def fatalln(self, *args: Any) -> None:
        """Write the line synchronously, then exit with status 1.

        Queued asynchronous records are not waited for.
        """
        try:
            self.write(_format_line(args).encode("utf-8"))
        except BroadcastError as exc:
            logger.error("Broadcaster %s: fatal record not fully delivered: %s", self._name, exc)
        finally:
            self._exit(1)

    # ------------------------------------------------------------------
    # Asynchronous path
    # ------------------------------------------------------------------

    def printf(self, fmt: str, *args: Any) -> None:
        """``%``-format the message and hand it to the dispatch worker."""
        self._submit((fmt % args if args else fmt).encode("utf-8"))

    def println(self, *args: Any) -> None:
        self._submit(_format_line(args).encode("utf-8"))

    def print(self, text: str) -> None:
        self._submit(text.encode("utf-8"))

    def _submit(self, data: bytes) -> None:
        with self._lock:
            if self._closed:
                raise WorkerClosedError(f"Broadcaster {self._name} is closed")
            if self._worker is None:
                self._worker = DispatchWorker(
                    self.write,
                    max_queue=self._max_queue,
                    name=f"fanlog-{self._name}",
                )
            worker = self._worker
        worker.submit(data)

    # ------------------------------------------------------------------
    # Drain and teardown
    # ------------------------------------------------------------------

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for queued records, then flush every sink that can be flushed.

        Returns ``False`` if the asynchronous queue did not drain within
        *timeout*.
        """
        drained = True
        if self._worker is not None:
            drained = self._worker.flush(timeout)
        for sink in self.sinks:
            flush = getattr(sink, "flush", None)
            if not callable(flush):
                continue
            if isinstance(sink, (Broadcaster, QueuedSink)):
                drained = flush(timeout) and drained
            else:
                flush()
        return drained

    def close(self, timeout: float | None = None) -> bool:
        """Drain and stop the dispatch worker, then close owned sinks.

        Sinks registered with ``add_sink`` belong to the caller and are
        left open; a child logger therefore never closes its parent.
        """
        with self._lock:
            self._closed = True
        drained = True
        if self._worker is not None:
            drained = self._worker.close(timeout)
        for sink in self._owned:
            close = getattr(sink, "close", None)
            if callable(close):
                close()
        self._owned.clear()
        return drained

    def __enter__(self) -> Broadcaster:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Broadcaster(name={self._name!r}, sinks={len(self._sinks)}, tags={self._tags!r})"
