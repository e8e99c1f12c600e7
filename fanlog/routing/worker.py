"""Bounded dispatch worker — one queue, one consumer thread.

Asynchronous log calls hand their payload to a ``DispatchWorker`` and
return immediately.  The worker keeps at most ``max_queue`` payloads
waiting and drains them in FIFO order on a single daemon thread, so the
number of in-flight writes is capped and two messages issued in order
are delivered in order.  A full queue is reported to the submitter as
``QueueFullError`` rather than growing without bound.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUEUE = 1024

_STOP = object()


class QueueFullError(RuntimeError):
    """Raised when an asynchronous write finds the dispatch queue full."""


class WorkerClosedError(RuntimeError):
    """Raised when submitting to a worker that has been closed."""


class DispatchWorker:
    """Runs *handler* for each submitted payload on a dedicated thread.

    Parameters
    ----------
    handler:
        Called with each payload, in submission order.  Exceptions are
        logged and counted in ``failed_count``; they never reach the
        submitter.
    max_queue:
        Maximum number of payloads waiting for the consumer.
    name:
        Thread name, for diagnostics.

    The consumer thread starts on the first ``submit``.
    """

    def __init__(
        self,
        handler: Callable[[bytes], Any],
        *,
        max_queue: int = DEFAULT_MAX_QUEUE,
        name: str = "fanlog-dispatch",
    ) -> None:
        if max_queue < 1:
            raise ValueError(f"max_queue must be positive, got {max_queue}")
        self._handler = handler
        self._name = name
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=max_queue)
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending = 0
        self._closed = False
        self.failed_count = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def pending(self) -> int:
        """Payloads submitted but not yet handled."""
        with self._lock:
            return self._pending

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(self, payload: bytes) -> None:
        """Queue *payload* for the consumer thread.

        Raises
        ------
        QueueFullError
            If ``max_queue`` payloads are already waiting.
        WorkerClosedError
            If ``close`` has been called.
        """
        with self._lock:
            if self._closed:
                raise WorkerClosedError(f"Dispatch worker {self._name} is closed")
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._run, name=self._name, daemon=True
                )
                self._thread.start()
            try:
                self._queue.put_nowait(payload)
            except queue.Full:
                raise QueueFullError(
                    f"Dispatch queue {self._name} is full "
                    f"(depth={self._queue.maxsize}).  Record dropped."
                ) from None
            self._pending += 1

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every submitted payload has been handled.

        Returns ``False`` if *timeout* seconds pass first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._idle:
            while self._pending:
                if deadline is None:
                    self._idle.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._idle.wait(remaining)
        return True

    def close(self, timeout: float | None = None) -> bool:
        """Drain the queue, then stop the consumer thread.

        Returns ``False`` if the drain timed out; the thread is then left
        to finish on its own (it is a daemon and will not block exit).
        """
        with self._lock:
            if self._closed:
                return True
            self._closed = True
            thread = self._thread
        if thread is None:
            return True
        drained = self.flush(timeout)
        if drained:
            self._queue.put(_STOP)
            thread.join(timeout)
        logger.debug("DispatchWorker %s closed (drained=%s)", self._name, drained)
        return drained

    # ------------------------------------------------------------------
    # Internal: consumer loop
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            payload = self._queue.get()
            if payload is _STOP:
                return
            try:
                self._handler(payload)
            except Exception as exc:  # noqa: BLE001
                self.failed_count += 1
                logger.warning(
                    "DispatchWorker %s: asynchronous write failed: %s",
                    self._name,
                    exc,
                )
            finally:
                with self._idle:
                    self._pending -= 1
                    if not self._pending:
                        self._idle.notify_all()
