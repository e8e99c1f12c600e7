"""Queued sink — gives one slow destination its own dispatch worker.

Wrapping a sink in ``QueuedSink`` decouples it from the broadcaster's
write loop: ``write`` only enqueues, and a dedicated worker delivers to
the wrapped sink in FIFO order.  Useful for the network sink, whose
sends block for as long as the collector does.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fanlog.routing.worker import DEFAULT_MAX_QUEUE, DispatchWorker

if TYPE_CHECKING:
    from fanlog.routing.sinks import Sink

logger = logging.getLogger(__name__)


class QueuedSink:
    """Delivers to *inner* from a bounded background queue.

    Parameters
    ----------
    inner:
        The sink that actually receives records.
    max_queue:
        Maximum records waiting for delivery; beyond that ``write``
        raises ``QueueFullError``.

    The wrapped sink is owned: ``close`` closes it too.
    """

    def __init__(self, inner: Sink, *, max_queue: int = DEFAULT_MAX_QUEUE) -> None:
        self._inner = inner
        self._worker = DispatchWorker(
            inner.write,
            max_queue=max_queue,
            name=f"fanlog-queued-{inner.sink_name}",
        )

    @property
    def sink_name(self) -> str:
        return f"queued:{self._inner.sink_name}"

    @property
    def inner(self) -> Sink:
        return self._inner

    @property
    def pending(self) -> int:
        return self._worker.pending

    @property
    def failed_count(self) -> int:
        """Deliveries to the wrapped sink that raised."""
        return self._worker.failed_count

    def write(self, data: bytes) -> int:
        """Enqueue *data*; returns ``len(data)`` without waiting."""
        self._worker.submit(data)
        return len(data)

    def flush(self, timeout: float | None = None) -> bool:
        return self._worker.flush(timeout)

    def close(self, timeout: float | None = None) -> bool:
        """Drain, stop the worker and close the wrapped sink if it can be closed."""
        drained = self._worker.close(timeout)
        close = getattr(self._inner, "close", None)
        if callable(close):
            close()
        return drained

    def __enter__(self) -> QueuedSink:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
