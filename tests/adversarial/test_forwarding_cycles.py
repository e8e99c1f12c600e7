"""Adversarial tests — broadcaster trees must never forward to themselves.

These tests verify that:
1. A broadcaster cannot be registered on itself
2. A parent cannot be registered under any of its descendants' parents' chain
3. Cycles hidden behind a QueuedSink wrapper are caught
4. Legitimate diamond-shaped trees are allowed
"""

from __future__ import annotations

import threading

import pytest

from fanlog.routing.broadcaster import Broadcaster, ForwardingCycleError
from fanlog.routing.prefixes import empty_prefix
from fanlog.routing.sinks.queued import QueuedSink


class _RecordingSink:
    def __init__(self) -> None:
        self.received: list[bytes] = []
        self._lock = threading.Lock()

    @property
    def sink_name(self) -> str:
        return "recording"

    def write(self, data: bytes) -> int:
        with self._lock:
            self.received.append(data)
        return len(data)


class TestCycleDetection:
    def test_self_registration_refused(self):
        log = Broadcaster()
        with pytest.raises(ForwardingCycleError):
            log.add_sink(log)
        assert log.sinks == []

    def test_parent_under_child_refused(self):
        root = Broadcaster()
        child = root.new_child_logger("a")
        with pytest.raises(ForwardingCycleError):
            root.add_sink(child)

    def test_deep_cycle_refused(self):
        root = Broadcaster()
        grandchild = root.new_child_logger("a").new_child_logger("b")
        with pytest.raises(ForwardingCycleError):
            root.add_sink(grandchild)

    def test_cycle_through_queued_wrapper_refused(self):
        root = Broadcaster()
        child = root.new_child_logger("a")
        wrapped = QueuedSink(child)
        with pytest.raises(ForwardingCycleError):
            root.add_sink(wrapped)
        wrapped.close()

    def test_cycle_error_is_value_error(self):
        log = Broadcaster()
        with pytest.raises(ValueError):
            log.add_sink(log)

    def test_diamond_allowed(self):
        sink = _RecordingSink()
        shared = Broadcaster(prefix_generator=empty_prefix)
        shared.add_sink(sink)
        left = shared.new_child_logger("left")
        right = shared.new_child_logger("right")
        top = Broadcaster(prefix_generator=empty_prefix)
        top.add_sink(left)
        top.add_sink(right)

        top.write(b"x\n")

        assert sink.received == [b"x\n", b"x\n"]


class TestConcurrentRegistration:
    def test_add_sink_during_broadcast(self):
        """Registering while writes are in flight neither raises nor loses sinks."""
        log = Broadcaster(prefix_generator=empty_prefix)
        first = _RecordingSink()
        log.add_sink(first)
        added: list[_RecordingSink] = []
        stop = threading.Event()

        def writer() -> None:
            while not stop.is_set():
                log.write(b"tick\n")

        thread = threading.Thread(target=writer)
        thread.start()
        try:
            for _ in range(50):
                sink = _RecordingSink()
                log.add_sink(sink)
                added.append(sink)
        finally:
            stop.set()
            thread.join(5.0)

        assert len(log.sinks) == 51
        log.write(b"final\n")
        assert all(s.received[-1] == b"final\n" for s in added)

    def test_opposite_registrations_never_both_succeed(self):
        """Racing ``a.add_sink(b)`` against ``b.add_sink(a)`` leaves no loop."""
        for _ in range(200):
            a = Broadcaster("a", prefix_generator=empty_prefix)
            b = Broadcaster("b", prefix_generator=empty_prefix)
            barrier = threading.Barrier(2)
            refused: list[ForwardingCycleError] = []

            def register(parent: Broadcaster, sink: Broadcaster) -> None:
                barrier.wait()
                try:
                    parent.add_sink(sink)
                except ForwardingCycleError as exc:
                    refused.append(exc)

            threads = [
                threading.Thread(target=register, args=(a, b)),
                threading.Thread(target=register, args=(b, a)),
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(5.0)

            assert len(refused) == 1
            assert not (b in a.sinks and a in b.sinks)
