"""Adversarial tests — collector restarts and dead connections.

These tests verify that:
1. A connection closed by the collector is detected by the probe
2. The next write drops the stale handle and redials
3. A collector that is gone entirely surfaces a dial error, then recovers
4. Concurrent writers never share or leak connections
"""

from __future__ import annotations

import threading

import pytest

from fanlog.routing.broadcaster import BroadcastError, Broadcaster
from fanlog.routing.prefixes import empty_prefix
from fanlog.routing.sinks.network import AlreadyConnectedError, NetworkSink


class TestRedialAfterRemoteClose:
    def test_write_after_remote_close_redials(self, collector, wait_until):
        with NetworkSink("tok", collector.host, collector.port) as sink:
            sink.write(b"before\n")
            assert wait_until(lambda: collector.received(0) == b"tok [] before\n")

            collector.drop_clients()
            assert wait_until(lambda: not sink.is_connected())

            sink.write(b"after\n")
            assert wait_until(lambda: collector.connection_count == 2)
            assert wait_until(lambda: collector.received(1) == b"tok [] after\n")

    def test_open_on_dead_handle_still_refused(self, collector, wait_until):
        """``open`` alone never replaces a handle; only the write path does."""
        with NetworkSink("tok", collector.host, collector.port) as sink:
            sink.open()
            assert wait_until(lambda: collector.connection_count == 1)
            collector.drop_clients()
            assert wait_until(lambda: not sink.is_connected())
            with pytest.raises(AlreadyConnectedError):
                sink.open()
            sink.ensure_open_connection()
            assert sink.is_connected() is True

    def test_broadcaster_recovers_across_restart(self, collector, wait_until):
        log = Broadcaster(prefix_generator=empty_prefix)
        log.add_network_sink("tok", collector.host, collector.port)
        log.write(b"one\n")
        assert wait_until(lambda: collector.connection_count == 1)
        collector.drop_clients()
        assert wait_until(lambda: not log.sinks[0].is_connected())
        log.write(b"two\n")
        assert wait_until(lambda: collector.received() == b"tok [] one\ntok [] two\n")
        log.close()


class TestCollectorUnavailable:
    def test_dial_error_then_recovery(self, closed_port, collector, wait_until):
        sink = NetworkSink("tok", "127.0.0.1", closed_port, dial_timeout=0.5)
        with pytest.raises(OSError):
            sink.write(b"lost\n")
        assert sink.last_error is not None

        sink.configure("tok", collector.host, collector.port)
        sink.write(b"found\n")
        assert sink.last_error is None
        assert wait_until(lambda: collector.received() == b"tok [] found\n")
        sink.close()

    def test_broadcaster_reports_dead_collector_but_serves_stdout(self, closed_port, capsys):
        log = Broadcaster(prefix_generator=empty_prefix)
        log.add_local_sink()
        log.add_network_sink("tok", "127.0.0.1", closed_port, dial_timeout=0.5)

        with pytest.raises(BroadcastError) as excinfo:
            log.write(b"still local\n")

        assert capsys.readouterr().out == "still local\n"
        assert excinfo.value.failures[0][0] == f"network:127.0.0.1:{closed_port}"
        log.close()


class TestConcurrentWriters:
    def test_parallel_writes_use_one_connection(self, collector, wait_until):
        sink = NetworkSink("tok", collector.host, collector.port)
        errors: list[Exception] = []

        def worker(n: int) -> None:
            try:
                for i in range(20):
                    sink.write(b"w%d-%d\n" % (n, i))
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5.0)

        assert errors == []
        assert wait_until(lambda: collector.received().count(b"\n") == 80)
        assert collector.connection_count == 1
        # Records are never interleaved mid-line.
        for line in collector.received().splitlines():
            assert line.startswith(b"tok [] w")
        sink.close()
