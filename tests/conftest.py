"""Shared test fixtures for fanlog."""

from __future__ import annotations

import os
import socket
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest


class CollectorServer:
    """In-process TCP collector that records every byte it receives.

    Each accepted connection gets its own reader thread.  ``drop_clients``
    closes the server side of every connection, simulating a collector
    restart from the client's point of view.
    """

    def __init__(self) -> None:
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(8)
        self._listener.settimeout(0.05)
        self.host, self.port = self._listener.getsockname()
        self._lock = threading.Lock()
        self._clients: list[socket.socket] = []
        self._buffers: list[bytearray] = []
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._thread.start()

    def _accept_loop(self) -> None:
        while not self._stopped.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            conn.settimeout(None)
            buf = bytearray()
            with self._lock:
                self._clients.append(conn)
                self._buffers.append(buf)
            threading.Thread(
                target=self._read_loop, args=(conn, buf), daemon=True
            ).start()

    def _read_loop(self, conn: socket.socket, buf: bytearray) -> None:
        while True:
            try:
                chunk = conn.recv(4096)
            except OSError:
                return
            if not chunk:
                return
            with self._lock:
                buf.extend(chunk)

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._clients)

    def received(self, index: int | None = None) -> bytes:
        """All bytes received, or those of connection *index*."""
        with self._lock:
            if index is not None:
                return bytes(self._buffers[index])
            return b"".join(bytes(b) for b in self._buffers)

    def drop_clients(self) -> None:
        with self._lock:
            clients = list(self._clients)
        for conn in clients:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            conn.close()

    def close(self) -> None:
        self._stopped.set()
        self._thread.join(1.0)
        self._listener.close()
        self.drop_clients()


def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll *predicate* until it is true or *timeout* seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture(autouse=True)
def _clean_fanlog_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep FANLOG_* variables and any stray .env out of the tests."""
    for key in list(os.environ):
        if key.startswith("FANLOG_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Provide the polling helper used for cross-thread assertions."""
    return _wait_until


@pytest.fixture
def collector() -> Iterator[CollectorServer]:
    """Provide a running in-process collector."""
    server = CollectorServer()
    yield server
    server.close()


@pytest.fixture
def closed_port() -> int:
    """Provide a localhost port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
