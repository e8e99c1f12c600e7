"""Network sink — frames records onto one TCP connection to a collector.

Connection lifecycle
--------------------
The sink dials lazily: nothing touches the network until the first
``write`` (or an explicit ``open``).  Before every write the held
socket is probed with a zero-timeout one-byte read:

* *would block*  -> the peer is alive and idle, keep the socket;
* EOF, data, or any other socket error -> the socket is dead.

A dead socket is closed and replaced by a fresh dial.  The probe spots
peers that closed or reset the connection; it cannot tell a congested
or half-open connection from a healthy one.

Every operation that touches the socket runs under one re-entrant lock,
so at most one socket exists per sink and no two operations ever use it
concurrently.  There is no retry or backoff: dial and send errors go
straight back to the caller.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Any

from fanlog.routing.framing import frame_record

logger = logging.getLogger(__name__)

DEFAULT_DIAL_TIMEOUT = 2.0


class ConfigurationError(ValueError):
    """Raised when the token, host, or port of a network sink is unset."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class AlreadyConnectedError(RuntimeError):
    """Raised when ``open`` finds a connection handle already held."""


class NetworkSink:
    """Writes framed records to a remote log collector over TCP.

    Parameters
    ----------
    token:
        Opaque credential placed at the head of every record.
    host, port:
        Collector endpoint.
    prefix:
        Display tag rendered inside ``[...]`` on every record.
    dial_timeout:
        Seconds allowed for establishing the connection.

    The sink may be built unconfigured and configured later with
    ``configure``; ``open`` and ``write`` refuse to run until token,
    host and port are all set.
    """

    def __init__(
        self,
        token: str = "",
        host: str = "",
        port: int = 0,
        *,
        prefix: str = "",
        dial_timeout: float = DEFAULT_DIAL_TIMEOUT,
    ) -> None:
        self._token = token
        self._host = host
        self._port = port
        self._prefix = prefix
        self._dial_timeout = dial_timeout
        self._conn: socket.socket | None = None
        self._last_error: OSError | None = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def sink_name(self) -> str:
        return f"network:{self._host}:{self._port}"

    @property
    def endpoint(self) -> tuple[str, int]:
        return (self._host, self._port)

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def last_error(self) -> OSError | None:
        """The most recent dial error, or ``None`` after a good dial."""
        return self._last_error

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(token: str, host: str, port: int) -> None:
        if not token:
            raise ConfigurationError(
                "token", "Network sink token is not defined."
            )
        if not host:
            raise ConfigurationError(
                "host", "Network sink host is not defined."
            )
        if not port:
            raise ConfigurationError(
                "port", "Network sink port is not defined."
            )

    def configure(self, token: str, host: str, port: int) -> None:
        """Set the credential and endpoint.

        Raises
        ------
        ConfigurationError
            If any of the three values is empty or zero.  The previous
            configuration is left untouched.
        """
        self._validate(token, host, port)
        with self._lock:
            self._token = token
            self._host = host
            self._port = port

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def open(self) -> socket.socket:
        """Dial the collector, keep the connection and return it.

        Raises
        ------
        ConfigurationError
            If the sink is not fully configured.
        AlreadyConnectedError
            If a connection handle is already held, alive or not.
        OSError
            If the dial fails or times out.  The error is also kept in
            ``last_error``.
        """
        self._validate(self._token, self._host, self._port)
        with self._lock:
            if self._conn is not None:
                raise AlreadyConnectedError(
                    f"Network sink already connected to {self._host}:{self._port}"
                )
            try:
                conn = socket.create_connection(
                    (self._host, self._port), timeout=self._dial_timeout
                )
            except OSError as exc:
                self._last_error = exc
                logger.warning(
                    "NetworkSink: dial %s:%d failed: %s", self._host, self._port, exc
                )
                raise
            # Sends block for as long as the transport does.
            conn.settimeout(None)
            self._conn = conn
            self._last_error = None
            logger.info("NetworkSink: connected to %s:%d", self._host, self._port)
            return conn

    def probe_alive(self) -> bool:
        """Return ``True`` if the held connection still looks usable.

        Performs a non-blocking one-byte read.  "Nothing to read yet" is
        the only outcome classed as alive; EOF, unexpected data from the
        collector and socket errors all count as dead.  Whatever the
        outcome, the socket is returned to blocking mode afterwards.
        """
        with self._lock:
            conn = self._conn
            if conn is None:
                return False
            alive = False
            conn.settimeout(0.0)
            try:
                conn.recv(1)
            except BlockingIOError:
                alive = True
            except OSError as exc:
                logger.debug("NetworkSink: probe of %s failed: %s", self.sink_name, exc)
            finally:
                try:
                    conn.settimeout(None)
                except OSError:
                    logger.debug(
                        "NetworkSink: could not restore blocking mode on %s",
                        self.sink_name,
                        exc_info=True,
                    )
            return alive

    def is_connected(self) -> bool:
        """Alias of ``probe_alive`` kept for callers polling connection state."""
        return self.probe_alive()

    def ensure_open_connection(self) -> socket.socket:
        """Return a live connection, redialing if necessary.

        A handle that fails the probe is closed and dropped before the
        new dial, so a collector restart is recovered on the next write.
        """
        with self._lock:
            conn = self._conn
            if conn is not None and self.probe_alive():
                return conn
            if conn is not None:
                logger.warning(
                    "NetworkSink: connection to %s went stale, redialing",
                    self.sink_name,
                )
                self._drop_connection()
            return self.open()

    def close(self) -> None:
        """Release the connection, if any."""
        with self._lock:
            if self._conn is not None:
                self._drop_connection()
                logger.info("NetworkSink: closed %s", self.sink_name)

    def _drop_connection(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
        except OSError:
            logger.debug("NetworkSink: error closing %s", self.sink_name, exc_info=True)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write(self, data: bytes) -> int:
        """Frame *data* and send it, dialing first if needed.

        Returns the number of framed bytes sent.  Dial and send errors
        propagate unchanged.
        """
        with self._lock:
            conn = self.ensure_open_connection()
            framed = frame_record(self._token, self._prefix, data)
            conn.sendall(framed)
            return len(framed)

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> NetworkSink:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "connected" if self._conn is not None else "idle"
        return f"NetworkSink(host={self._host!r}, port={self._port}, state={state})"
