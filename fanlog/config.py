"""Runtime configuration — env-driven via pydantic-settings.

Reads FANLOG_* environment variables and an optional ``.env`` file.

Examples
--------
Point the default logger at a collector::

    export FANLOG_TOKEN=2bfbea1e-10c3-4419-bdad-7e6435882e1f
    export FANLOG_HOST=data.logentries.com
    export FANLOG_PORT=10000
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from fanlog.models.profile import LoggerProfile, SinkKind, SinkSpec


class LogSettings(BaseSettings):
    """Settings for the process-wide logger.

    The network sink is only configured when token, host and port are
    all present; otherwise the logger writes to stdout alone.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FANLOG_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Collector endpoint
    token: str = ""
    host: str = ""
    port: int = 0
    sink_prefix: str = ""
    dial_timeout: float = 2.0
    queued_network: bool = False

    # Local output
    local_sink: bool = True

    # Asynchronous dispatch
    async_queue_size: int = 1024

    # Level for fanlog's own diagnostics (stdlib logging)
    log_level: str = "WARNING"

    @property
    def has_collector(self) -> bool:
        """Whether a complete collector endpoint is configured."""
        return bool(self.token and self.host and self.port)

    def to_profile(self) -> LoggerProfile:
        """Translate these settings into a ``LoggerProfile``."""
        sinks: list[SinkSpec] = []
        if self.local_sink:
            sinks.append(SinkSpec(sink_type=SinkKind.STDOUT))
        if self.has_collector:
            sinks.append(
                SinkSpec(
                    sink_type=SinkKind.NETWORK,
                    config={
                        "token": self.token,
                        "host": self.host,
                        "port": self.port,
                        "prefix": self.sink_prefix,
                        "dial_timeout": self.dial_timeout,
                        "queued": self.queued_network,
                    },
                )
            )
        return LoggerProfile(sinks=sinks, queue_size=self.async_queue_size)


# Module-level singleton; import as `from fanlog.config import settings`
settings = LogSettings()
