"""Logger profile models — which sinks a logger is built with."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SinkKind(str, Enum):
    """Sink types a profile can declare."""

    STDOUT = "stdout"
    NETWORK = "network"


class SinkSpec(BaseModel):
    """A single sink declaration.

    ``config`` carries the keyword arguments of the matching
    ``Broadcaster.add_*_sink`` call (for ``network``: token, host, port,
    and optionally prefix, dial_timeout, queued).
    """

    model_config = ConfigDict(frozen=True)

    sink_type: SinkKind
    config: dict[str, Any] = {}
    enabled: bool = True


class LoggerProfile(BaseModel):
    """Everything needed to assemble a root broadcaster."""

    model_config = ConfigDict(frozen=True)

    name: str = "root"
    sinks: list[SinkSpec] = Field(
        default_factory=lambda: [SinkSpec(sink_type=SinkKind.STDOUT)]
    )
    queue_size: int = Field(default=1024, ge=1)
    tags: tuple[str, ...] = ()
