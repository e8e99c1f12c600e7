"""fanlog: fanout logging to stdout and remote line-protocol collectors.

  - Broadcaster with ordered sinks, child loggers and cycle protection
  - Network sink with lazy dialing, zero-timeout liveness probe and redial
  - Bounded asynchronous dispatch with explicit flush/close
  - Record framing that keeps multi-line messages on one wire record
"""

__version__ = "0.2.0"
__description__ = "Fanout logging to stdout and remote line-protocol collectors"

from fanlog.formatting import client_ip, color_for_method, color_for_status
from fanlog.routing.broadcaster import (
    Broadcaster,
    BroadcastError,
    ForwardingCycleError,
    terminate_process,
)
from fanlog.routing.factory import build_logger, logger_from_settings
from fanlog.routing.framing import LINE_SEPARATOR, frame_record
from fanlog.routing.sinks import Sink
from fanlog.routing.sinks.network import (
    AlreadyConnectedError,
    ConfigurationError,
    NetworkSink,
)
from fanlog.routing.sinks.queued import QueuedSink
from fanlog.routing.sinks.stdout import StdoutSink
from fanlog.routing.worker import QueueFullError, WorkerClosedError

__all__ = [
    "AlreadyConnectedError",
    "BroadcastError",
    "Broadcaster",
    "terminate_process",
    "ConfigurationError",
    "ForwardingCycleError",
    "LINE_SEPARATOR",
    "NetworkSink",
    "QueueFullError",
    "QueuedSink",
    "Sink",
    "StdoutSink",
    "WorkerClosedError",
    "__version__",
    "build_logger",
    "client_ip",
    "color_for_method",
    "color_for_status",
    "frame_record",
    "logger_from_settings",
]
