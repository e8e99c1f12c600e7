"""Build broadcasters from declarative profiles and settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fanlog.models.profile import LoggerProfile, SinkKind
from fanlog.routing.broadcaster import Broadcaster

if TYPE_CHECKING:
    from fanlog.config import LogSettings

logger = logging.getLogger(__name__)


def build_logger(profile: LoggerProfile, **broadcaster_kwargs: Any) -> Broadcaster:
    """Assemble a broadcaster with the sinks *profile* declares.

    Disabled sink specs are skipped.  Network specs are validated on the
    spot, so a missing token/host/port raises ``ConfigurationError`` here
    rather than on the first write.
    """
    log = Broadcaster(
        name=profile.name,
        tags=profile.tags,
        max_queue=profile.queue_size,
        **broadcaster_kwargs,
    )
    for spec in profile.sinks:
        if not spec.enabled:
            logger.debug("build_logger: skipping disabled %s sink", spec.sink_type.value)
            continue
        if spec.sink_type is SinkKind.STDOUT:
            log.add_local_sink()
        elif spec.sink_type is SinkKind.NETWORK:
            cfg = dict(spec.config)
            log.add_network_sink(
                cfg.pop("token", ""),
                cfg.pop("host", ""),
                cfg.pop("port", 0),
                **cfg,
            )
    return log


def logger_from_settings(settings: LogSettings, **broadcaster_kwargs: Any) -> Broadcaster:
    """Shorthand for ``build_logger(settings.to_profile())``."""
    return build_logger(settings.to_profile(), **broadcaster_kwargs)
