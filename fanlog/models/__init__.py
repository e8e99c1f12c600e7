"""Declarative logger configuration models."""

from fanlog.models.profile import LoggerProfile, SinkKind, SinkSpec

__all__ = ["LoggerProfile", "SinkKind", "SinkSpec"]
