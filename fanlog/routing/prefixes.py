"""Prefix generators — decoration prepended to every broadcast record."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

PrefixGenerator = Callable[[], str]

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


def timestamp_prefix() -> str:
    """Local wall-clock time, e.g. ``2024/03/09 14:02:11``."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def empty_prefix() -> str:
    return ""
