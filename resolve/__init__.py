"""Broadcast-window resolution: date parsing, channel matching, window containment."""

from __future__ import annotations

from .channel_resolver import normalize_channel_name, resolve_channel
from .datetime_resolver import DATETIME_FORMATS, DEFAULT_TZ, FORMAT_HINT, resolve_datetime
from .errors import (
    AuthError,
    HTTPStatusError,
    NotFoundError,
    ParseError,
    ResolutionError,
    TransportError,
)
from .models import OPEN, BroadcastRecord, ChannelCandidate, OpenEnd, utc_now
from .window_matcher import find_live_broadcast, window_contains

__all__ = [
    "DATETIME_FORMATS",
    "DEFAULT_TZ",
    "FORMAT_HINT",
    "resolve_datetime",
    "normalize_channel_name",
    "resolve_channel",
    "find_live_broadcast",
    "window_contains",
    "BroadcastRecord",
    "ChannelCandidate",
    "OpenEnd",
    "OPEN",
    "utc_now",
    "ResolutionError",
    "ParseError",
    "NotFoundError",
    "AuthError",
    "TransportError",
    "HTTPStatusError",
]
