"""Provider adapters: fetch and normalize channel/broadcast data per platform."""

from __future__ import annotations

from .base import BroadcastProvider, format_rfc3339, parse_rfc3339
from .http import JsonHTTPClient
from .twitch import TwitchProvider, TwitchTokenHolder, parse_twitch_duration
from .youtube import YouTubeProvider, utc_day_bounds

__all__ = [
    "BroadcastProvider",
    "JsonHTTPClient",
    "YouTubeProvider",
    "TwitchProvider",
    "TwitchTokenHolder",
    "parse_twitch_duration",
    "utc_day_bounds",
    "parse_rfc3339",
    "format_rfc3339",
]
