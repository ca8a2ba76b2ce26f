"""Chat surface: search command, Telegram API client, formatting and runtime."""

from __future__ import annotations

from .command import Platform, SearchArgs, SearchCommand, SearchOutcome, Status, parse_search_args
from .core import TelegramAPI, register_commands
from .formatting import format_broadcast, format_local, format_outcome

__all__ = [
    "Platform",
    "SearchArgs",
    "SearchCommand",
    "SearchOutcome",
    "Status",
    "parse_search_args",
    "TelegramAPI",
    "register_commands",
    "format_broadcast",
    "format_local",
    "format_outcome",
]
