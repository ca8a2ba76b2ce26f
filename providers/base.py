"""Common provider interface and timestamp helpers."""

from __future__ import annotations

from datetime import UTC, datetime

from resolve.models import BroadcastRecord


class BroadcastProvider:
    def find_broadcast(self, channel_text: str, target: datetime) -> BroadcastRecord:
        """Return the broadcast live at ``target`` or raise NotFoundError."""
        raise NotImplementedError


def parse_rfc3339(value: str) -> datetime:
    """Parse provider timestamps like "2026-02-13T15:00:05Z" into aware UTC datetimes."""
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_rfc3339(dt: datetime) -> str:
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
