"""Immutable records passed between providers and the resolvers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


class OpenEnd:
    """End marker for a broadcast that is still live."""

    _instance: OpenEnd | None = None

    def __new__(cls) -> OpenEnd:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OPEN"


OPEN = OpenEnd()


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class ChannelCandidate:
    display_name: str
    id: str
    login: str | None = None


@dataclass(frozen=True)
class BroadcastRecord:
    id: str
    title: str
    channel_id: str
    channel_display_name: str
    start: datetime
    end: datetime | OpenEnd
    url: str
    channel_url: str | None = None
    channel_icon: str | None = None

    @property
    def is_open(self) -> bool:
        return isinstance(self.end, OpenEnd)

    def resolved_end(self, now: datetime) -> datetime:
        """Concrete end instant; an open window ends at `now`."""
        return now if isinstance(self.end, OpenEnd) else self.end
