"""The search command: three strings in, one outcome out."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from loguru import logger

from providers import BroadcastProvider
from resolve import (
    DEFAULT_TZ,
    AuthError,
    BroadcastRecord,
    NotFoundError,
    ParseError,
    TransportError,
    resolve_datetime,
    utc_now,
)


class Platform(str, Enum):
    YOUTUBE = "yt"
    TWITCH = "tw"

    @classmethod
    def parse(cls, value: str) -> Platform | None:
        v = (value or "").strip().lower()
        aliases = {
            "yt": cls.YOUTUBE,
            "youtube": cls.YOUTUBE,
            "tw": cls.TWITCH,
            "twitch": cls.TWITCH,
        }
        return aliases.get(v)


class Status(str, Enum):
    FOUND = "found"
    INVALID_DATETIME = "invalid_datetime"
    NOT_FOUND = "not_found"
    UNKNOWN_PLATFORM = "unknown_platform"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class SearchOutcome:
    status: Status
    platform: Platform | None = None
    record: BroadcastRecord | None = None
    detail: str = ""


@dataclass(frozen=True)
class SearchArgs:
    platform: str
    channel: str
    when: str


# "<platform> <channel words...> <[date] time>"
_ARGS_RE = re.compile(
    r"(?P<platform>\S+)\s+(?P<channel>.+?)\s+"
    r"(?P<when>(?:[0-9]{4}[-/][0-9]{1,2}[-/][0-9]{1,2}\s+|[0-9]{1,2}/[0-9]{1,2}\s+)?"
    r"[0-9]{1,2}:[0-9]{2})"
)


def parse_search_args(text: str) -> SearchArgs | None:
    """Split the text after ``/search`` into platform, channel and date/time.

    The date/time is taken from the tail so channel names may contain spaces.
    If the tail is not a recognizable time, the last word is used as-is and
    left for the date/time resolver to reject.
    """

    s = (text or "").strip()
    m = _ARGS_RE.fullmatch(s)
    if m:
        return SearchArgs(m.group("platform"), m.group("channel").strip(), m.group("when"))
    parts = s.split()
    if len(parts) < 3:
        return None
    return SearchArgs(parts[0], " ".join(parts[1:-1]), parts[-1])


class SearchCommand:
    """Runs date parsing then the selected provider, mapping errors to outcomes."""

    def __init__(
        self,
        providers: Mapping[Platform, BroadcastProvider],
        *,
        timezone: str = DEFAULT_TZ,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.providers = dict(providers)
        self.timezone = timezone
        self.clock = clock

    def run(self, platform: str, channel: str, when: str) -> SearchOutcome:
        logger.info("検索: platform={} channel={!r} datetime={!r}", platform, channel, when)

        plat = Platform.parse(platform)
        if plat is None:
            logger.info("不明なプラットフォーム指定: {!r}", platform)
            return SearchOutcome(Status.UNKNOWN_PLATFORM, detail=f"unknown platform: {platform}")

        try:
            target = resolve_datetime(when, self.clock(), tz=self.timezone)
        except ParseError as e:
            logger.info("日時の解釈に失敗: {}", e)
            return SearchOutcome(Status.INVALID_DATETIME, platform=plat, detail=str(e))

        provider = self.providers.get(plat)
        if provider is None:
            logger.warning("{} の資格情報が未設定のため検索できません", plat.value)
            return SearchOutcome(
                Status.INTERNAL_ERROR, platform=plat, detail=f"platform not configured: {plat.value}"
            )

        try:
            record = provider.find_broadcast(channel, target)
        except NotFoundError as e:
            logger.info("該当なし: {}", e)
            return SearchOutcome(Status.NOT_FOUND, platform=plat, detail=str(e))
        except AuthError as e:
            logger.error("認証エラー ({}): {}", plat.value, e)
            return SearchOutcome(Status.INTERNAL_ERROR, platform=plat, detail=str(e))
        except TransportError as e:
            logger.error("通信エラー ({}): {}", plat.value, e)
            return SearchOutcome(Status.INTERNAL_ERROR, platform=plat, detail=str(e))
        except Exception as e:
            logger.exception("検索中に予期しないエラー")
            return SearchOutcome(Status.INTERNAL_ERROR, platform=plat, detail=repr(e))

        logger.info("一致: {} / {} ({})", record.channel_display_name, record.title, record.url)
        return SearchOutcome(Status.FOUND, platform=plat, record=record)
