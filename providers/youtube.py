"""YouTube Data API v3 adapter.

Pipeline: channel search -> loose channel pick -> channel snippet -> same-day
video search -> one batched ``videos`` detail call -> window match.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from loguru import logger

from resolve import (
    OPEN,
    BroadcastRecord,
    ChannelCandidate,
    NotFoundError,
    find_live_broadcast,
    resolve_channel,
    utc_now,
)
from resolve.window_matcher import Clock

from .base import BroadcastProvider, format_rfc3339, parse_rfc3339
from .http import JsonHTTPClient

API_BASE = "https://www.googleapis.com/youtube/v3"


def utc_day_bounds(target: datetime) -> tuple[datetime, datetime]:
    """[start, next start) of the UTC calendar day containing ``target``."""
    t = target.astimezone(UTC)
    start = t.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def record_from_video(
    item: Mapping[str, Any],
    *,
    channel: ChannelCandidate,
    channel_url: str,
    channel_icon: str | None,
) -> BroadcastRecord | None:
    """Normalize one ``videos`` item; None if it is not a started broadcast."""

    live = item.get("liveStreamingDetails") or {}
    snippet = item.get("snippet") or {}
    started = live.get("actualStartTime")
    if not started:
        return None
    ended = live.get("actualEndTime")
    if ended:
        end = parse_rfc3339(ended)
    elif snippet.get("liveBroadcastContent") == "live":
        end = OPEN
    else:
        logger.debug("終了時刻のない非ライブ動画をスキップ: {}", item.get("id"))
        return None
    vid = str(item.get("id", ""))
    return BroadcastRecord(
        id=vid,
        title=snippet.get("title", ""),
        channel_id=channel.id,
        channel_display_name=channel.display_name,
        start=parse_rfc3339(started),
        end=end,
        url=f"https://youtube.com/watch?v={vid}",
        channel_url=channel_url,
        channel_icon=channel_icon,
    )


class YouTubeProvider(BroadcastProvider):
    def __init__(
        self,
        api_key: str,
        *,
        http: JsonHTTPClient | None = None,
        clock: Clock = utc_now,
        channel_search_limit: int = 5,
        video_search_limit: int = 20,
        api_base: str = API_BASE,
    ) -> None:
        self.api_key = api_key
        self.http = http or JsonHTTPClient()
        self.clock = clock
        self.channel_search_limit = channel_search_limit
        self.video_search_limit = video_search_limit
        self.api_base = api_base.rstrip("/")

    def _get(self, endpoint: str, params: dict[str, Any]) -> dict:
        return self.http.get(f"{self.api_base}/{endpoint}", params={**params, "key": self.api_key})

    def search_channels(self, name: str) -> list[ChannelCandidate]:
        res = self._get(
            "search",
            {
                "part": "snippet",
                "type": "channel",
                "q": name,
                "maxResults": self.channel_search_limit,
            },
        )
        out: list[ChannelCandidate] = []
        for it in res.get("items") or []:
            snippet = it.get("snippet") or {}
            cid = (it.get("id") or {}).get("channelId") or snippet.get("channelId")
            if not cid:
                continue
            title = snippet.get("channelTitle") or snippet.get("title") or ""
            out.append(ChannelCandidate(display_name=title, id=cid))
        return out

    def fetch_channel(self, channel_id: str) -> dict:
        res = self._get("channels", {"part": "snippet", "id": channel_id})
        items = res.get("items") or []
        if not items:
            raise NotFoundError(f"チャンネル詳細が取得できません: {channel_id}")
        return items[0]

    def search_day_video_ids(self, channel_id: str, target: datetime) -> list[str]:
        day_start, day_end = utc_day_bounds(target)
        res = self._get(
            "search",
            {
                "part": "snippet",
                "channelId": channel_id,
                "type": "video",
                "order": "date",
                "publishedAfter": format_rfc3339(day_start),
                "publishedBefore": format_rfc3339(day_end),
                "maxResults": self.video_search_limit,
            },
        )
        ids: list[str] = []
        for it in res.get("items") or []:
            vid = (it.get("id") or {}).get("videoId")
            if vid and vid not in ids:
                ids.append(vid)
        return ids

    def fetch_video_details(self, video_ids: Iterable[str]) -> list[dict]:
        res = self._get(
            "videos", {"part": "liveStreamingDetails,snippet", "id": ",".join(video_ids)}
        )
        return list(res.get("items") or [])

    def find_broadcast(self, channel_text: str, target: datetime) -> BroadcastRecord:
        candidates = self.search_channels(channel_text)
        logger.debug("YouTube チャンネル候補: {} 件", len(candidates))
        channel = resolve_channel(channel_text, candidates)

        detail = self.fetch_channel(channel.id)
        snippet = detail.get("snippet") or {}
        channel = ChannelCandidate(
            display_name=snippet.get("title") or channel.display_name, id=channel.id
        )
        channel_icon = ((snippet.get("thumbnails") or {}).get("default") or {}).get("url")
        channel_url = f"https://youtube.com/channel/{channel.id}"

        video_ids = self.search_day_video_ids(channel.id, target)
        logger.debug("YouTube 同日動画: {} 件 (channel={})", len(video_ids), channel.id)
        if not video_ids:
            raise NotFoundError(f"同日の動画がありません: {channel.display_name}")

        records: list[BroadcastRecord] = []
        for item in self.fetch_video_details(video_ids):
            rec = record_from_video(
                item, channel=channel, channel_url=channel_url, channel_icon=channel_icon
            )
            if rec is not None:
                records.append(rec)
        logger.debug("YouTube 配信レコード: {} 件", len(records))
        return find_live_broadcast(target, records, clock=self.clock)
