"""Twitch Helix adapter with an app access token refreshed on 401."""

from __future__ import annotations

import re
import threading
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from loguru import logger

from resolve import (
    AuthError,
    BroadcastRecord,
    ChannelCandidate,
    HTTPStatusError,
    NotFoundError,
    TransportError,
    find_live_broadcast,
    resolve_channel,
    utc_now,
)
from resolve.window_matcher import Clock

from .base import BroadcastProvider, parse_rfc3339
from .http import JsonHTTPClient

API_BASE = "https://api.twitch.tv/helix"
TOKEN_URL = "https://id.twitch.tv/oauth2/token"

_DURATION_PARTS = {
    "h": re.compile(r"(\d+)h"),
    "m": re.compile(r"(\d+)m"),
    "s": re.compile(r"(\d+)s"),
}


def parse_twitch_duration(value: str) -> int:
    """Decode Helix durations like "3h8m33s" / "45m2s" / "59s" into seconds."""
    s = (value or "").strip().lower()
    total = 0
    for unit, mult in (("h", 3600), ("m", 60), ("s", 1)):
        m = _DURATION_PARTS[unit].search(s)
        if m:
            total += int(m.group(1)) * mult
    return total


class TwitchTokenHolder:
    """Holds exactly one app access token; refresh replaces it atomically."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        http: JsonHTTPClient,
        token_url: str = TOKEN_URL,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.http = http
        self.token_url = token_url
        self._value: str | None = None
        self._lock = threading.Lock()

    @property
    def value(self) -> str | None:
        return self._value

    def get(self) -> str:
        token = self._value
        if token:
            return token
        return self.refresh()

    def refresh(self) -> str:
        logger.info("Twitch アクセストークンを取得します")
        try:
            res = self.http.post(
                self.token_url,
                params={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except TransportError as e:
            raise AuthError(f"Twitch トークン取得に失敗: {e}") from e
        token = res.get("access_token")
        if not token:
            raise AuthError("Twitch トークン応答に access_token がありません")
        with self._lock:
            self._value = token
        return token


def record_from_video(item: Mapping[str, Any], *, user: Mapping[str, Any]) -> BroadcastRecord:
    start = parse_rfc3339(item["created_at"])
    login = user.get("login", "")
    return BroadcastRecord(
        id=str(item.get("id", "")),
        title=item.get("title", ""),
        channel_id=str(user.get("id", "")),
        channel_display_name=user.get("display_name") or login,
        start=start,
        end=start + timedelta(seconds=parse_twitch_duration(item.get("duration", ""))),
        url=item.get("url", ""),
        channel_url=f"https://twitch.tv/{login}",
        channel_icon=user.get("profile_image_url"),
    )


class TwitchProvider(BroadcastProvider):
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        http: JsonHTTPClient | None = None,
        token: TwitchTokenHolder | None = None,
        clock: Clock = utc_now,
        video_limit: int = 50,
        api_base: str = API_BASE,
    ) -> None:
        self.client_id = client_id
        self.http = http or JsonHTTPClient()
        self.token = token or TwitchTokenHolder(client_id, client_secret, http=self.http)
        self.clock = clock
        self.video_limit = video_limit
        self.api_base = api_base.rstrip("/")

    def _get(self, endpoint: str, params: dict[str, Any]) -> dict:
        headers = {"Client-ID": self.client_id, "Authorization": f"Bearer {self.token.get()}"}
        return self.http.get(f"{self.api_base}/{endpoint}", params=params, headers=headers)

    def lookup_user(self, login: str) -> dict | None:
        res = self._get("users", {"login": login})
        data = res.get("data") or []
        return data[0] if data else None

    def list_archives(self, user_id: str) -> list[dict]:
        res = self._get(
            "videos", {"user_id": user_id, "type": "archive", "first": self.video_limit}
        )
        return list(res.get("data") or [])

    def _find(self, channel_text: str, target: datetime) -> BroadcastRecord:
        login = channel_text.strip().lower()
        user = self.lookup_user(login) if login else None
        candidates: list[ChannelCandidate] = []
        if user:
            candidates.append(
                ChannelCandidate(
                    display_name=user.get("display_name") or user["login"],
                    id=str(user["id"]),
                    login=user["login"],
                )
            )
        channel = resolve_channel(channel_text, candidates)

        videos = self.list_archives(channel.id)
        logger.debug("Twitch アーカイブ: {} 件 (user={})", len(videos), channel.login)
        if not videos:
            raise NotFoundError(f"アーカイブがありません: {channel.display_name}")
        records = [record_from_video(v, user=user) for v in videos if v.get("created_at")]
        return find_live_broadcast(target, records, clock=self.clock)

    def find_broadcast(self, channel_text: str, target: datetime) -> BroadcastRecord:
        try:
            return self._find(channel_text, target)
        except HTTPStatusError as e:
            if e.status != 401:
                raise
        logger.warning("Twitch API が 401 を返しました; トークンを再取得して再試行します")
        self.token.refresh()
        try:
            return self._find(channel_text, target)
        except HTTPStatusError as e:
            if e.status == 401:
                raise AuthError("Twitch 認証に再試行後も失敗しました") from e
            raise
