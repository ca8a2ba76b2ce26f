"""Telegram HTML replies for search outcomes."""

from __future__ import annotations

import html as _html
from datetime import datetime
from zoneinfo import ZoneInfo

from resolve import FORMAT_HINT, BroadcastRecord, utc_now

from .command import Platform, SearchOutcome, Status

INVALID_DATETIME_TEXT = (
    "日時は YYYY-MM-DD HH:MM の形式で入力してください（例: 2026-02-14 00:20 / 2/14 0:20 / 0:20）"
)
NOT_FOUND_TEXT = "該当時間の配信はありませんでした"
INTERNAL_ERROR_TEXT = "エラーが発生しました"
USAGE_TEXT = (
    "使い方: /search &lt;yt|tw&gt; &lt;チャンネル名&gt; &lt;日時&gt;\n"
    "例: /search yt 例のチャンネル 2/14 0:20"
)

PLATFORM_LABELS = {Platform.YOUTUBE: "YouTube", Platform.TWITCH: "Twitch"}


def tg_escape(text: str) -> str:
    """Escape text for Telegram HTML parse_mode (escape &, <, >)."""
    return _html.escape(text or "", quote=False)


def format_local(dt: datetime, tz: str) -> str:
    """Render an instant as ``YY/MM/DD HH:mm`` in the display timezone."""
    return dt.astimezone(ZoneInfo(tz)).strftime("%y/%m/%d %H:%M")


def help_text(tz: str) -> str:
    return (
        "📺 配信検索ボット\n\n"
        "指定した日時に配信していた枠を探します。\n\n"
        f"{USAGE_TEXT}\n\n"
        f"日時の形式: {FORMAT_HINT}\n"
        f"（タイムゾーン: {tz}。年・日付を省略すると今日の日付で補完します）\n\n"
        "yt はチャンネル名のゆる検索、tw はログイン名の完全一致です。"
    )


def format_broadcast(
    record: BroadcastRecord, *, platform: Platform | None, tz: str, now: datetime | None = None
) -> str:
    end = record.resolved_end(now or utc_now())
    channel = tg_escape(record.channel_display_name)
    if record.channel_url:
        channel = f'<a href="{_html.escape(record.channel_url)}">{channel}</a>'
    label = PLATFORM_LABELS.get(platform, "") if platform else ""
    lines = [
        f"{channel}" + (f" <i>({label})</i>" if label else ""),
        f"<b>{tg_escape(record.title)}</b>",
        f"🕒 {format_local(record.start, tz)} - {format_local(end, tz)}"
        + (" (配信中)" if record.is_open else ""),
        f"🔗 {tg_escape(record.url)}",
    ]
    return "\n".join(lines)


def format_outcome(outcome: SearchOutcome, *, tz: str, now: datetime | None = None) -> str:
    if outcome.status is Status.FOUND and outcome.record is not None:
        return format_broadcast(outcome.record, platform=outcome.platform, tz=tz, now=now)
    if outcome.status is Status.INVALID_DATETIME:
        return INVALID_DATETIME_TEXT
    if outcome.status is Status.NOT_FOUND:
        return NOT_FOUND_TEXT
    if outcome.status is Status.UNKNOWN_PLATFORM:
        return USAGE_TEXT
    return INTERNAL_ERROR_TEXT
