from __future__ import annotations

from datetime import UTC, datetime, timedelta

from bot.command import Platform, SearchOutcome, Status
from bot.formatting import (
    INTERNAL_ERROR_TEXT,
    INVALID_DATETIME_TEXT,
    NOT_FOUND_TEXT,
    USAGE_TEXT,
    format_local,
    format_outcome,
)
from resolve import OPEN, BroadcastRecord

START = datetime(2026, 2, 13, 14, 0, tzinfo=UTC)


def rec(end):
    return BroadcastRecord(
        id="v1",
        title="<雑談> & more",
        channel_id="c1",
        channel_display_name="Foo",
        start=START,
        end=end,
        url="https://youtube.com/watch?v=v1",
        channel_url="https://youtube.com/channel/c1",
    )


def test_format_local_uses_display_timezone():
    assert format_local(START, "Asia/Tokyo") == "26/02/13 23:00"
    assert format_local(START, "UTC") == "26/02/13 14:00"


def test_found_message_escapes_and_links():
    record = rec(START + timedelta(hours=2))
    out = SearchOutcome(Status.FOUND, platform=Platform.YOUTUBE, record=record)
    text = format_outcome(out, tz="Asia/Tokyo")
    assert '<a href="https://youtube.com/channel/c1">Foo</a>' in text
    assert "&lt;雑談&gt; &amp; more" in text
    assert "26/02/13 23:00 - 26/02/14 01:00" in text
    assert "https://youtube.com/watch?v=v1" in text
    assert "YouTube" in text


def test_open_broadcast_ends_now_and_is_marked_live():
    out = SearchOutcome(Status.FOUND, platform=Platform.TWITCH, record=rec(OPEN))
    text = format_outcome(out, tz="Asia/Tokyo", now=START + timedelta(minutes=30))
    assert "26/02/13 23:00 - 26/02/13 23:30 (配信中)" in text


def test_outcome_messages():
    assert format_outcome(SearchOutcome(Status.INVALID_DATETIME), tz="UTC") == INVALID_DATETIME_TEXT
    assert format_outcome(SearchOutcome(Status.NOT_FOUND), tz="UTC") == NOT_FOUND_TEXT
    assert format_outcome(SearchOutcome(Status.INTERNAL_ERROR), tz="UTC") == INTERNAL_ERROR_TEXT
    assert format_outcome(SearchOutcome(Status.UNKNOWN_PLATFORM), tz="UTC") == USAGE_TEXT


def test_usage_placeholders_are_html_escaped():
    assert "&lt;yt|tw&gt; &lt;チャンネル名&gt; &lt;日時&gt;" in USAGE_TEXT
    assert "<" not in USAGE_TEXT
