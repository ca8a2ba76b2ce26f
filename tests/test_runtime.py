from __future__ import annotations

from datetime import UTC, datetime, timedelta
from html.parser import HTMLParser

import pytest
from fakes import FakeHTTP, FakeProvider

from bot.command import Platform, SearchCommand
from bot.core import TelegramAPI, register_commands
from bot.formatting import INTERNAL_ERROR_TEXT, NOT_FOUND_TEXT, USAGE_TEXT
from bot.runtime import TelegramBot, build_search_command
from resolve import BroadcastRecord, NotFoundError, TransportError
from utils.config import AppConfig

NOW = datetime(2026, 2, 14, 14, 0, tzinfo=UTC)


class FakeAPI:
    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []
        self.parse_modes: list[str | None] = []

    def send_message(self, chat_id, text, *, parse_mode=None, **kwargs):
        self.sent.append((chat_id, text))
        self.parse_modes.append(parse_mode)
        return {"ok": True}


def make_bot(result, *, admin=None):
    prov = FakeProvider(result)
    search = SearchCommand({Platform.YOUTUBE: prov}, clock=lambda: NOW)
    api = FakeAPI()
    return TelegramBot(api, search, admin_user_id=admin), api, prov


RECORD = BroadcastRecord(
    id="v1",
    title="late night",
    channel_id="c1",
    channel_display_name="Foo",
    start=NOW - timedelta(hours=1),
    end=NOW,
    url="https://youtube.com/watch?v=v1",
)


def test_search_command_replies_with_broadcast():
    bot, api, prov = make_bot(RECORD)
    msg = {"message_id": 7, "chat": {"id": 42}, "text": "/search yt foo bar 22:30"}
    bot.process_update({"update_id": 1, "message": msg})
    assert prov.calls[0][0] == "foo bar"
    assert api.sent[0][0] == 42
    assert "late night" in api.sent[0][1]


def test_bot_username_suffix_is_accepted():
    bot, api, _ = make_bot(RECORD)
    bot.handle_text_message(1, "/search@finder_bot yt foo 22:30")
    assert "late night" in api.sent[0][1]


def test_incomplete_search_shows_usage():
    bot, api, prov = make_bot(RECORD)
    bot.handle_text_message(1, "/search yt")
    assert api.sent == [(1, USAGE_TEXT)]
    assert prov.calls == []


def test_other_text_is_ignored():
    bot, api, _ = make_bot(RECORD)
    bot.handle_text_message(1, "hello")
    bot.process_update({"update_id": 2, "message": {"chat": {"id": 1}}})
    assert api.sent == []


def test_help_lists_usage():
    bot, api, _ = make_bot(RECORD)
    bot.handle_text_message(1, "/help")
    assert USAGE_TEXT in api.sent[0][1]


def test_internal_error_notifies_admin():
    bot, api, _ = make_bot(TransportError("down"), admin=99)
    bot.handle_text_message(1, "/search yt foo 0:20")
    assert api.sent[0][0] == 99
    assert api.sent[-1] == (1, INTERNAL_ERROR_TEXT)


def test_build_search_command_only_enables_configured_platforms():
    cfg = AppConfig(telegram_token="t", youtube_api_key="k")
    cmd = build_search_command(cfg)
    assert set(cmd.providers) == {Platform.YOUTUBE}

    cfg = AppConfig(telegram_token="t", twitch_client_id="id", twitch_client_secret="s")
    assert set(build_search_command(cfg).providers) == {Platform.TWITCH}


def test_register_commands_publishes_search():
    http = FakeHTTP([{"ok": True}, {"ok": False, "description": "bad"}])
    api = TelegramAPI("TOKEN", http=http)
    assert register_commands(api) is True
    assert register_commands(api) is False
    call = http.calls[0]
    assert call["url"] == "https://api.telegram.org/botTOKEN/setMyCommands"
    assert [c["command"] for c in call["body"]["commands"]] == ["search", "help"]


def test_unknown_platform_replies_usage_without_admin_notice():
    bot, api, prov = make_bot(RECORD, admin=99)
    bot.handle_text_message(1, "/search yuotube foo 0:20")
    assert api.sent == [(1, USAGE_TEXT)]
    assert prov.calls == []


def test_unconfigured_platform_still_notifies_admin():
    bot, api, _ = make_bot(RECORD, admin=99)
    bot.handle_text_message(1, "/search tw foo 0:20")
    assert [chat for chat, _ in api.sent] == [99, 1]
    assert api.sent[-1] == (1, INTERNAL_ERROR_TEXT)


# Tags Telegram's HTML parse_mode understands
TELEGRAM_TAGS = {
    "b", "strong", "i", "em", "u", "ins", "s", "strike", "del",
    "a", "code", "pre", "span", "tg-spoiler", "tg-emoji", "blockquote",
}


class TagCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.tags: list[str] = []

    def handle_starttag(self, tag, attrs):
        self.tags.append(tag)


def unsupported_tags(text: str) -> list[str]:
    parser = TagCollector()
    parser.feed(text)
    parser.close()
    return [t for t in parser.tags if t not in TELEGRAM_TAGS]


@pytest.mark.parametrize(
    "text",
    [
        "/start",
        "/help",
        "/search yt",
        "/search yuotube foo 0:20",
        "/search yt foo 2/14",
        "/search yt foo 22:30",
        "/search tw foo 0:20",
    ],
)
def test_html_replies_only_use_telegram_tags(text):
    http = FakeHTTP([{"ok": True}])
    search = SearchCommand({Platform.YOUTUBE: FakeProvider(RECORD)}, clock=lambda: NOW)
    bot = TelegramBot(TelegramAPI("TOKEN", http=http), search)
    bot.handle_text_message(1, text)

    body = http.calls[0]["body"]
    assert body["parse_mode"] == "HTML"
    assert unsupported_tags(body["text"]) == []


def test_usage_reply_is_sent_in_html_mode():
    bot, api, _ = make_bot(RECORD)
    bot.handle_text_message(1, "/search yt")
    bot.handle_text_message(1, "/help")
    assert api.parse_modes == ["HTML", "HTML"]
    assert all(unsupported_tags(text) == [] for _, text in api.sent)


def test_not_found_reply():
    bot, api, _ = make_bot(NotFoundError("none"))
    bot.handle_text_message(1, "/search yt foo 0:20")
    assert api.sent == [(1, NOT_FOUND_TEXT)]
