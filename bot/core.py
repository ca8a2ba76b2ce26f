"""Telegram Bot API client and command registration."""

from __future__ import annotations

from typing import Any

from loguru import logger

from providers.http import JsonHTTPClient
from resolve import TransportError

SEARCH_COMMANDS = [
    {"command": "search", "description": "日時指定で配信検索 (例: /search yt チャンネル名 2/14 0:20)"},
    {"command": "help", "description": "使い方を表示"},
]


class TelegramAPI:
    """Thin wrapper over the Bot API methods this bot uses."""

    def __init__(
        self,
        token: str,
        *,
        api_base: str = "https://api.telegram.org",
        http: JsonHTTPClient | None = None,
    ) -> None:
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.http = http or JsonHTTPClient(timeout=35)

    def call(self, method: str, params: dict | None = None) -> dict:
        url = f"{self.api_base}/bot{self.token}/{method}"
        return self.http.post(url, body=params or {})

    def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        parse_mode: str | None = None,
        disable_web_page_preview: bool = False,
        reply_to_message_id: int | None = None,
    ) -> dict:
        params: dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": disable_web_page_preview,
        }
        if parse_mode:
            params["parse_mode"] = parse_mode
        if reply_to_message_id is not None:
            params["reply_to_message_id"] = reply_to_message_id
        return self.call("sendMessage", params)

    def get_updates(
        self,
        *,
        offset: int | None = None,
        timeout: int = 25,
        allowed_updates: list[str] | None = None,
    ) -> dict:
        params: dict[str, Any] = {"timeout": timeout}
        if offset is not None:
            params["offset"] = offset
        if allowed_updates is not None:
            params["allowed_updates"] = allowed_updates
        return self.call("getUpdates", params)


def register_commands(api: TelegramAPI) -> bool:
    """Publish the bot's command list (setMyCommands); returns True on success."""

    logger.info("コマンド登録開始...")
    try:
        res = api.call("setMyCommands", {"commands": SEARCH_COMMANDS})
    except TransportError:
        logger.exception("コマンド登録エラー")
        return False
    if not res.get("ok"):
        logger.warning("Telegram setMyCommands 応答: {}", res)
        return False
    logger.info("コマンド登録完了")
    return True
