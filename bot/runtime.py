"""Telegram bot runtime: long-polling loop and command dispatch."""

from __future__ import annotations

from loguru import logger

from providers import JsonHTTPClient, TwitchProvider, YouTubeProvider
from resolve import TransportError
from utils import logged_sleep
from utils.config import AppConfig

from .command import Platform, SearchCommand, Status, parse_search_args
from .core import TelegramAPI, register_commands
from .formatting import USAGE_TEXT, format_outcome, help_text


def build_search_command(cfg: AppConfig, *, http: JsonHTTPClient | None = None) -> SearchCommand:
    """Create providers for every platform whose credentials are configured."""

    http = http or JsonHTTPClient(timeout=cfg.http_timeout)
    providers = {}
    if cfg.youtube_api_key:
        providers[Platform.YOUTUBE] = YouTubeProvider(
            cfg.youtube_api_key,
            http=http,
            channel_search_limit=cfg.youtube_channel_search_limit,
            video_search_limit=cfg.youtube_video_search_limit,
        )
    else:
        logger.warning("YOUTUBE_API_KEY が未設定です; yt 検索は無効")
    if cfg.twitch_client_id and cfg.twitch_client_secret:
        providers[Platform.TWITCH] = TwitchProvider(
            cfg.twitch_client_id,
            cfg.twitch_client_secret,
            http=http,
            video_limit=cfg.twitch_video_limit,
        )
    else:
        logger.warning("TWITCH_CLIENT_ID / TWITCH_CLIENT_SECRET が未設定です; tw 検索は無効")
    return SearchCommand(providers, timezone=cfg.timezone)


class TelegramBot:
    def __init__(
        self,
        api: TelegramAPI,
        search: SearchCommand,
        *,
        display_timezone: str = "Asia/Tokyo",
        admin_user_id: int | None = None,
    ) -> None:
        self.api = api
        self.search = search
        self.display_tz = display_timezone
        self.admin_user_id = admin_user_id
        self.offset: int | None = None

    def _reply(self, chat_id: int, text: str, *, message_id: int | None = None) -> None:
        try:
            self.api.send_message(chat_id, text, parse_mode="HTML", reply_to_message_id=message_id)
        except TransportError:
            logger.exception("チャット {} への送信に失敗しました", chat_id)

    def _notify_admin(self, text: str) -> None:
        if not self.admin_user_id:
            return
        try:
            self.api.send_message(self.admin_user_id, f"❗️ エラー:\n{text}")
        except TransportError:
            logger.exception("管理者への通知に失敗しました")

    def handle_text_message(self, chat_id: int, text: str, *, message_id: int | None = None) -> None:
        t = text.strip()
        head, _, rest = t.partition(" ")
        # "/search@MyBot" in group chats
        command = head.split("@", 1)[0].lower()

        if command in ("/start", "/help"):
            self._reply(chat_id, help_text(self.search.timezone), message_id=message_id)
            return
        if command != "/search":
            return

        args = parse_search_args(rest)
        if args is None:
            self._reply(chat_id, USAGE_TEXT, message_id=message_id)
            return

        outcome = self.search.run(args.platform, args.channel, args.when)
        if outcome.status is Status.INTERNAL_ERROR:
            self._notify_admin(f"/search {rest}\n{outcome.detail}")
        self._reply(chat_id, format_outcome(outcome, tz=self.display_tz), message_id=message_id)

    def process_update(self, update: dict) -> None:
        msg = update.get("message") or {}
        chat = msg.get("chat") or {}
        chat_id = chat.get("id")
        text = msg.get("text") or ""
        if not chat_id or not text:
            return
        self.handle_text_message(int(chat_id), text, message_id=msg.get("message_id"))

    def poll_forever(self, *, long_poll_timeout: int = 25, sleep_on_error: int = 3) -> None:
        logger.info("Telegram ボットを起動します (long polling)…")
        try:
            self.api.call("deleteWebhook", {"drop_pending_updates": False})
        except TransportError:
            logger.debug("deleteWebhook に失敗; long polling を続行します")
        fail_streak = 0
        while True:
            try:
                res = self.api.get_updates(
                    offset=self.offset, timeout=long_poll_timeout, allowed_updates=["message"]
                )
                if not res.get("ok"):
                    logger.warning("Telegram getUpdates 応答: {}", res)
                    logged_sleep(sleep_on_error, message="Telegram 応答後の待機")
                    continue
                for upd in res.get("result", []):
                    self.offset = upd.get("update_id", 0) + 1
                    self.process_update(upd)
                fail_streak = 0
            except KeyboardInterrupt:  # pragma: no cover
                logger.info("Ctrl+C により Telegram ボットを停止します")
                break
            except TransportError as e:
                fail_streak += 1
                backoff = min(60, sleep_on_error * (2 ** min(fail_streak, 3)))
                logger.warning(
                    "long polling 失敗: {}. {} 秒後に再試行", str(e).splitlines()[0], backoff
                )
                logged_sleep(backoff, message="long polling エラー後の待機")
            except Exception as e:
                fail_streak += 1
                backoff = min(60, sleep_on_error * (2 ** min(fail_streak, 3)))
                logger.exception("long polling 中の予期しないエラー: {}", e)
                logged_sleep(backoff, message="long polling エラー後の待機")


def run_bot(cfg: AppConfig) -> None:
    """Build the bot from configuration and poll until interrupted."""

    api = TelegramAPI(
        cfg.telegram_token, http=JsonHTTPClient(timeout=cfg.long_poll_timeout + cfg.http_timeout)
    )
    if cfg.telegram_register_commands:
        register_commands(api)
    bot = TelegramBot(
        api,
        build_search_command(cfg),
        display_timezone=cfg.display_timezone,
        admin_user_id=cfg.telegram_admin_user_id,
    )
    bot.poll_forever(long_poll_timeout=cfg.long_poll_timeout)
