from __future__ import annotations

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv
from loguru import logger


class ConfigError(Exception):
    pass


JST_TZ = "Asia/Tokyo"


def env_get(key: str, *aliases: str, default: str | None = None) -> str | None:
    """Return the first non-empty value from env among `key` and `aliases`."""

    for k in (key, *aliases):
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v
    return default


def env_get_bool(key: str, *aliases: str, default: bool | None = None) -> bool | None:
    """Parse a boolean value from env for `key`/`aliases` if present."""

    v = env_get(key, *aliases)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_get_int(key: str, *aliases: str, default: int) -> int:
    """Parse a positive integer from env; invalid or non-positive values fall back to `default`."""

    v = env_get(key, *aliases)
    if v is None:
        return default
    try:
        n = int(str(v).strip())
    except ValueError:
        logger.warning("{} の値が整数ではありません: {!r}; 既定値 {} を使用", key, v, default)
        return default
    return n if n > 0 else default


@dataclass
class AppConfig:
    telegram_token: str
    telegram_admin_user_id: int | None = None
    telegram_register_commands: bool = True
    youtube_api_key: str | None = None
    twitch_client_id: str | None = None
    twitch_client_secret: str | None = None
    # Input text is read in `timezone`; replies are rendered in `display_timezone`
    timezone: str = JST_TZ
    display_timezone: str = JST_TZ
    http_timeout: int = 15
    long_poll_timeout: int = 25
    youtube_channel_search_limit: int = 5
    youtube_video_search_limit: int = 20
    twitch_video_limit: int = 50
    log_level: str = "INFO"
    log_file: str | None = None
    log_color: bool | None = None


def load_env_config(env_path: str = ".env.config") -> AppConfig:
    """Load configuration from a .env-style file and the process environment.

    Values already present in the environment win over the file.
    """

    env_file = os.getenv("ENV_FILE") or env_path
    if env_file and os.path.isfile(env_file):
        load_dotenv(env_file)
        logger.debug("設定ファイルを読み込みました: {}", env_file)
    else:
        logger.debug("設定ファイルが見つかりません ({}); 環境変数のみを使用", env_file)

    telegram_token = env_get("TELEGRAM_BOT_TOKEN", "TELEGRAM_TOKEN")
    if not telegram_token:
        msg = "TELEGRAM_BOT_TOKEN が未設定です"
        logger.error(msg)
        raise ConfigError(msg)

    admin_id_raw = env_get("TELEGRAM_ADMIN_USER_ID", "TELEGRAM_ADMIN_CHAT_ID")
    try:
        telegram_admin_user_id = int(admin_id_raw) if admin_id_raw else None
    except ValueError:
        telegram_admin_user_id = None

    timezone = env_get("TIMEZONE", "TZ", default=JST_TZ) or JST_TZ
    display_timezone = env_get("DISPLAY_TIMEZONE", default=timezone) or timezone
    register = env_get_bool("TELEGRAM_REGISTER_COMMANDS", default=True)
    log_level = env_get("LOG_LEVEL", default="INFO")

    return AppConfig(
        telegram_token=telegram_token.strip(),
        telegram_admin_user_id=telegram_admin_user_id,
        telegram_register_commands=True if register is None else bool(register),
        youtube_api_key=env_get("YOUTUBE_API_KEY"),
        twitch_client_id=env_get("TWITCH_CLIENT_ID"),
        twitch_client_secret=env_get("TWITCH_CLIENT_SECRET"),
        timezone=timezone,
        display_timezone=display_timezone,
        http_timeout=env_get_int("HTTP_TIMEOUT", default=15),
        long_poll_timeout=env_get_int("LONG_POLL_TIMEOUT", default=25),
        youtube_channel_search_limit=env_get_int("YOUTUBE_CHANNEL_SEARCH_LIMIT", default=5),
        youtube_video_search_limit=env_get_int("YOUTUBE_VIDEO_SEARCH_LIMIT", default=20),
        twitch_video_limit=env_get_int("TWITCH_VIDEO_LIMIT", default=50),
        log_level=(log_level or "INFO").upper(),
        log_file=env_get("LOG_FILE"),
        log_color=env_get_bool("LOG_COLOR", default=None),
    )


def setup_logging(
    level: str = "INFO", log_file: str | None = None, color: bool | None = None
) -> None:
    """Configure loguru sinks for console and optional file."""

    logger.remove()
    fmt_color = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
    )
    fmt_plain = (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"
    )
    logger.add(
        sys.stderr,
        level=level,
        colorize=(True if color is None else bool(color)),
        backtrace=True,
        diagnose=False,
        format=fmt_color if (color is None or color) else fmt_plain,
    )
    if log_file:
        rotation = env_get("LOG_ROTATION", default="10 MB") or "10 MB"
        retention = env_get("LOG_RETENTION", default="7 days") or "7 days"
        compression = env_get("LOG_COMPRESSION", default="zip") or "zip"
        d = os.path.dirname(log_file)
        if d:
            os.makedirs(d, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            rotation=rotation,
            retention=retention,
            compression=compression,
            enqueue=True,
            backtrace=True,
            diagnose=False,
            format=fmt_plain,
        )
