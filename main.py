"""Zero-CLI entrypoint.

Reads configuration from `.env.config` and environment variables, sets up
logging and runs the Telegram bot (long polling) that answers `/search`.
"""

from __future__ import annotations

import sys

from loguru import logger

from bot.runtime import run_bot
from utils.config import AppConfig, ConfigError, load_env_config, setup_logging


def run(env_path: str = ".env.config") -> None:
    try:
        cfg: AppConfig = load_env_config(env_path)
    except ConfigError as ce:
        logger.error("設定エラー: {}", ce)
        sys.exit(2)

    setup_logging(level=cfg.log_level, log_file=cfg.log_file, color=cfg.log_color)
    logger.debug(
        "起動パラメータ: tz={}, display_tz={}, http_timeout={}, yt={}, tw={}",
        cfg.timezone,
        cfg.display_timezone,
        cfg.http_timeout,
        bool(cfg.youtube_api_key),
        bool(cfg.twitch_client_id and cfg.twitch_client_secret),
    )
    run_bot(cfg)


if __name__ == "__main__":
    run()
