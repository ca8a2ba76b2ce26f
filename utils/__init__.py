"""Small utilities shared across modules."""

from __future__ import annotations

import time

from loguru import logger


def logged_sleep(total_seconds: float, *, message: str = "待機") -> None:
    """Sleep for `total_seconds`, logging the wait at debug level."""

    try:
        total = float(total_seconds)
    except (TypeError, ValueError):
        total = 0.0
    if total <= 0:
        return
    logger.debug("{}: {} 秒", message, int(total))
    time.sleep(total)
    logger.debug("待機完了")
