"""Pick the broadcast whose live window contains a target instant."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime

from loguru import logger

from .errors import NotFoundError
from .models import BroadcastRecord, OpenEnd, utc_now

Clock = Callable[[], datetime]


def window_contains(record: BroadcastRecord, target: datetime, *, clock: Clock = utc_now) -> bool:
    """Inclusive containment: start <= target <= end.

    An open end means "still live": it is read from ``clock`` at the moment of
    the check.
    """

    if target < record.start:
        return False
    if isinstance(record.end, OpenEnd):
        return target <= clock()
    return target <= record.end


def find_live_broadcast(
    target: datetime, records: Iterable[BroadcastRecord], *, clock: Clock = utc_now
) -> BroadcastRecord:
    """Return the first record (in the given order) that was live at ``target``."""

    checked = 0
    for rec in records:
        checked += 1
        if window_contains(rec, target, clock=clock):
            logger.debug("配信が一致: {} [{} - {}]", rec.id, rec.start.isoformat(), rec.end)
            return rec
    raise NotFoundError(f"{target.isoformat()} を含む配信はありません (候補 {checked} 件)")
