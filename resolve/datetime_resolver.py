"""Loose date/time parsing for the search command.

Accepted inputs, tried in this order (first full match wins):

- ``YYYY-M-D H:mm``  e.g. ``2026-02-14 00:20``
- ``YYYY/M/D H:mm``  e.g. ``2026/2/14 0:20``
- ``M/D H:mm``       e.g. ``2/14 0:20``  (year from the reference clock)
- ``H:mm``           e.g. ``0:20``       (date from the reference clock)

Text is always read in one reference timezone (Asia/Tokyo by default) and the
result is returned as an aware UTC datetime. Only ASCII digits are accepted.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from loguru import logger

from .errors import ParseError

DEFAULT_TZ = "Asia/Tokyo"

FORMAT_HINT = "YYYY-MM-DD HH:MM / M/D H:MM / H:MM"

_TIME = r"(?P<hour>[0-9]{1,2}):(?P<minute>[0-9]{2})"
_YMD = r"(?P<year>[0-9]{{4}}){sep}(?P<month>[0-9]{{1,2}}){sep}(?P<day>[0-9]{{1,2}})"

# Order matters: more specific formats must come first.
DATETIME_FORMATS: list[tuple[str, re.Pattern[str]]] = [
    ("YYYY-M-D H:mm", re.compile(_YMD.format(sep="-") + r"\s+" + _TIME)),
    ("YYYY/M/D H:mm", re.compile(_YMD.format(sep="/") + r"\s+" + _TIME)),
    ("M/D H:mm", re.compile(rf"(?P<month>[0-9]{{1,2}})/(?P<day>[0-9]{{1,2}})\s+{_TIME}")),
    ("H:mm", re.compile(_TIME)),
]

_HAS_TIME = re.compile(r"[0-9]{1,2}:[0-9]{2}")


def resolve_datetime(text: str, reference_now: datetime, *, tz: str = DEFAULT_TZ) -> datetime:
    """Parse ``text`` into a UTC instant, filling missing fields from ``reference_now``.

    Raises ParseError when no format matches or the fields describe an
    impossible calendar date/time.
    """

    s = (text or "").strip()
    if not _HAS_TIME.search(s):
        raise ParseError(f"時刻が含まれていません: {text!r}")

    zone = ZoneInfo(tz)
    ref = reference_now.astimezone(zone)

    for name, pattern in DATETIME_FORMATS:
        m = pattern.fullmatch(s)
        if not m:
            continue
        fields = m.groupdict()
        year = int(fields["year"]) if fields.get("year") else ref.year
        month = int(fields["month"]) if fields.get("month") else ref.month
        day = int(fields["day"]) if fields.get("day") else ref.day
        try:
            local = datetime(year, month, day, int(fields["hour"]), int(fields["minute"]), tzinfo=zone)
        except ValueError as e:
            raise ParseError(f"存在しない日時です: {text!r} ({e})") from e
        logger.debug("日時 {!r} を形式 {} で解釈: {}", s, name, local.isoformat())
        return local.astimezone(UTC)

    raise ParseError(f"日時の形式を認識できません: {text!r}")
