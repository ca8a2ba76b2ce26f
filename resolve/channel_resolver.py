"""Loose channel-name matching over a provider's ranked search results."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Sequence

from loguru import logger

from .errors import NotFoundError
from .models import ChannelCandidate

# Word characters plus hiragana, katakana (incl. the prolonged sound mark) and CJK ideographs.
_DISALLOWED = re.compile(r"[^\w\u3040-\u309f\u30a0-\u30ff\u4e00-\u9fff]+")


def normalize_channel_name(name: str) -> str:
    """Canonical form used only for comparison, e.g. "Foo Bar Ch." -> "foobarch"."""
    s = unicodedata.normalize("NFKC", name or "").casefold()
    return _DISALLOWED.sub("", s)


def resolve_channel(typed_name: str, candidates: Sequence[ChannelCandidate]) -> ChannelCandidate:
    """Pick a channel: first candidate containing the typed name, else the top-ranked one."""

    if not candidates:
        raise NotFoundError(f"チャンネル候補がありません: {typed_name!r}")

    needle = normalize_channel_name(typed_name)
    for cand in candidates:
        if needle in normalize_channel_name(cand.display_name):
            logger.debug("チャンネル一致: {!r} -> {} ({})", typed_name, cand.display_name, cand.id)
            return cand

    first = candidates[0]
    logger.debug(
        "部分一致なし: {!r}; 先頭候補を採用 {} ({}) / 候補数={}",
        typed_name,
        first.display_name,
        first.id,
        len(candidates),
    )
    return first
