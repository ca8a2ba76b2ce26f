from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from resolve import OPEN, BroadcastRecord, NotFoundError, find_live_broadcast, window_contains

T0 = datetime(2026, 2, 13, 14, 0, tzinfo=UTC)


def rec(rid: str, start: datetime, end) -> BroadcastRecord:
    return BroadcastRecord(
        id=rid,
        title=f"stream {rid}",
        channel_id="ch",
        channel_display_name="Channel",
        start=start,
        end=end,
        url=f"https://example.com/{rid}",
    )


def fixed(now: datetime):
    return lambda: now


def test_zero_length_window_contains_its_instant():
    r = rec("z", T0, T0)
    assert find_live_broadcast(T0, [r]) is r


def test_bounds_are_inclusive():
    r = rec("a", T0, T0 + timedelta(hours=2))
    assert window_contains(r, T0)
    assert window_contains(r, T0 + timedelta(hours=2))
    assert not window_contains(r, T0 - timedelta(seconds=1))
    assert not window_contains(r, T0 + timedelta(hours=2, seconds=1))


def test_open_window_contains_targets_up_to_now():
    r = rec("live", T0, OPEN)
    now = T0 + timedelta(hours=1)
    assert window_contains(r, T0 + timedelta(minutes=30), clock=fixed(now))
    assert window_contains(r, now, clock=fixed(now))
    assert not window_contains(r, now + timedelta(minutes=1), clock=fixed(now))
    assert not window_contains(r, T0 - timedelta(minutes=1), clock=fixed(now))


def test_open_end_is_read_from_clock_on_every_check():
    r = rec("live", T0, OPEN)
    target = T0 + timedelta(hours=3)
    times = iter([T0 + timedelta(hours=1), T0 + timedelta(hours=4)])
    clock = lambda: next(times)  # noqa: E731
    assert not window_contains(r, target, clock=clock)
    assert window_contains(r, target, clock=clock)


def test_first_match_in_list_order_wins():
    wide = rec("wide", T0 - timedelta(hours=5), T0 + timedelta(hours=5))
    tight = rec("tight", T0 - timedelta(minutes=1), T0 + timedelta(minutes=1))
    assert find_live_broadcast(T0, [wide, tight]) is wide
    assert find_live_broadcast(T0, [tight, wide]) is tight


def test_skips_non_containing_records():
    before = rec("before", T0 - timedelta(hours=4), T0 - timedelta(hours=2))
    hit = rec("hit", T0 - timedelta(hours=1), T0 + timedelta(hours=1))
    assert find_live_broadcast(T0, [before, hit]) is hit


def test_empty_records_is_not_found():
    with pytest.raises(NotFoundError):
        find_live_broadcast(T0, [])


def test_no_containing_record_is_not_found():
    with pytest.raises(NotFoundError):
        find_live_broadcast(T0, [rec("x", T0 + timedelta(minutes=1), T0 + timedelta(hours=1))])
