from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from timecapsule.lifecycle import (
    utcnow, to_naive_utc, is_openable, should_notify, should_disclose_media,
)

OPEN = datetime(2030, 1, 1, 12, 0, 0)


def _capsule(notification_sent=False):
    return SimpleNamespace(open_date=OPEN, notification_sent=notification_sent)


def test_openable_at_and_after_open_date():
    c = _capsule()
    assert not is_openable(c, OPEN - timedelta(microseconds=1))
    assert is_openable(c, OPEN)
    assert is_openable(c, OPEN + timedelta(days=365))


def test_openable_is_monotonic_in_now():
    c = _capsule()
    instants = [OPEN + timedelta(minutes=m) for m in range(-180, 181, 7)]
    seen_open = False
    for now in instants:
        if seen_open:
            assert is_openable(c, now)
        seen_open = seen_open or is_openable(c, now)
    assert seen_open


def test_should_notify_requires_openable_and_unsent():
    after = OPEN + timedelta(hours=1)
    before = OPEN - timedelta(hours=1)
    assert should_notify(_capsule(False), after)
    assert not should_notify(_capsule(True), after)
    assert not should_notify(_capsule(False), before)
    assert not should_notify(_capsule(True), before)


def test_media_disclosure_matches_openable():
    c = _capsule()
    for delta in (-2, -1, 0, 1, 2):
        now = OPEN + timedelta(hours=delta)
        assert should_disclose_media(c, now) == is_openable(c, now)


def test_utcnow_is_naive():
    assert utcnow().tzinfo is None


def test_to_naive_utc_converts_offsets():
    aware = datetime(2030, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_naive_utc(aware) == datetime(2030, 1, 1, 12, 0)
    assert to_naive_utc(OPEN) is OPEN
