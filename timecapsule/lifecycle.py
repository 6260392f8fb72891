# timecapsule/lifecycle.py
"""
Lock/unlock rules for capsules.

These are the only policy decisions in the system. The HTTP read path and the
notification sweep both go through them, each passing a single ``now`` taken
once per logical operation.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how datetimes are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def is_openable(capsule, now: datetime) -> bool:
    return now >= capsule.open_date


def should_notify(capsule, now: datetime) -> bool:
    return is_openable(capsule, now) and not capsule.notification_sent


def should_disclose_media(capsule, now: datetime) -> bool:
    return is_openable(capsule, now)
