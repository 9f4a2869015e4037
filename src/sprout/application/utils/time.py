"""
Datetime helpers shared by the codec, lifecycle and queue modules.

Naive datetimes are read as UTC. Calendar-day boundaries are taken in the
time zone carried by `now`, so callers decide what "tomorrow" means.
"""

from datetime import datetime, time, timedelta, timezone

from sprout.domain.constants import FAR_FUTURE_THRESHOLD, SUSPEND_FAR_DAYS

SECONDS_PER_DAY = 86400.0


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def as_utc_or_none(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return as_utc(value)


def _local(now: datetime) -> datetime:
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def start_of_day(now: datetime) -> datetime:
    """Midnight that opens the calendar day containing `now`, in UTC."""
    local = _local(now)
    return datetime.combine(local.date(), time(0), tzinfo=local.tzinfo).astimezone(timezone.utc)


def start_of_next_day(now: datetime) -> datetime:
    """Midnight that closes the calendar day containing `now`, in UTC."""
    local = _local(now)
    tomorrow = local.date() + timedelta(days=1)
    return datetime.combine(tomorrow, time(0), tzinfo=local.tzinfo).astimezone(timezone.utc)


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days from `start` to `end` (negative if `end` is earlier)."""
    return (as_utc(end) - as_utc(start)).total_seconds() / SECONDS_PER_DAY


def whole_days_between(start: datetime, end: datetime) -> int:
    """Whole elapsed days, never negative."""
    return max(0, int(days_between(start, end) // 1))


def far_future(now: datetime) -> datetime:
    """Suspension sentinel: a due date no due-based query can reach."""
    return as_utc(now) + timedelta(days=SUSPEND_FAR_DAYS)


def is_far_future(due: datetime | None, now: datetime) -> bool:
    if due is None:
        return False
    return as_utc(due) - as_utc(now) > FAR_FUTURE_THRESHOLD
