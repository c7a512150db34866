"""Day-boundary transitions for a user's global study streak.

Two different notions of "day" are used on purpose:

* the same-day check compares *local calendar dates*, so at most one
  transition happens per calendar day;
* the gap check compares the *raw elapsed time* against 24 hours, so
  23:59 -> 00:01 the next day increments while 00:01 -> 23:59 two days
  later breaks the streak.
"""
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Tuple

from studysync.models.streak import StreakRecord, StreakOutcome

STREAK_WINDOW = timedelta(hours=24)


def local_date(ts: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of ``ts`` in ``tz`` (system local zone when None).

    Naive timestamps are taken to already be local.
    """
    if ts.tzinfo is None:
        return ts.date()
    if tz is None:
        return ts.astimezone().date()
    return ts.astimezone(tz).date()


def _elapsed(last: datetime, now: datetime) -> timedelta:
    # Mixed naive/aware pairs: interpret the naive side as local time
    if (last.tzinfo is None) != (now.tzinfo is None):
        last = last.astimezone() if last.tzinfo is None else last
        now = now.astimezone() if now.tzinfo is None else now
    return now - last


def record_activity(
    record: StreakRecord,
    now: datetime,
    tz: Optional[tzinfo] = None
) -> Tuple[StreakRecord, StreakOutcome]:
    """Apply one qualifying activity at ``now`` and return the next record."""
    last = record.last_activity_date

    if last is not None and local_date(last, tz) == local_date(now, tz):
        return record, StreakOutcome(increased=False, broken=False)

    if last is None:
        current, broken = 1, False
    elif _elapsed(last, now) <= STREAK_WINDOW:
        current, broken = record.current_streak + 1, False
    else:
        current, broken = 1, True

    next_record = StreakRecord(
        current_streak=current,
        longest_streak=max(record.longest_streak, current),
        last_activity_date=now,
    )
    return next_record, StreakOutcome(increased=True, broken=broken)


def reset_streak(record: StreakRecord) -> StreakRecord:
    return StreakRecord(
        current_streak=0,
        longest_streak=record.longest_streak,
        last_activity_date=None,
    )
