from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo

from study_tracker.models import Session
from study_tracker.time_utils import local_day

ONE_DAY = timedelta(days=1)


def study_days(sessions: Iterable[Session], tz: tzinfo | None) -> set[date]:
    return {local_day(s.date, tz) for s in sessions}


def compute_streak(sessions: Iterable[Session], now: datetime) -> int:
    """Consecutive study days ending today or yesterday.

    Today counts when it already has a session; the backward walk always
    starts at yesterday, so a streak stays alive until a full day is missed.
    Only calendar-date membership matters, never the time of day.
    """
    tz = now.tzinfo
    days = study_days(sessions, tz)
    today = local_day(now, tz)

    count = 1 if today in days else 0
    cursor = today - ONE_DAY
    while cursor in days:
        count += 1
        cursor -= ONE_DAY
    return count


def longest_streak(sessions: Iterable[Session], tz: tzinfo | None) -> int:
    days = sorted(study_days(sessions, tz))
    best = 0
    run = 0
    previous: date | None = None
    for day in days:
        run = run + 1 if previous is not None and day - previous == ONE_DAY else 1
        best = max(best, run)
        previous = day
    return best
