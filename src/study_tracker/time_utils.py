from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo


DEFAULT_TZ = "Europe/Lisbon"


def now_local(tz_name: str = DEFAULT_TZ) -> datetime:
    return datetime.now(tz=ZoneInfo(tz_name))


def local_day(moment: datetime, tz: tzinfo | None) -> date:
    """Calendar date of ``moment`` as seen in ``tz``.

    Naive timestamps are taken to already be local wall-clock time. With
    ``tz=None`` aware timestamps are converted to the system local zone.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def parse_timestamp(raw: str, default_tz: tzinfo | None = None) -> datetime:
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None and default_tz is not None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


def millis_id(now: datetime, taken: set[int] | None = None) -> int:
    candidate = int(now.timestamp() * 1000)
    if taken:
        while candidate in taken:
            candidate += 1
    return candidate


def month_days(year: int, month: int) -> list[date]:
    first = date(year, month, 1)
    days: list[date] = []
    current = first
    while current.month == month:
        days.append(current)
        current += timedelta(days=1)
    return days


def format_clock(seconds: int) -> str:
    mins, secs = divmod(max(0, seconds), 60)
    return f"{mins:02d}:{secs:02d}"
