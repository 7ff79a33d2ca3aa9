from __future__ import annotations

import re

MINUTES_PATTERN = re.compile(r"^(?P<value>\d+)\s*(?:m|min|mins|minutes)?$")


class MinutesParseError(ValueError):
    pass


def parse_minutes(raw: str) -> int:
    value = raw.strip().lower()
    if not value:
        raise MinutesParseError("Minutes are required")

    match = MINUTES_PATTERN.fullmatch(value)
    if not match:
        raise MinutesParseError("Invalid minutes. Examples: 25, 50m, 90min")

    minutes = int(match.group("value"))
    if minutes <= 0:
        raise MinutesParseError("Minutes must be positive")
    return minutes


def coerce_minutes(raw: int | str | None, minimum: int = 1) -> int:
    """Clamp an edited minutes value the way a committed form field is clamped.

    Empty, unparsable and non-positive values collapse to ``minimum``.
    """
    if raw is None:
        return minimum
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return minimum
    return max(minimum, value)
