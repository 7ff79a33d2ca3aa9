from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_STUDY_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
DEFAULT_DAILY_GOAL_MINUTES = 120


@dataclass(frozen=True)
class TimerPresets:
    study_minutes: int = DEFAULT_STUDY_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    daily_goal_minutes: int = DEFAULT_DAILY_GOAL_MINUTES


def _minutes(raw: dict[str, Any], key: str, default: int) -> int:
    value = raw.get(key, default)
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        logger.warning("invalid %s in timer presets: %r", key, value)
        return default


def load_timer_presets(path: Path) -> TimerPresets:
    if not path.exists():
        return TimerPresets()

    try:
        raw = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError:
        logger.exception("could not parse timer presets at %s", path)
        return TimerPresets()
    if not isinstance(raw, dict):
        return TimerPresets()

    return TimerPresets(
        study_minutes=_minutes(raw, "study_minutes", DEFAULT_STUDY_MINUTES),
        break_minutes=_minutes(raw, "break_minutes", DEFAULT_BREAK_MINUTES),
        daily_goal_minutes=_minutes(raw, "daily_goal_minutes", DEFAULT_DAILY_GOAL_MINUTES),
    )
