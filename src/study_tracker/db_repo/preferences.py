from __future__ import annotations

import logging
import sqlite3
from typing import Any, Protocol

from study_tracker.db_repo.base import _MISSING, STORAGE_KEYS
from study_tracker.i18n import normalize_language_code
from study_tracker.models import BACKGROUND_MODES, COLOR_MODES, Preferences

logger = logging.getLogger(__name__)

DEFAULT_DAILY_GOAL = 120
DEFAULT_PRIMARY_COLOR = "#ffffff"
DEFAULT_VOLUME = 0.5


class DbProtocol(Protocol):
    def _connect(self) -> sqlite3.Connection: ...
    def _get_json(self, user_id: int, key: str) -> Any: ...
    def _set_json(self, user_id: int, key: str, value: Any) -> bool: ...


def parse_flag(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        raw = value.strip().lower()
        if raw in {"1", "true", "yes", "on"}:
            return True
        if raw in {"0", "false", "no", "off"}:
            return False
    return None


class PreferencesMixin:
    def get_daily_goal(self: DbProtocol, user_id: int, default: int = DEFAULT_DAILY_GOAL) -> int:
        value = self._get_json(user_id, STORAGE_KEYS["daily_goal"])
        if value is _MISSING:
            return default
        try:
            goal = int(value)
        except (TypeError, ValueError, OverflowError):
            logger.warning("invalid daily goal for user %s: %r", user_id, value)
            return default
        return goal if goal > 0 else default

    def save_daily_goal(self: DbProtocol, user_id: int, minutes: int) -> None:
        self._set_json(user_id, STORAGE_KEYS["daily_goal"], int(minutes))

    def get_primary_color(self: DbProtocol, user_id: int) -> str:
        value = self._get_json(user_id, STORAGE_KEYS["primary_color"])
        if isinstance(value, str) and value.strip():
            return value.strip()
        return DEFAULT_PRIMARY_COLOR

    def save_primary_color(self: DbProtocol, user_id: int, color: str) -> None:
        self._set_json(user_id, STORAGE_KEYS["primary_color"], color)

    def get_color_mode(self: DbProtocol, user_id: int) -> str:
        value = self._get_json(user_id, STORAGE_KEYS["color_mode"])
        return value if value in COLOR_MODES else COLOR_MODES[0]

    def save_color_mode(self: DbProtocol, user_id: int, mode: str) -> None:
        self._set_json(user_id, STORAGE_KEYS["color_mode"], mode)

    def get_background_mode(self: DbProtocol, user_id: int) -> str:
        value = self._get_json(user_id, STORAGE_KEYS["background_mode"])
        return value if value in BACKGROUND_MODES else BACKGROUND_MODES[0]

    def save_background_mode(self: DbProtocol, user_id: int, mode: str) -> None:
        self._set_json(user_id, STORAGE_KEYS["background_mode"], mode)

    def get_volume(self: DbProtocol, user_id: int) -> float:
        value = self._get_json(user_id, STORAGE_KEYS["volume"])
        if value is _MISSING or isinstance(value, bool):
            return DEFAULT_VOLUME
        try:
            volume = float(value)
        except (TypeError, ValueError):
            logger.warning("invalid volume for user %s: %r", user_id, value)
            return DEFAULT_VOLUME
        if volume != volume:
            return DEFAULT_VOLUME
        return max(0.0, min(1.0, volume))

    def save_volume(self: DbProtocol, user_id: int, volume: float) -> None:
        self._set_json(user_id, STORAGE_KEYS["volume"], max(0.0, min(1.0, float(volume))))

    def get_notifications_enabled(self: DbProtocol, user_id: int) -> bool:
        value = self._get_json(user_id, STORAGE_KEYS["notifications"])
        if value is _MISSING:
            return True
        flag = parse_flag(value)
        return True if flag is None else flag

    def save_notifications_enabled(self: DbProtocol, user_id: int, enabled: bool) -> None:
        self._set_json(user_id, STORAGE_KEYS["notifications"], bool(enabled))

    def get_language(self: DbProtocol, user_id: int) -> str:
        value = self._get_json(user_id, STORAGE_KEYS["language"])
        return normalize_language_code(value if isinstance(value, str) else None)

    def save_language(self: DbProtocol, user_id: int, code: str) -> None:
        self._set_json(user_id, STORAGE_KEYS["language"], normalize_language_code(code))

    def get_preferences(self, user_id: int, default_goal: int = DEFAULT_DAILY_GOAL) -> Preferences:
        return Preferences(
            daily_goal_minutes=self.get_daily_goal(user_id, default=default_goal),
            primary_color=self.get_primary_color(user_id),
            color_mode=self.get_color_mode(user_id),
            background_mode=self.get_background_mode(user_id),
            volume=self.get_volume(user_id),
            notifications_enabled=self.get_notifications_enabled(user_id),
        )
