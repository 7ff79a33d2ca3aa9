from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Protocol

from study_tracker.converters import book_to_dict, session_to_dict, subject_to_dict
from study_tracker.db_repo.base import STORAGE_KEYS
from study_tracker.models import Book, Preferences, Session, Subject

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

# backup field -> storage key, for the optional scalar settings
SCALAR_FIELDS = {
    "dailyGoal": STORAGE_KEYS["daily_goal"],
    "primaryColor": STORAGE_KEYS["primary_color"],
    "colorMode": STORAGE_KEYS["color_mode"],
    "backgroundMode": STORAGE_KEYS["background_mode"],
    "volume": STORAGE_KEYS["volume"],
    "notificationsEnabled": STORAGE_KEYS["notifications"],
}


class DbProtocol(Protocol):
    def _set_many(self, user_id: int, values: dict[str, Any], replace: bool = False) -> bool: ...
    def get_subjects(self, user_id: int) -> list[Subject]: ...
    def get_sessions(self, user_id: int) -> list[Session]: ...
    def get_books(self, user_id: int) -> list[Book]: ...
    def get_preferences(self, user_id: int) -> Preferences: ...


class BackupMixin:
    def create_backup(self: DbProtocol, user_id: int, now: datetime) -> dict[str, Any]:
        prefs = self.get_preferences(user_id)
        return {
            "subjects": [subject_to_dict(s) for s in self.get_subjects(user_id)],
            "sessions": [session_to_dict(s) for s in self.get_sessions(user_id)],
            "dailyGoal": str(prefs.daily_goal_minutes),
            "primaryColor": prefs.primary_color,
            "colorMode": prefs.color_mode,
            "backgroundMode": prefs.background_mode,
            "volume": str(prefs.volume),
            "notificationsEnabled": json.dumps(prefs.notifications_enabled),
            "library": [book_to_dict(b) for b in self.get_books(user_id)],
            "timestamp": now.isoformat(),
            "version": BACKUP_VERSION,
        }

    def restore_backup(self: DbProtocol, user_id: int, raw: str | bytes | dict[str, Any]) -> bool:
        """Replace the user's data with a backup document.

        The document is validated before anything is written and all keys are
        written in a single transaction, so a rejected or failed restore leaves
        the previous data untouched.
        """
        if isinstance(raw, (str, bytes)):
            try:
                backup = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning("backup for user %s is not valid JSON", user_id)
                return False
        else:
            backup = raw

        if not isinstance(backup, dict):
            logger.warning("backup for user %s is not a JSON object", user_id)
            return False
        if not isinstance(backup.get("subjects"), list) or not isinstance(backup.get("sessions"), list):
            logger.warning("invalid backup for user %s: 'subjects' or 'sessions' is not a list", user_id)
            return False
        library = backup.get("library")
        if library is not None and not isinstance(library, list):
            logger.warning("invalid backup for user %s: 'library' is not a list", user_id)
            return False

        values: dict[str, Any] = {
            STORAGE_KEYS["subjects"]: backup["subjects"],
            STORAGE_KEYS["sessions"]: backup["sessions"],
            STORAGE_KEYS["library"]: library or [],
        }
        for field, key in SCALAR_FIELDS.items():
            value = backup.get(field)
            if value is None or value == "":
                continue
            values[key] = value

        return self._set_many(user_id, values, replace=True)
