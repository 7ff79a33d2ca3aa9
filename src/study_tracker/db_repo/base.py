from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "subjects": "study-subjects",
    "sessions": "study-sessions",
    "daily_goal": "study-daily-goal",
    "primary_color": "study-primary-color",
    "color_mode": "study-color-mode",
    "background_mode": "study-background-mode",
    "volume": "study-volume",
    "notifications": "study-notifications-enabled",
    "library": "study-library-books",
    "language": "study-language",
}

_MISSING = object()


class BaseDatabase:
    def __init__(self, path: Path, tz: str = "Europe/Lisbon") -> None:
        self.path = path
        self.tz = ZoneInfo(tz)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """
            )
            current = {row["version"] for row in conn.execute("SELECT version FROM schema_migrations")}

            migrations: dict[int, str] = {
                1: """
                    CREATE TABLE kv_store (
                        user_id INTEGER NOT NULL,
                        key TEXT NOT NULL,
                        value_json TEXT NOT NULL,
                        updated_at TEXT NOT NULL,
                        PRIMARY KEY(user_id, key)
                    );

                    CREATE TABLE user_profiles (
                        user_id INTEGER PRIMARY KEY,
                        chat_id INTEGER NOT NULL,
                        last_seen_at TEXT NOT NULL
                    );
                """,
                2: """
                    CREATE TABLE data_revisions (
                        user_id INTEGER PRIMARY KEY,
                        revision INTEGER NOT NULL
                    );
                """,
            }

            now = datetime.now().isoformat(timespec="seconds")
            for version in sorted(migrations):
                if version in current:
                    continue
                conn.executescript(migrations[version])
                conn.execute(
                    "INSERT INTO schema_migrations(version, applied_at) VALUES (?, ?)",
                    (version, now),
                )

    def upsert_user_profile(self, user_id: int, chat_id: int, seen_at: datetime) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO user_profiles(user_id, chat_id, last_seen_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        chat_id=excluded.chat_id,
                        last_seen_at=excluded.last_seen_at
                    """,
                    (user_id, chat_id, seen_at.isoformat()),
                )
        except sqlite3.Error:
            logger.exception("could not save profile for user %s", user_id)

    def get_all_user_profiles(self) -> list[dict[str, Any]]:
        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT user_id, chat_id, last_seen_at FROM user_profiles").fetchall()
        except sqlite3.Error:
            logger.exception("could not list user profiles")
            return []
        return [dict(row) for row in rows]

    def _get_json(self, user_id: int, key: str) -> Any:
        """Stored value for ``key`` or ``_MISSING`` when absent or unreadable."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value_json FROM kv_store WHERE user_id = ? AND key = ?",
                    (user_id, key),
                ).fetchone()
        except sqlite3.Error:
            logger.exception("could not read %s for user %s", key, user_id)
            return _MISSING
        if row is None:
            return _MISSING
        try:
            return json.loads(str(row["value_json"]))
        except json.JSONDecodeError:
            logger.warning("stored %s for user %s is not valid JSON", key, user_id)
            return _MISSING

    def _set_json(self, user_id: int, key: str, value: Any) -> bool:
        return self._set_many(user_id, {key: value})

    def get_revision(self, user_id: int) -> int:
        """Counter bumped whenever a user's data is replaced wholesale (restore, clear)."""
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT revision FROM data_revisions WHERE user_id = ?", (user_id,)).fetchone()
        except sqlite3.Error:
            logger.exception("could not read data revision for user %s", user_id)
            return 0
        return int(row["revision"]) if row is not None else 0

    def _bump_revision(self, conn: sqlite3.Connection, user_id: int) -> None:
        conn.execute(
            """
            INSERT INTO data_revisions(user_id, revision) VALUES (?, 1)
            ON CONFLICT(user_id) DO UPDATE SET revision = revision + 1
            """,
            (user_id,),
        )

    def _set_many(self, user_id: int, values: dict[str, Any], replace: bool = False) -> bool:
        """Write all ``values`` in one transaction; nothing is written on failure.

        ``replace`` marks the write as a wholesale replacement and bumps the
        user's data revision in the same transaction.
        """
        now = datetime.now().isoformat()
        try:
            payload = [(user_id, key, json.dumps(value), now) for key, value in values.items()]
            with self._connect() as conn:
                conn.executemany(
                    """
                    INSERT INTO kv_store(user_id, key, value_json, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(user_id, key) DO UPDATE SET
                        value_json=excluded.value_json,
                        updated_at=excluded.updated_at
                    """,
                    payload,
                )
                if replace:
                    self._bump_revision(conn, user_id)
        except (sqlite3.Error, TypeError, ValueError):
            logger.exception("could not save %s for user %s", ", ".join(values), user_id)
            return False
        return True

    def clear_all(self, user_id: int) -> None:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM kv_store WHERE user_id = ?", (user_id,))
                self._bump_revision(conn, user_id)
        except sqlite3.Error:
            logger.exception("could not clear data for user %s", user_id)
