from __future__ import annotations

from study_tracker.db_repo import BackupMixin, BaseDatabase, PreferencesMixin, RecordsMixin
from study_tracker.models import Book, Preferences, Session, Subject

__all__ = ["Database", "Book", "Preferences", "Session", "Subject"]


class Database(RecordsMixin, PreferencesMixin, BackupMixin, BaseDatabase):
    """Per-user key/value persistence for the study tracker.

    Getters never raise: absent or unreadable values come back as typed
    defaults. Setters log and swallow storage failures.
    """
