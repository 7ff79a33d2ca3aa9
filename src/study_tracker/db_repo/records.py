from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Iterable
from datetime import tzinfo
from typing import Any, Protocol, TypeVar

from study_tracker.converters import (
    book_to_dict,
    dict_to_book,
    dict_to_session,
    dict_to_subject,
    session_to_dict,
    subject_to_dict,
)
from study_tracker.db_repo.base import _MISSING, STORAGE_KEYS
from study_tracker.models import Book, Session, Subject

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DbProtocol(Protocol):
    tz: tzinfo

    def _connect(self) -> sqlite3.Connection: ...
    def _get_json(self, user_id: int, key: str) -> Any: ...
    def _set_json(self, user_id: int, key: str, value: Any) -> bool: ...


def _load_list(db: DbProtocol, user_id: int, key: str, convert: Callable[[dict[str, Any]], T]) -> list[T]:
    value = db._get_json(user_id, key)
    if value is _MISSING:
        return []
    if not isinstance(value, list):
        logger.warning("stored %s for user %s is not a list", key, user_id)
        return []
    items: list[T] = []
    for raw in value:
        if not isinstance(raw, dict):
            logger.warning("skipping malformed %s record for user %s: %r", key, user_id, raw)
            continue
        try:
            items.append(convert(raw))
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            logger.warning("skipping malformed %s record for user %s: %s", key, user_id, exc)
    return items


class RecordsMixin:
    def get_subjects(self: DbProtocol, user_id: int) -> list[Subject]:
        return _load_list(self, user_id, STORAGE_KEYS["subjects"], dict_to_subject)

    def save_subjects(self: DbProtocol, user_id: int, subjects: Iterable[Subject]) -> None:
        self._set_json(user_id, STORAGE_KEYS["subjects"], [subject_to_dict(s) for s in subjects])

    def get_sessions(self: DbProtocol, user_id: int) -> list[Session]:
        return _load_list(self, user_id, STORAGE_KEYS["sessions"], lambda raw: dict_to_session(raw, self.tz))

    def save_sessions(self: DbProtocol, user_id: int, sessions: Iterable[Session]) -> None:
        self._set_json(user_id, STORAGE_KEYS["sessions"], [session_to_dict(s) for s in sessions])

    def get_books(self: DbProtocol, user_id: int) -> list[Book]:
        return _load_list(self, user_id, STORAGE_KEYS["library"], lambda raw: dict_to_book(raw, self.tz))

    def save_books(self: DbProtocol, user_id: int, books: Iterable[Book]) -> None:
        self._set_json(user_id, STORAGE_KEYS["library"], [book_to_dict(b) for b in books])
