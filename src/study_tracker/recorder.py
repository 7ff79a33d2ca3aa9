from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Protocol

from study_tracker.models import Session
from study_tracker.state import StudyState
from study_tracker.time_utils import millis_id

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def save_sessions(self, user_id: int, sessions: Iterable[Session]) -> None: ...


class SessionRecorder:
    """Turns a finished study phase into a Session and appends it to history."""

    def __init__(
        self,
        store: SessionStore,
        state: StudyState,
        refresh: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._state = state
        self._refresh = refresh

    def record(
        self,
        subject: str,
        planned_duration_minutes: int,
        questions: int,
        correct_questions: int,
        now: datetime,
    ) -> Session:
        name = subject.strip()
        if not name:
            raise ValueError("A session needs a subject")
        if self._refresh is not None:
            self._refresh()

        total = max(0, int(questions))
        session = Session(
            id=millis_id(now, {s.id for s in self._state.sessions}),
            subject=name,
            duration=max(1, int(planned_duration_minutes)),
            questions=total,
            correct_questions=min(max(0, int(correct_questions)), total),
            date=now,
            completed=True,
        )
        self._state.sessions.append(session)
        self._store.save_sessions(self._state.user_id, self._state.sessions)
        logger.info(
            "recorded session user=%s subject=%s minutes=%s",
            self._state.user_id,
            session.subject,
            session.duration,
        )
        return session
