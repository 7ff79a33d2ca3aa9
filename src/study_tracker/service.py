from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from study_tracker.achievements import evaluate, unlocked_count
from study_tracker.db import Database
from study_tracker.library import add_book, remove_book, toggle_book_completed
from study_tracker.models import BACKGROUND_MODES, COLOR_MODES, Achievement, Book, Session, Subject
from study_tracker.notifications import Notifier
from study_tracker.ranks import NextRank, next_rank, resolve_rank
from study_tracker.recorder import SessionRecorder
from study_tracker.sound import SoundService
from study_tracker.state import StudyState
from study_tracker.streak import compute_streak, longest_streak
from study_tracker.subjects import add_subject, delete_subject
from study_tracker.timer import TickScheduler, TimerEngine, TimerEvent
from study_tracker.timer_presets import TimerPresets

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileView:
    streak: int
    longest_streak: int
    achievements: list[Achievement]
    unlocked: int
    total: int
    rank: str
    next_rank: NextRank | None
    total_minutes: int
    session_count: int


def evaluate_profile(
    sessions: Sequence[Session],
    subjects: Sequence[Subject],
    now: datetime,
    lang: str = "en",
) -> ProfileView:
    streak = compute_streak(sessions, now)
    achievements = evaluate(sessions, subjects, streak, lang=lang)
    unlocked = unlocked_count(achievements)
    return ProfileView(
        streak=streak,
        longest_streak=longest_streak(sessions, now.tzinfo),
        achievements=achievements,
        unlocked=unlocked,
        total=len(achievements),
        rank=resolve_rank(unlocked, lang=lang),
        next_rank=next_rank(unlocked, lang=lang),
        total_minutes=sum(s.duration for s in sessions),
        session_count=len(sessions),
    )


def load_state(db: Database, user_id: int, presets: TimerPresets | None = None) -> StudyState:
    presets = presets or TimerPresets()
    return StudyState(
        user_id=user_id,
        preferences=db.get_preferences(user_id, default_goal=presets.daily_goal_minutes),
        subjects=db.get_subjects(user_id),
        sessions=db.get_sessions(user_id),
        library=db.get_books(user_id),
        language=db.get_language(user_id),
    )


class StudyController:
    """Single owner of one user's state; every mutation is saved explicitly."""

    def __init__(
        self,
        db: Database,
        user_id: int,
        presets: TimerPresets | None = None,
        sound: SoundService | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.db = db
        self.user_id = user_id
        self.presets = presets or TimerPresets()
        self.revision = db.get_revision(user_id)
        self.state = load_state(db, user_id, self.presets)
        self.sound = sound or SoundService()
        self.sound.set_volume(self.state.preferences.volume)
        self.recorder = SessionRecorder(db, self.state, refresh=self.sync)
        self.timer: TimerEngine | None = None
        self._rng = rng or random.Random()

    def attach_timer(
        self,
        scheduler: TickScheduler,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
        on_event: Callable[[TimerEvent], None] | None = None,
    ) -> TimerEngine:
        if self.timer is not None:
            self.timer.close()
        self.timer = TimerEngine(
            self.recorder,
            scheduler,
            study_minutes=self.presets.study_minutes,
            break_minutes=self.presets.break_minutes,
            sound=self.sound,
            notifier=notifier,
            notifications_enabled=self.state.preferences.notifications_enabled,
            clock=clock,
            on_event=on_event,
        )
        return self.timer

    def sync(self) -> bool:
        """Reload when the stored data was replaced behind this controller."""
        if self.db.get_revision(self.user_id) == self.revision:
            return False
        logger.info("stored data for user %s changed, reloading", self.user_id)
        self.reload()
        return True

    def reload(self) -> None:
        self.revision = self.db.get_revision(self.user_id)
        fresh = load_state(self.db, self.user_id, self.presets)
        # the recorder holds this object, so refresh it in place
        self.state.preferences = fresh.preferences
        self.state.subjects = fresh.subjects
        self.state.sessions = fresh.sessions
        self.state.library = fresh.library
        self.state.language = fresh.language
        self.sound.set_volume(self.state.preferences.volume)
        if self.timer is not None:
            self.timer.notifications_enabled = self.state.preferences.notifications_enabled

    def profile(self, now: datetime) -> ProfileView:
        return evaluate_profile(self.state.sessions, self.state.subjects, now, lang=self.state.language)

    def add_subject(self, name: str, now: datetime) -> Subject:
        self.sync()
        subjects = add_subject(
            self.state.subjects,
            name,
            self.state.preferences.color_mode,
            now,
            rng=self._rng,
        )
        self.save_subjects(subjects)
        return subjects[-1]

    def delete_subject(self, subject_id: int) -> None:
        self.sync()
        self.save_subjects(delete_subject(self.state.subjects, subject_id))

    def save_subjects(self, subjects: list[Subject]) -> None:
        self.state.subjects = subjects
        self.db.save_subjects(self.user_id, subjects)

    def add_book(self, book: Book) -> None:
        self.sync()
        self._save_books(add_book(self.state.library, book))

    def remove_book(self, book_id: str) -> None:
        self.sync()
        self._save_books(remove_book(self.state.library, book_id))

    def toggle_book(self, book_id: str) -> None:
        self.sync()
        self._save_books(toggle_book_completed(self.state.library, book_id))

    def _save_books(self, books: list[Book]) -> None:
        self.state.library = books
        self.db.save_books(self.user_id, books)

    def set_daily_goal(self, minutes: int) -> None:
        goal = max(1, int(minutes))
        self.state.preferences = replace(self.state.preferences, daily_goal_minutes=goal)
        self.db.save_daily_goal(self.user_id, goal)

    def set_volume(self, volume: float) -> None:
        value = max(0.0, min(1.0, float(volume)))
        self.state.preferences = replace(self.state.preferences, volume=value)
        self.db.save_volume(self.user_id, value)
        self.sound.set_volume(value)
        if value > 0:
            self.sound.play_start()

    def set_notifications(self, enabled: bool) -> None:
        self.state.preferences = replace(self.state.preferences, notifications_enabled=enabled)
        self.db.save_notifications_enabled(self.user_id, enabled)
        if self.timer is not None:
            self.timer.notifications_enabled = enabled

    def set_primary_color(self, color: str) -> None:
        self.state.preferences = replace(self.state.preferences, primary_color=color)
        self.db.save_primary_color(self.user_id, color)

    def set_color_mode(self, mode: str) -> None:
        if mode not in COLOR_MODES:
            raise ValueError(f"Unknown color mode: {mode}")
        self.state.preferences = replace(self.state.preferences, color_mode=mode)
        self.db.save_color_mode(self.user_id, mode)

    def set_background_mode(self, mode: str) -> None:
        if mode not in BACKGROUND_MODES:
            raise ValueError(f"Unknown background mode: {mode}")
        self.state.preferences = replace(self.state.preferences, background_mode=mode)
        self.db.save_background_mode(self.user_id, mode)

    def set_language(self, code: str) -> None:
        self.db.save_language(self.user_id, code)
        self.state.language = self.db.get_language(self.user_id)

    def backup(self, now: datetime) -> dict[str, Any]:
        return self.db.create_backup(self.user_id, now)

    def restore(self, raw: str | bytes | dict[str, Any]) -> bool:
        if not self.db.restore_backup(self.user_id, raw):
            return False
        self.reload()
        logger.info("restored backup for user %s", self.user_id)
        return True

    def reset(self) -> None:
        if self.timer is not None:
            self.timer.close()
        self.db.clear_all(self.user_id)
        self.reload()
