from __future__ import annotations

import json
import random
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from study_tracker.db import Database
from study_tracker.library import DuplicateBookError
from study_tracker.models import Book
from study_tracker.service import StudyController
from study_tracker.sound import SoundService, Tone
from study_tracker.timer import TimerState
from study_tracker.timer_presets import TimerPresets


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Lisbon"))


class ManualScheduler:
    def __init__(self) -> None:
        self.callbacks: list = []

    def schedule(self, callback, interval):
        self.callbacks.append(callback)
        return self

    def cancel(self) -> None:
        return None

    def advance(self, seconds: int) -> None:
        for _ in range(seconds):
            self.callbacks[-1]()


class ListSink:
    def __init__(self) -> None:
        self.tones: list[Tone] = []

    def play(self, tone: Tone) -> None:
        self.tones.append(tone)


def _controller(tmp_path, presets: TimerPresets | None = None) -> StudyController:
    db = Database(tmp_path / "app.db")
    return StudyController(db, user_id=1, presets=presets, rng=random.Random(3))


def test_completed_timer_session_is_persisted(tmp_path) -> None:
    controller = _controller(tmp_path, TimerPresets(study_minutes=1, break_minutes=1))
    scheduler = ManualScheduler()
    timer = controller.attach_timer(scheduler, clock=lambda: _dt(2026, 3, 1))
    controller.add_subject("Math", _dt(2026, 3, 1))

    timer.select_subject("Math")
    timer.start()
    scheduler.advance(60)

    assert timer.state is TimerState.BREAK_PAUSED
    assert [s.duration for s in controller.db.get_sessions(1)] == [1]
    assert controller.profile(_dt(2026, 3, 1, 20)).streak == 1


def test_subjects_and_preferences_are_saved(tmp_path) -> None:
    controller = _controller(tmp_path)
    subject = controller.add_subject("Math", _dt(2026, 3, 1))
    controller.set_daily_goal(0)
    controller.set_color_mode("monochrome")
    controller.set_background_mode("stars")
    controller.set_primary_color("#3b82f6")
    controller.set_notifications(False)
    controller.set_language("pt-BR")

    db = controller.db
    assert [s.name for s in db.get_subjects(1)] == ["Math"]
    assert db.get_subjects(1)[0].color == subject.color
    prefs = db.get_preferences(1)
    assert prefs.daily_goal_minutes == 1
    assert prefs.color_mode == "monochrome"
    assert prefs.background_mode == "stars"
    assert prefs.primary_color == "#3b82f6"
    assert prefs.notifications_enabled is False
    assert db.get_language(1) == "pt"

    with pytest.raises(ValueError):
        controller.set_color_mode("neon")
    with pytest.raises(ValueError):
        controller.set_background_mode("plaid")

    controller.delete_subject(subject.id)
    assert db.get_subjects(1) == []


def test_volume_updates_sound_and_plays_preview(tmp_path) -> None:
    sink = ListSink()
    db = Database(tmp_path / "app.db")
    controller = StudyController(db, 1, sound=SoundService(sink))

    controller.set_volume(1.4)
    assert controller.sound.volume == 1.0
    assert db.get_volume(1) == 1.0
    assert len(sink.tones) == 2

    controller.set_volume(0)
    assert len(sink.tones) == 2


def test_library_operations_are_saved(tmp_path) -> None:
    controller = _controller(tmp_path)
    book = Book(id="/works/1", title="Dune", authors=("Frank Herbert",), thumbnail="x", added_at=_dt(2026, 3, 1))
    controller.add_book(book)
    with pytest.raises(DuplicateBookError):
        controller.add_book(book)
    controller.toggle_book(book.id)
    assert controller.db.get_books(1)[0].completed is True
    controller.remove_book(book.id)
    assert controller.db.get_books(1) == []


def test_restore_reloads_state_and_keeps_recorder_in_sync(tmp_path) -> None:
    controller = _controller(tmp_path)
    scheduler = ManualScheduler()
    timer = controller.attach_timer(scheduler, clock=lambda: _dt(2026, 3, 2))
    backup = {
        "subjects": [{"id": 1, "name": "Math", "color": "#ef4444", "chapters": []}],
        "sessions": [
            {"id": 5, "subject": "Math", "duration": 25, "questions": 0, "correctQuestions": 0, "date": "2026-03-01T10:00:00Z"}
        ],
        "dailyGoal": "60",
    }

    assert controller.restore(json.dumps(backup)) is True
    assert [s.id for s in controller.state.sessions] == [5]
    assert controller.state.preferences.daily_goal_minutes == 60

    timer.select_subject("Math")
    timer.start()
    timer.stop()
    assert [s.id for s in controller.db.get_sessions(1)][0] == 5
    assert len(controller.db.get_sessions(1)) == 2


def test_restore_from_another_writer_is_not_overwritten(tmp_path) -> None:
    controller = _controller(tmp_path)
    controller.add_subject("Math", _dt(2026, 3, 1))
    controller.recorder.record("Math", 25, 0, 0, now=_dt(2026, 3, 1))
    other = Database(tmp_path / "app.db")
    backup = {
        "subjects": [{"id": 9, "name": "Bio", "color": "#22c55e", "chapters": []}],
        "sessions": [
            {"id": 5, "subject": "Bio", "duration": 30, "date": "2026-02-27T10:00:00Z"}
        ],
    }
    assert other.restore_backup(1, backup) is True

    controller.recorder.record("Math", 25, 0, 0, now=_dt(2026, 3, 2))

    assert [s.subject for s in controller.db.get_sessions(1)] == ["Bio", "Math"]
    assert [s.name for s in controller.state.subjects] == ["Bio"]

    controller.add_subject("Art", _dt(2026, 3, 2))
    assert [s.name for s in controller.db.get_subjects(1)] == ["Bio", "Art"]
    assert controller.sync() is False


def test_rejected_restore_leaves_state_alone(tmp_path) -> None:
    controller = _controller(tmp_path)
    controller.add_subject("Math", _dt(2026, 3, 1))
    assert controller.restore(b"not json") is False
    assert [s.name for s in controller.state.subjects] == ["Math"]


def test_reset_clears_everything(tmp_path) -> None:
    controller = _controller(tmp_path)
    scheduler = ManualScheduler()
    timer = controller.attach_timer(scheduler, clock=lambda: _dt(2026, 3, 1))
    controller.add_subject("Math", _dt(2026, 3, 1))
    controller.set_daily_goal(300)
    timer.select_subject("Math")
    timer.start()

    controller.reset()

    assert timer.is_running is False
    assert controller.state.subjects == []
    assert controller.state.sessions == []
    assert controller.state.preferences.daily_goal_minutes == 120
    assert controller.db.get_subjects(1) == []


def test_presets_set_default_goal(tmp_path) -> None:
    controller = _controller(tmp_path, TimerPresets(daily_goal_minutes=90))
    assert controller.state.preferences.daily_goal_minutes == 90
