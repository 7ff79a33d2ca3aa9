from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from study_tracker.achievements import ACHIEVEMENT_RULES, aggregate, evaluate, unlocked_count
from study_tracker.models import Session, Subject
from study_tracker.ranks import next_rank, rank_key, resolve_rank
from study_tracker.service import evaluate_profile


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Lisbon"))


def _session(minutes: int, subject: str = "Math", at: datetime | None = None, sid: int = 1) -> Session:
    return Session(
        id=sid,
        subject=subject,
        duration=minutes,
        questions=0,
        correct_questions=0,
        date=at or _dt(2026, 3, 1),
    )


def _unlocked(sessions: list[Session], subjects: list[Subject] | None = None, streak: int = 0) -> set[str]:
    return {a.id for a in evaluate(sessions, subjects or [], streak) if a.is_unlocked}


def test_nothing_unlocked_without_history() -> None:
    achievements = evaluate([], [], 0)
    assert len(achievements) == len(ACHIEVEMENT_RULES) == 9
    assert unlocked_count(achievements) == 0


def test_first_step_after_one_session() -> None:
    assert "first_step" in _unlocked([_session(1)])


def test_iron_focus_threshold_is_inclusive() -> None:
    assert "iron_focus" not in _unlocked([_session(49)])
    assert "iron_focus" in _unlocked([_session(50)])


def test_marathon_needs_600_total_minutes() -> None:
    almost = [_session(25, sid=i) for i in range(23)] + [_session(24, sid=99)]
    assert sum(s.duration for s in almost) == 599
    assert "marathon" not in _unlocked(almost)

    exact = almost + [_session(1, sid=100)]
    assert "marathon" in _unlocked(exact)
    assert "dedication" not in _unlocked(exact)


def test_dedication_needs_6000_total_minutes() -> None:
    sessions = [_session(60, sid=i) for i in range(100)]
    assert "dedication" in _unlocked(sessions)


def test_streak_achievements_use_given_streak() -> None:
    assert _unlocked([], streak=3) == {"trinity"}
    assert _unlocked([], streak=7) == {"trinity", "golden_week"}
    assert _unlocked([], streak=30) == {"trinity", "golden_week", "monthly_master"}


def test_polymath_counts_distinct_session_subjects() -> None:
    sessions = [_session(25, "Math", sid=1), _session(25, "Math", sid=2), _session(25, "History", sid=3)]
    assert "polymath" not in _unlocked(sessions)
    sessions.append(_session(25, "Biology", sid=4))
    assert "polymath" in _unlocked(sessions)


def test_librarian_counts_catalog_subjects() -> None:
    subjects = [Subject(id=i, name=f"S{i}", color="#ffffff") for i in range(5)]
    assert "librarian" not in _unlocked([], subjects[:4])
    assert "librarian" in _unlocked([], subjects)


def test_unlocks_are_monotonic_in_history() -> None:
    sessions: list[Session] = []
    previous: set[str] = set()
    for i in range(40):
        sessions.append(_session(20 + i, subject=f"S{i % 4}", sid=i))
        current = _unlocked(sessions)
        assert previous <= current
        previous = current


def test_aggregate_summarizes_history() -> None:
    stats = aggregate([_session(30, "A", sid=1), _session(55, "B", sid=2)], [], 4)
    assert stats.session_count == 2
    assert stats.total_minutes == 85
    assert stats.distinct_subjects == 2
    assert stats.max_session_minutes == 55
    assert stats.streak == 4


def test_labels_are_localized() -> None:
    en = evaluate([], [], 0, lang="en")[0]
    pt = evaluate([], [], 0, lang="pt-BR")[0]
    assert en.id == pt.id == "first_step"
    assert en.title == "First Step"
    assert pt.title == "O Início"


def test_rank_tiers() -> None:
    assert resolve_rank(0) == "Novice"
    assert resolve_rank(1) == "Novice"
    assert resolve_rank(2) == "Apprentice"
    assert resolve_rank(3) == "Apprentice"
    assert resolve_rank(4) == "Dedicated Student"
    assert resolve_rank(6) == "Scholar"
    assert resolve_rank(8) == "Master of Knowledge"
    assert resolve_rank(9) == "Master of Knowledge"
    assert rank_key(-3) == "novice"
    assert resolve_rank(6, lang="pt") == "Erudito"


def test_next_rank() -> None:
    upcoming = next_rank(3)
    assert upcoming is not None
    assert upcoming.title == "Dedicated Student"
    assert upcoming.needed == 4
    assert upcoming.remaining == 1
    assert next_rank(8) is None
    assert next_rank(9) is None


def test_profile_rank_matches_unlocked_achievements() -> None:
    now = _dt(2026, 3, 10, 20)
    sessions = [
        _session(60, subject=f"S{i % 3}", at=now - timedelta(days=i), sid=i)
        for i in range(10)
    ]
    view = evaluate_profile(sessions, [], now)

    assert view.streak == 10
    assert view.unlocked == unlocked_count(view.achievements)
    # first_step, iron_focus, marathon, trinity, golden_week, polymath
    assert view.unlocked == 6
    assert view.rank == "Scholar"
    assert view.next_rank is not None and view.next_rank.remaining == 2
    assert view.total_minutes == 600
