from __future__ import annotations

import random
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from study_tracker.models import Subject
from study_tracker.subjects import (
    MONOCHROME_COLORS,
    VIBRANT_COLORS,
    SubjectCatalogError,
    add_chapter,
    add_subject,
    add_task,
    delete_chapter,
    delete_subject,
    delete_task,
    find_chapter,
    find_subject,
    pick_color,
    rename_chapter,
    rename_task,
    task_at,
    toggle_task,
)


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Lisbon"))


def test_palettes() -> None:
    assert len(VIBRANT_COLORS) == 15
    assert len(MONOCHROME_COLORS) == 8
    assert len(set(VIBRANT_COLORS)) == 15


def test_add_subject_trims_and_picks_palette_color() -> None:
    subjects = add_subject([], "  Math  ", "vibrant", _dt(2026, 3, 1), rng=random.Random(1))
    assert len(subjects) == 1
    assert subjects[0].name == "Math"
    assert subjects[0].color in VIBRANT_COLORS
    assert subjects[0].chapters == ()

    mono = add_subject([], "Art", "monochrome", _dt(2026, 3, 1))
    assert mono[0].color in MONOCHROME_COLORS


def test_add_subject_rejects_empty_and_duplicate_names() -> None:
    subjects = add_subject([], "Math", "vibrant", _dt(2026, 3, 1))
    with pytest.raises(SubjectCatalogError):
        add_subject(subjects, "   ", "vibrant", _dt(2026, 3, 1))
    with pytest.raises(SubjectCatalogError):
        add_subject(subjects, "math", "vibrant", _dt(2026, 3, 1))


def test_add_subject_does_not_mutate_input() -> None:
    before: list[Subject] = []
    updated = add_subject(before, "Math", "vibrant", _dt(2026, 3, 1))
    assert before == []
    assert updated is not before


def test_colors_are_unused_until_palette_runs_out() -> None:
    rng = random.Random(7)
    subjects: list[Subject] = []
    for i in range(len(MONOCHROME_COLORS)):
        subjects = add_subject(subjects, f"S{i}", "monochrome", _dt(2026, 3, 1, 10, i), rng=rng)
    assert {s.color for s in subjects} == set(MONOCHROME_COLORS)
    assert pick_color(subjects, "monochrome", rng) in MONOCHROME_COLORS


def test_find_subject_is_case_insensitive() -> None:
    subjects = add_subject([], "História", "vibrant", _dt(2026, 3, 1))
    assert find_subject(subjects, " história ") is subjects[0]
    assert find_subject(subjects, "Math") is None


def test_chapters_and_tasks() -> None:
    now = _dt(2026, 3, 1)
    subjects = add_subject([], "Math", "vibrant", now)
    sid = subjects[0].id

    subjects = add_chapter(subjects, sid, now, name="Algebra")
    subjects = add_chapter(subjects, sid, now)
    chapters = subjects[0].chapters
    assert [c.name for c in chapters] == ["Algebra", "New chapter"]
    assert chapters[0].id != chapters[1].id

    cid = chapters[0].id
    subjects = rename_chapter(subjects, sid, chapters[1].id, "Geometry")
    assert subjects[0].chapters[1].name == "Geometry"

    subjects = add_task(subjects, sid, cid, now, name="Exercises 1-10")
    subjects = add_task(subjects, sid, cid, now)
    tasks = subjects[0].chapters[0].tasks
    assert [t.name for t in tasks] == ["Exercises 1-10", "New task"]
    assert all(not t.completed for t in tasks)

    subjects = toggle_task(subjects, sid, cid, tasks[0].id)
    assert subjects[0].chapters[0].tasks[0].completed is True
    subjects = rename_task(subjects, sid, cid, tasks[1].id, "Review")
    assert subjects[0].chapters[0].tasks[1].name == "Review"

    subjects = delete_task(subjects, sid, cid, tasks[0].id)
    assert [t.name for t in subjects[0].chapters[0].tasks] == ["Review"]

    subjects = delete_chapter(subjects, sid, cid)
    assert [c.name for c in subjects[0].chapters] == ["Geometry"]


def test_unknown_ids_are_rejected() -> None:
    now = _dt(2026, 3, 1)
    subjects = add_subject([], "Math", "vibrant", now)
    with pytest.raises(SubjectCatalogError):
        add_chapter(subjects, 12345, now)
    with pytest.raises(SubjectCatalogError):
        add_task(subjects, subjects[0].id, 999, now)


def test_delete_subject() -> None:
    now = _dt(2026, 3, 1)
    subjects = add_subject([], "Math", "vibrant", now)
    subjects = add_subject(subjects, "History", "vibrant", _dt(2026, 3, 1, 11))
    remaining = delete_subject(subjects, subjects[0].id)
    assert [s.name for s in remaining] == ["History"]
    assert len(subjects) == 2


def test_find_chapter_and_task_by_position() -> None:
    now = _dt(2026, 3, 1)
    subjects = add_subject([], "Math", "vibrant", now)
    subjects = add_chapter(subjects, subjects[0].id, now, name="Algebra")
    subjects = add_task(subjects, subjects[0].id, subjects[0].chapters[0].id, now, name="Exercises")

    chapter = find_chapter(subjects[0], " ALGEBRA ")
    assert chapter is subjects[0].chapters[0]
    assert find_chapter(subjects[0], "Geometry") is None

    assert task_at(chapter, "1") is chapter.tasks[0]
    for number in ("0", "2", "x", "-1", ""):
        assert task_at(chapter, number) is None
