from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime

from study_tracker.models import Chapter, Subject, Task
from study_tracker.time_utils import millis_id

VIBRANT_COLORS: tuple[str, ...] = (
    "#ef4444",  # red
    "#f97316",  # orange
    "#facc15",  # yellow
    "#84cc16",  # lime
    "#10b981",  # emerald
    "#06b6d4",  # cyan
    "#3b82f6",  # blue
    "#8b5cf6",  # violet
    "#d946ef",  # fuchsia
    "#f43f5e",  # rose
    "#14b8a6",  # teal
    "#6366f1",  # indigo
    "#ec4899",  # pink
    "#0ea5e9",  # sky
    "#a855f7",  # purple
)

MONOCHROME_COLORS: tuple[str, ...] = (
    "#ffffff",
    "#fafafa",
    "#f4f4f5",
    "#e4e4e7",
    "#d4d4d8",
    "#a1a1aa",
    "#71717a",
    "#52525b",
)

DEFAULT_CHAPTER_NAME = "New chapter"
DEFAULT_TASK_NAME = "New task"


class SubjectCatalogError(ValueError):
    pass


def palette_for(color_mode: str) -> tuple[str, ...]:
    return MONOCHROME_COLORS if color_mode == "monochrome" else VIBRANT_COLORS


def pick_color(subjects: Sequence[Subject], color_mode: str, rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    palette = palette_for(color_mode)
    used = {s.color for s in subjects}
    available = [c for c in palette if c not in used]
    return rng.choice(available or list(palette))


def find_subject(subjects: Sequence[Subject], name: str) -> Subject | None:
    wanted = name.strip().casefold()
    for subject in subjects:
        if subject.name.casefold() == wanted:
            return subject
    return None


def find_chapter(subject: Subject, name: str) -> Chapter | None:
    wanted = name.strip().casefold()
    return next((c for c in subject.chapters if c.name.casefold() == wanted), None)


def task_at(chapter: Chapter, number: str) -> Task | None:
    """Task by its 1-based position as shown in the subjects list."""
    if not number.strip().isdigit():
        return None
    index = int(number) - 1
    return chapter.tasks[index] if 0 <= index < len(chapter.tasks) else None


def add_subject(
    subjects: Sequence[Subject],
    name: str,
    color_mode: str,
    now: datetime,
    rng: random.Random | None = None,
) -> list[Subject]:
    clean = name.strip()
    if not clean:
        raise SubjectCatalogError("Subject name is required")
    if find_subject(subjects, clean) is not None:
        raise SubjectCatalogError(f"Subject '{clean}' already exists")
    subject = Subject(
        id=millis_id(now, {s.id for s in subjects}),
        name=clean,
        color=pick_color(subjects, color_mode, rng),
        chapters=(),
    )
    return [*subjects, subject]


def delete_subject(subjects: Sequence[Subject], subject_id: int) -> list[Subject]:
    return [s for s in subjects if s.id != subject_id]


def _update_subject(
    subjects: Sequence[Subject],
    subject_id: int,
    change: Callable[[Subject], Subject],
) -> list[Subject]:
    if not any(s.id == subject_id for s in subjects):
        raise SubjectCatalogError(f"Unknown subject id {subject_id}")
    return [change(s) if s.id == subject_id else s for s in subjects]


def _update_chapter(
    subjects: Sequence[Subject],
    subject_id: int,
    chapter_id: int,
    change: Callable[[Chapter], Chapter],
) -> list[Subject]:
    def _apply(subject: Subject) -> Subject:
        if not any(c.id == chapter_id for c in subject.chapters):
            raise SubjectCatalogError(f"Unknown chapter id {chapter_id}")
        return replace(subject, chapters=tuple(change(c) if c.id == chapter_id else c for c in subject.chapters))

    return _update_subject(subjects, subject_id, _apply)


def add_chapter(
    subjects: Sequence[Subject],
    subject_id: int,
    now: datetime,
    name: str = DEFAULT_CHAPTER_NAME,
) -> list[Subject]:
    def _apply(subject: Subject) -> Subject:
        chapter = Chapter(
            id=millis_id(now, {c.id for c in subject.chapters}),
            name=name.strip() or DEFAULT_CHAPTER_NAME,
        )
        return replace(subject, chapters=(*subject.chapters, chapter))

    return _update_subject(subjects, subject_id, _apply)


def rename_chapter(subjects: Sequence[Subject], subject_id: int, chapter_id: int, name: str) -> list[Subject]:
    return _update_chapter(subjects, subject_id, chapter_id, lambda c: replace(c, name=name))


def delete_chapter(subjects: Sequence[Subject], subject_id: int, chapter_id: int) -> list[Subject]:
    return _update_subject(
        subjects,
        subject_id,
        lambda s: replace(s, chapters=tuple(c for c in s.chapters if c.id != chapter_id)),
    )


def add_task(
    subjects: Sequence[Subject],
    subject_id: int,
    chapter_id: int,
    now: datetime,
    name: str = DEFAULT_TASK_NAME,
) -> list[Subject]:
    def _apply(chapter: Chapter) -> Chapter:
        task = Task(id=millis_id(now, {t.id for t in chapter.tasks}), name=name.strip() or DEFAULT_TASK_NAME)
        return replace(chapter, tasks=(*chapter.tasks, task))

    return _update_chapter(subjects, subject_id, chapter_id, _apply)


def rename_task(
    subjects: Sequence[Subject],
    subject_id: int,
    chapter_id: int,
    task_id: int,
    name: str,
) -> list[Subject]:
    return _update_chapter(
        subjects,
        subject_id,
        chapter_id,
        lambda c: replace(c, tasks=tuple(replace(t, name=name) if t.id == task_id else t for t in c.tasks)),
    )


def toggle_task(subjects: Sequence[Subject], subject_id: int, chapter_id: int, task_id: int) -> list[Subject]:
    return _update_chapter(
        subjects,
        subject_id,
        chapter_id,
        lambda c: replace(
            c,
            tasks=tuple(replace(t, completed=not t.completed) if t.id == task_id else t for t in c.tasks),
        ),
    )


def delete_task(subjects: Sequence[Subject], subject_id: int, chapter_id: int, task_id: int) -> list[Subject]:
    return _update_chapter(
        subjects,
        subject_id,
        chapter_id,
        lambda c: replace(c, tasks=tuple(t for t in c.tasks if t.id != task_id)),
    )
