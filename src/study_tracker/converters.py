"""Mapping between domain records and their stored/backup JSON shape.

The JSON shape uses camelCase keys so that backups stay interchangeable with
exports from earlier versions of the tracker.
"""
from __future__ import annotations

import math
from datetime import tzinfo
from typing import Any

from study_tracker.models import Book, Chapter, Session, Subject, Task
from study_tracker.time_utils import parse_timestamp


def _int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise TypeError("boolean is not a valid integer field")
    if isinstance(raw, float) and not math.isfinite(raw):
        raise ValueError(f"non-finite number: {raw}")
    return int(raw)


def task_to_dict(task: Task) -> dict[str, Any]:
    return {"id": task.id, "name": task.name, "completed": task.completed}


def chapter_to_dict(chapter: Chapter) -> dict[str, Any]:
    return {"id": chapter.id, "name": chapter.name, "tasks": [task_to_dict(t) for t in chapter.tasks]}


def subject_to_dict(subject: Subject) -> dict[str, Any]:
    return {
        "id": subject.id,
        "name": subject.name,
        "color": subject.color,
        "chapters": [chapter_to_dict(c) for c in subject.chapters],
    }


def session_to_dict(session: Session) -> dict[str, Any]:
    return {
        "id": session.id,
        "subject": session.subject,
        "duration": session.duration,
        "questions": session.questions,
        "correctQuestions": session.correct_questions,
        "date": session.date.isoformat(),
        "completed": session.completed,
    }


def book_to_dict(book: Book) -> dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "authors": list(book.authors),
        "thumbnail": book.thumbnail,
        "addedAt": book.added_at.isoformat(),
        "completed": book.completed,
    }


def dict_to_task(raw: dict[str, Any]) -> Task:
    return Task(id=_int(raw["id"]), name=str(raw.get("name", "")), completed=bool(raw.get("completed", False)))


def dict_to_chapter(raw: dict[str, Any]) -> Chapter:
    tasks = raw.get("tasks") or []
    if not isinstance(tasks, list):
        raise TypeError("chapter tasks must be a list")
    return Chapter(id=_int(raw["id"]), name=str(raw.get("name", "")), tasks=tuple(dict_to_task(t) for t in tasks))


def dict_to_subject(raw: dict[str, Any]) -> Subject:
    chapters = raw.get("chapters") or []
    if not isinstance(chapters, list):
        raise TypeError("subject chapters must be a list")
    name = str(raw["name"]).strip()
    if not name:
        raise ValueError("subject name is empty")
    return Subject(
        id=_int(raw["id"]),
        name=name,
        color=str(raw.get("color") or "#a1a1aa"),
        chapters=tuple(dict_to_chapter(c) for c in chapters),
    )


def dict_to_session(raw: dict[str, Any], default_tz: tzinfo | None = None) -> Session:
    duration = _int(raw["duration"])
    questions = _int(raw.get("questions") or 0)
    correct = _int(raw.get("correctQuestions") or 0)
    if duration < 1:
        raise ValueError(f"session duration must be >= 1, got {duration}")
    if questions < 0 or not 0 <= correct <= questions:
        raise ValueError(f"invalid question counts {correct}/{questions}")
    return Session(
        id=_int(raw["id"]),
        subject=str(raw["subject"]),
        duration=duration,
        questions=questions,
        correct_questions=correct,
        date=parse_timestamp(str(raw["date"]), default_tz),
        completed=bool(raw.get("completed", True)),
    )


def dict_to_book(raw: dict[str, Any], default_tz: tzinfo | None = None) -> Book:
    authors = raw.get("authors") or []
    if isinstance(authors, str):
        authors = [authors]
    return Book(
        id=str(raw["id"]),
        title=str(raw.get("title") or ""),
        authors=tuple(str(a) for a in authors),
        thumbnail=str(raw.get("thumbnail") or ""),
        added_at=parse_timestamp(str(raw["addedAt"]), default_tz),
        completed=bool(raw.get("completed", False)),
    )
