from __future__ import annotations

from dataclasses import dataclass, field

from study_tracker.models import Book, Preferences, Session, Subject


@dataclass
class StudyState:
    """In-memory copy of one user's persisted data.

    Owned by the user's controller and shared by reference with the timer's
    recorder; every mutation is followed by an explicit save.
    """

    user_id: int
    preferences: Preferences
    subjects: list[Subject] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    library: list[Book] = field(default_factory=list)
    language: str = "en"
