from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ColorMode = str
BackgroundMode = str

COLOR_MODES = ("vibrant", "monochrome")
BACKGROUND_MODES = ("default", "grid", "dots", "aurora", "solid", "stars", "ocean", "sunset")


@dataclass(frozen=True)
class Task:
    id: int
    name: str
    completed: bool = False


@dataclass(frozen=True)
class Chapter:
    id: int
    name: str
    tasks: tuple[Task, ...] = ()


@dataclass(frozen=True)
class Subject:
    id: int
    name: str
    color: str
    chapters: tuple[Chapter, ...] = ()


@dataclass(frozen=True)
class Session:
    id: int
    subject: str
    duration: int
    questions: int
    correct_questions: int
    date: datetime
    completed: bool = True


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    authors: tuple[str, ...]
    thumbnail: str
    added_at: datetime
    completed: bool = False


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    is_unlocked: bool


@dataclass(frozen=True)
class Preferences:
    daily_goal_minutes: int
    primary_color: str
    color_mode: ColorMode
    background_mode: BackgroundMode
    volume: float
    notifications_enabled: bool
